# Configuration management
from pathlib import Path
from typing import Union
import yaml
from pydantic import ValidationError
from ..models.config import AppConfig
from ..utils.exceptions import ConfigurationError

DEFAULT_CONFIG = """
api:
  enabled: true
  host: "127.0.0.1"
  port: 8000

bridge:
  poll_interval: 300
  gateway_type: "type:miio:gateway"
  illuminance_offset: 270
  connector: "gateway_bridge.adapters.simulated:SimulatedConnector"
  gateways:
    - address: "192.168.1.213"
      token: "00000000000000000000000000000000"

logging:
  level: "INFO"
  file: "logs/gateway_bridge.log"
  max_size: 10
  backup_count: 5
  format: "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"
"""


class ConfigManager:
    """Loads and validates the YAML configuration"""

    @staticmethod
    def load_config(config_path: Union[str, Path]) -> AppConfig:
        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing configuration file {config_path}: {e}")
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        if data is None:
            raise ConfigurationError("Configuration file is empty or incorrectly formatted")
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        try:
            return AppConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @staticmethod
    def create_default_config(config_path: Union[str, Path]) -> bool:
        """Write the default configuration if the file doesn't exist yet"""
        config_path = Path(config_path)
        if config_path.exists():
            return False
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(DEFAULT_CONFIG)
        return True
