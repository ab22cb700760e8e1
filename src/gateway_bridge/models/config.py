from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from ..const import (
    DEFAULT_GATEWAY_TYPE,
    DEFAULT_ILLUMINANCE_OFFSET,
    DEFAULT_MANUFACTURER,
    DEFAULT_POLL_INTERVAL,
)

class GatewayConfig(BaseModel):
    """Connection parameters for one gateway, passed through to the connector"""
    model_config = ConfigDict(extra="allow")

    address: str
    token: Optional[str] = None
    name: Optional[str] = None

    def connection_params(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @property
    def label(self) -> str:
        return self.name or self.address


class BridgeConfig(BaseModel):
    gateways: List[GatewayConfig] = Field(default_factory=list)
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    gateway_type: str = DEFAULT_GATEWAY_TYPE
    illuminance_offset: float = DEFAULT_ILLUMINANCE_OFFSET
    manufacturer: str = DEFAULT_MANUFACTURER
    connector: str = "gateway_bridge.adapters.simulated:SimulatedConnector"


class APIConfig(BaseModel):
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8000


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None
    max_size: int = 10
    backup_count: int = 5
    format: Optional[str] = None


class AppConfig(BaseModel):
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
