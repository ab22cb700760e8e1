# src/gateway_bridge/__main__.py
import argparse
import asyncio
import importlib
import signal
import sys
import traceback
from pathlib import Path
from typing import Optional
from fastapi import FastAPI
from hypercorn.asyncio import serve
from hypercorn.config import Config as HyperConfig

from gateway_bridge.adapters.base import DeviceConnector
from gateway_bridge.api.endpoints.accessories import accessory_router
from gateway_bridge.api.routes import gateway_router
from gateway_bridge.core.config_manager import ConfigManager
from gateway_bridge.core.platform import BridgePlatform
from gateway_bridge.models.config import APIConfig, AppConfig
from gateway_bridge.utils.exceptions import ConfigurationError, InitializationError
from gateway_bridge.utils.logging import setup_logging, get_logger

DEFAULT_CONFIG_PATH = "config/gateway_bridge.yml"


class AppState:
    """Holds application state and components"""
    def __init__(self):
        self.platform: Optional[BridgePlatform] = None


def load_connector(import_path: str) -> DeviceConnector:
    """Instantiate a connector from a "module:ClassName" path"""
    module_name, _, attr = import_path.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"Connector must look like 'module:ClassName', got {import_path!r}")
    try:
        connector_class = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot load connector {import_path}: {e}")
    connector = connector_class()
    if not isinstance(connector, DeviceConnector):
        raise ConfigurationError(f"{import_path} is not a DeviceConnector")
    return connector


class APIServer:
    """Handles API server initialization and management"""

    def __init__(self, config: APIConfig, shutdown_event: asyncio.Event, app_state: AppState):
        self.config = config
        self.shutdown_event = shutdown_event
        self.logger = get_logger("API Server")
        self.app: Optional[FastAPI] = None
        self.app_state = app_state

    def initialize(self) -> FastAPI:
        """Initialize FastAPI application with routes"""
        try:
            self.app = FastAPI(
                title="Gateway Bridge API",
                description="Accessories and gateways exposed by the gateway bridge",
                version="1.0.0"
            )

            # Store app state for dependency injection
            self.app.state.components = self.app_state

            self.app.include_router(accessory_router, prefix="/api/v1")
            self.app.include_router(gateway_router, prefix="/api/v1")

            return self.app
        except Exception:
            raise InitializationError(f"Failed to initialize API server: {traceback.format_exc()}")

    async def start(self):
        """Start the API server"""
        if not self.app:
            self.initialize()

        hypercorn_config = HyperConfig()
        hypercorn_config.bind = [f"{self.config.host}:{self.config.port}"]

        async def shutdown_trigger():
            await self.shutdown_event.wait()

        self.logger.info(f"Starting API server on {self.config.host}:{self.config.port}")
        await serve(self.app, hypercorn_config, shutdown_trigger=shutdown_trigger)


class BridgeApp:
    """Main gateway bridge application class"""

    def __init__(self, config: AppConfig):
        self.logger = get_logger("Main App")
        self.config = config
        self.shutdown_event = asyncio.Event()
        self.app_state = AppState()
        self.api_server = APIServer(self.config.api, self.shutdown_event, self.app_state)

    def initialize_components(self):
        try:
            connector = load_connector(self.config.bridge.connector)
        except ConfigurationError as e:
            raise InitializationError(str(e))
        self.app_state.platform = BridgePlatform(self.config.bridge, connector)
        self.logger.info("All components initialized successfully")

    async def shutdown(self):
        """Gracefully shutdown all components"""
        self.logger.info("Initiating shutdown sequence")
        if self.app_state.platform:
            await self.app_state.platform.stop()
        self.shutdown_event.set()
        self.logger.info("Shutdown completed successfully")

    def handle_signals(self):
        """Set up signal handlers for graceful shutdown"""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda sig=sig: loop.create_task(self._on_signal(sig)))

    async def _on_signal(self, sig):
        self.logger.info(f"Received signal {sig.name}")
        await self.shutdown()

    async def run(self):
        """Main application entry point"""
        try:
            self.handle_signals()
            self.initialize_components()
            await self.app_state.platform.start()

            if self.config.api.enabled:
                await self.api_server.start()
            else:
                await self.shutdown_event.wait()
        except InitializationError:
            self.logger.error(f"Initialization error: {traceback.format_exc()}")
            await self.shutdown()
            sys.exit(1)


def main():
    """Application entry point"""
    parser = argparse.ArgumentParser(prog="gateway-bridge", description="Expose gateway devices as accessories")
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG_PATH, help="Path to the YAML configuration")
    args = parser.parse_args()

    logger = get_logger("Main App")
    config_path = Path(args.config)
    if ConfigManager.create_default_config(config_path):
        print(f"Created default config at {config_path}")

    try:
        config = ConfigManager.load_config(config_path)
    except ConfigurationError:
        logger.error(f"Configuration error: {traceback.format_exc()}")
        sys.exit(1)
    setup_logging(config.logging.model_dump())

    app = BridgeApp(config)
    asyncio.run(app.run())


if __name__ == "__main__":
    main()
