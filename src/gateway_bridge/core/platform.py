# Bridge platform: owns accessories and one supervisor per configured gateway
import asyncio
from typing import Dict, List, Optional
from ..adapters.base import BaseDevice, DeviceConnector
from ..models.config import BridgeConfig
from ..utils.logging import get_logger
from .accessory import Accessory, CharacteristicType
from .binding import BindingContext
from .capabilities import CapabilityRegistry
from .gateway import GatewaySupervisor

logger = get_logger(__name__)


class BridgePlatform:
    def __init__(self, config: BridgeConfig, connector: DeviceConnector,
                 context: Optional[BindingContext] = None):
        self.config = config
        self.connector = connector
        self.context = context or BindingContext(
            gateway_type=config.gateway_type,
            illuminance_offset=config.illuminance_offset,
        )
        self.registry = CapabilityRegistry(self.context)
        self.accessories: Dict[str, Accessory] = {}
        self.registered: Dict[str, Accessory] = {}
        self.supervisors: List[GatewaySupervisor] = []

    def configure_accessory(self, accessory: Accessory) -> None:
        """Restore an accessory the host had cached from a previous run"""
        logger.debug(f"Loading existing accessory {accessory.uuid}")
        self.accessories[accessory.uuid] = accessory
        self.registered[accessory.uuid] = accessory

    def find_or_create_accessory(self, device: BaseDevice) -> Accessory:
        accessory_uuid = Accessory.generate_uuid(device.device_id)
        accessory = self.accessories.get(accessory_uuid)
        if accessory is not None:
            logger.debug(f"Found existing accessory with uuid {accessory_uuid}")
        else:
            logger.debug(f"Creating new accessory with uuid {accessory_uuid}")
            accessory = Accessory(f"{device.model} {device.device_id}", accessory_uuid)
            accessory.is_new = True
            self.accessories[accessory_uuid] = accessory

        info = accessory.information
        info.update_characteristic(CharacteristicType.MANUFACTURER, self.config.manufacturer)
        info.update_characteristic(CharacteristicType.MODEL, device.model)
        info.update_characteristic(CharacteristicType.SERIAL_NUMBER, device.device_id)

        accessory.update_reachability(True)
        return accessory

    def register_accessories(self, accessories: List[Accessory]) -> None:
        for accessory in accessories:
            logger.info(f"Registering {accessory.display_name} with the host")
            self.registered[accessory.uuid] = accessory
            accessory.is_new = False

    def add_connected_device(self, device: BaseDevice) -> Accessory:
        logger.debug(f"Found a device {device}")
        accessory = self.find_or_create_accessory(device)
        self.registry.decorate_accessory(accessory, device)

        # Every accessory starts with an information service
        if accessory.has_real_services():
            logger.debug(f"Got {len(accessory.services)} services for {accessory.display_name}")
            if accessory.is_new:
                self.register_accessories([accessory])
        else:
            logger.debug(f"Looks like we didn't add any services to this {device.model}, skipping it")

        return accessory

    async def start(self) -> None:
        """Start supervising every configured gateway"""
        self.supervisors = [
            GatewaySupervisor(
                gateway_config,
                self.connector,
                self,
                poll_interval=self.config.poll_interval,
                gateway_type=self.config.gateway_type,
            )
            for gateway_config in self.config.gateways
        ]
        if not self.supervisors:
            logger.warning("No gateways configured")
        await asyncio.gather(*(supervisor.start() for supervisor in self.supervisors))

    async def stop(self) -> None:
        for supervisor in self.supervisors:
            await supervisor.stop()
        logger.info("Platform stopped")

    def get_accessory(self, accessory_uuid: str) -> Optional[Accessory]:
        return self.accessories.get(accessory_uuid)
