"""Gateway supervision: discovery, attaching devices and liveness polling.

A supervisor moves through ``discovering -> attached -> polling``. Discovery
is retried once, immediately; a second failure or a device that is not a
gateway leaves the supervisor ``failed`` for the rest of the process. Poll
failures only flip the root accessory's reachability.
"""
import asyncio
import contextlib
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional
from ..adapters.base import BaseDevice, DeviceConnector
from ..models.config import GatewayConfig
from ..utils.exceptions import ConfigurationError, DiscoveryError
from ..utils.logging import get_logger
from ..utils.retry import async_retry_with_backoff
from .accessory import Accessory

if TYPE_CHECKING:
    from .platform import BridgePlatform

logger = get_logger(__name__)


class GatewayState(str, Enum):
    DISCOVERING = "discovering"
    ATTACHED = "attached"
    POLLING = "polling"
    FAILED = "failed"


@dataclass
class GatewaySession:
    device: BaseDevice
    accessory: Accessory
    child_accessories: List[Accessory] = field(default_factory=list)
    poll_task: Optional[asyncio.Task] = None


class GatewaySupervisor:
    def __init__(self, config: GatewayConfig, connector: DeviceConnector,
                 platform: "BridgePlatform", poll_interval: float, gateway_type: str):
        self.config = config
        self.connector = connector
        self.platform = platform
        self.poll_interval = poll_interval
        self.gateway_type = gateway_type
        self.state = GatewayState.DISCOVERING
        self.session: Optional[GatewaySession] = None
        self.error: Optional[str] = None
        self.attempts = 0

    @property
    def reachable(self) -> Optional[bool]:
        return self.session.accessory.reachable if self.session else None

    async def start(self) -> bool:
        """Discover, attach and start polling. Returns False when the gateway failed."""
        try:
            device = await self.discover()
        except ConfigurationError as e:
            self._fail(f"Configured device is not a compatible gateway: {e}")
            return False
        except Exception as e:
            self._fail(f"Gateway {self.config.label} could not be found after retry: {e}")
            return False

        try:
            self.attach(device)
        except Exception as e:
            self._fail(f"Gateway {self.config.label} could not be attached: {e}")
            return False

        self.start_polling()
        return True

    def _fail(self, message: str) -> None:
        self.state = GatewayState.FAILED
        self.error = message
        logger.error(message)

    @async_retry_with_backoff(max_retries=1, base_delay=0, jitter=False, giveup=(ConfigurationError,))
    async def discover(self) -> BaseDevice:
        self.state = GatewayState.DISCOVERING
        self.attempts += 1
        logger.info(f"Finding gateway {self.config.label}")
        try:
            device = await self.connector.connect(self.config.connection_params())
        except Exception as e:
            raise DiscoveryError(f"Error while discovering gateway {self.config.label}: {e}") from e

        logger.info(f"Device found for gateway {self.config.label}: {device}")
        if not device.matches(self.gateway_type):
            raise ConfigurationError(f"{self.config.label} resolved to {device}, expected {self.gateway_type}")
        return device

    def attach(self, device: BaseDevice) -> GatewaySession:
        logger.debug("Looking for connected devices...")
        accessory = self.platform.add_connected_device(device)
        children = [
            self.platform.add_connected_device(child)
            for child in self._descendants(device)
        ]
        self.session = GatewaySession(device=device, accessory=accessory, child_accessories=children)
        self.state = GatewayState.ATTACHED
        logger.info(f"Attached gateway {self.config.label} with {len(children)} child devices")
        return self.session

    def _descendants(self, device: BaseDevice) -> List[BaseDevice]:
        found = []
        for child in device.children():
            found.append(child)
            found.extend(self._descendants(child))
        return found

    def start_polling(self) -> None:
        # Regular polling, otherwise the gateway might time out
        logger.debug(f"Polling with interval {self.poll_interval}s")
        self.session.poll_task = asyncio.get_running_loop().create_task(
            self._poll_loop(), name=f"poll-{self.config.label}"
        )
        self.state = GatewayState.POLLING

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            await self.poll_once()

    async def poll_once(self) -> bool:
        accessory = self.session.accessory
        try:
            await self.session.device.poll()
        except Exception as e:
            logger.warning(f"Device did not respond to poll: {e}")
            accessory.update_reachability(False)
            return False
        accessory.update_reachability(True)
        return True

    async def stop(self) -> None:
        if self.session and self.session.poll_task:
            self.session.poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.session.poll_task
            self.session.poll_task = None
