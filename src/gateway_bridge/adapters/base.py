# Device access surface consumed by the bridge.
# Concrete device protocols live outside this package; each one implements
# BaseDevice for a device and DeviceConnector for resolving a gateway.

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional
from ..core.event_manager import EventManager
from ..utils.color import HSLColor
from ..utils.exceptions import DeviceError


class BaseDevice(ABC):
    """Base class for all device implementations.

    Exposes a device's capability tags, its async property reads and writes
    and change notifications through ``on``.
    """
    def __init__(self, device_id: str, model: str, capabilities: Iterable[str],
                 parent: Optional["BaseDevice"] = None):
        self.device_id = device_id
        self.model = model
        self.capabilities: FrozenSet[str] = frozenset(capabilities)
        self.parent = parent
        self.events = EventManager()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.model} {self.device_id}>"

    @property
    def gateway(self) -> "BaseDevice":
        """The root device commands are routed through."""
        return self.parent.gateway if self.parent else self

    def matches(self, *tags: str) -> bool:
        """True when every tag is present in the device's capability set."""
        return all(tag in self.capabilities for tag in tags)

    def on(self, event_name: str, handler: Callable[..., Any]) -> None:
        self.events.subscribe(event_name, handler)

    def emit(self, event_name: str, *args: Any) -> int:
        return self.events.publish(event_name, *args)

    def children(self) -> List["BaseDevice"]:
        """Child devices attached to this device. Override for gateways."""
        return []

    @abstractmethod
    async def read_property(self, name: str) -> Any:
        """Read the current value of a device property"""
        pass

    @abstractmethod
    async def write_property(self, name: str, value: Any) -> None:
        """Write a device property"""
        pass

    async def call(self, method: str, params: Optional[List[Any]] = None,
                   refresh: Optional[List[str]] = None) -> Any:
        """Issue a raw command. Override on devices that accept them."""
        raise DeviceError(f"{self} does not accept raw command {method}")

    @abstractmethod
    async def poll(self) -> None:
        """Liveness probe, raises when the device does not answer"""
        pass

    async def power(self) -> bool:
        return bool(await self.read_property("power"))

    async def change_power(self, value: bool) -> None:
        await self.write_property("power", bool(value))

    async def brightness(self) -> int:
        return await self.read_property("brightness")

    async def set_brightness(self, value: int) -> None:
        await self.write_property("brightness", value)

    async def color(self) -> HSLColor:
        return await self.read_property("color")

    async def temperature(self) -> float:
        return await self.read_property("temperature")

    async def relative_humidity(self) -> float:
        return await self.read_property("relative_humidity")

    async def illuminance(self) -> float:
        return await self.read_property("illuminance")

    async def battery_level(self) -> int:
        return await self.read_property("battery_level")

    async def cleanup(self) -> None:
        """Cleanup resources. Override if needed."""
        pass


class DeviceConnector(ABC):
    """Resolves a root device from its connection parameters"""

    @abstractmethod
    async def connect(self, params: Dict[str, Any]) -> BaseDevice:
        pass
