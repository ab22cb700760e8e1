# In-memory gateway for local runs and tests, no network access
import hashlib
from typing import Any, Dict, List, Optional
from .base import BaseDevice, DeviceConnector
from ..const import (
    CAP_BRIGHTNESS,
    CAP_COLORABLE,
    CAP_DIMMABLE,
    DEFAULT_GATEWAY_TYPE,
    EVENT_BATTERY_CHANGED,
    EVENT_BRIGHTNESS_CHANGED,
    EVENT_HUMIDITY_CHANGED,
    EVENT_ILLUMINANCE_CHANGED,
    EVENT_POWER_CHANGED,
    EVENT_TEMPERATURE_CHANGED,
    TYPE_LIGHT,
)
from ..utils.color import HSLColor, pack_rgb, unpack_rgb
from ..utils.exceptions import DeviceError
from ..utils.logging import get_logger

logger = get_logger(__name__)

PROPERTY_EVENTS = {
    "power": EVENT_POWER_CHANGED,
    "brightness": EVENT_BRIGHTNESS_CHANGED,
    "temperature": EVENT_TEMPERATURE_CHANGED,
    "relative_humidity": EVENT_HUMIDITY_CHANGED,
    "illuminance": EVENT_ILLUMINANCE_CHANGED,
    "battery_level": EVENT_BATTERY_CHANGED,
}


class SimulatedDevice(BaseDevice):
    """Device whose properties live in a dict.

    Writes update the dict and emit the matching change event, like a real
    device confirming a command.
    """
    def __init__(self, device_id: str, model: str, capabilities: List[str],
                 properties: Optional[Dict[str, Any]] = None,
                 parent: Optional[BaseDevice] = None):
        super().__init__(device_id, model, capabilities, parent=parent)
        self.properties: Dict[str, Any] = dict(properties or {})
        self.online = True
        self.writes: List[tuple] = []

    def _ensure_online(self) -> None:
        if not self.online:
            raise DeviceError(f"{self} is not responding")

    async def read_property(self, name: str) -> Any:
        self._ensure_online()
        if name not in self.properties:
            raise DeviceError(f"{self} has no property {name}")
        return self.properties[name]

    async def write_property(self, name: str, value: Any) -> None:
        self._ensure_online()
        logger.debug(f"{self} {name} <- {value!r}")
        self.writes.append((name, value))
        if name == "power" and "brightness" in self.properties and not value:
            # Lights report off as brightness 0
            self.update_property("brightness", 0)
        self.update_property(name, value)

    def update_property(self, name: str, value: Any) -> None:
        """Change a property as if the device reported it"""
        self.properties[name] = value
        if name in PROPERTY_EVENTS:
            self.emit(PROPERTY_EVENTS[name], value)

    async def poll(self) -> None:
        self._ensure_online()


class SimulatedLight(SimulatedDevice):
    async def color(self) -> HSLColor:
        self._ensure_online()
        _, red, green, blue = unpack_rgb(self.gateway.rgb)
        return HSLColor.from_rgb(red, green, blue)


class SimulatedGateway(SimulatedDevice):
    def __init__(self, device_id: str, model: str = "lumi.gateway.v3",
                 capabilities: Optional[List[str]] = None,
                 properties: Optional[Dict[str, Any]] = None):
        super().__init__(
            device_id,
            model,
            capabilities if capabilities is not None else [DEFAULT_GATEWAY_TYPE, "cap:illuminance"],
            properties if properties is not None else {"illuminance": 500},
        )
        self.rgb = pack_rgb(50, 255, 255, 255)
        self.calls: List[tuple] = []
        self._children: List[BaseDevice] = []

    def add_child(self, child: BaseDevice) -> BaseDevice:
        child.parent = self
        self._children.append(child)
        return child

    def children(self) -> List[BaseDevice]:
        return list(self._children)

    async def call(self, method: str, params: Optional[List[Any]] = None,
                   refresh: Optional[List[str]] = None) -> Any:
        self._ensure_online()
        self.calls.append((method, list(params or [])))
        if method == "set_rgb":
            self.rgb = int(params[0])
            return ["ok"]
        raise DeviceError(f"Unsupported method {method}")


def build_demo_gateway(device_id: str) -> SimulatedGateway:
    """A gateway with one device of every supported kind"""
    gateway = SimulatedGateway(device_id)
    gateway.add_child(SimulatedLight(
        f"light.{device_id}",
        "lumi.gateway.light",
        [TYPE_LIGHT, "cap:switchable-power", CAP_BRIGHTNESS, CAP_DIMMABLE, CAP_COLORABLE],
        {"power": True, "brightness": 50},
    ))
    gateway.add_child(SimulatedDevice(
        f"plug.{device_id}", "lumi.plug", ["cap:switchable-power"], {"power": False},
    ))
    gateway.add_child(SimulatedDevice(
        f"sensor_ht.{device_id}",
        "lumi.sensor_ht",
        ["cap:temperature", "cap:relative-humidity", "cap:battery-level"],
        {"temperature": 21.5, "relative_humidity": 40, "battery_level": 87},
    ))
    gateway.add_child(SimulatedDevice(
        f"motion.{device_id}", "lumi.motion", ["cap:motion", "cap:battery-level"], {"battery_level": 64},
    ))
    gateway.add_child(SimulatedDevice(
        f"switch.{device_id}", "lumi.switch", ["cap:actions", "cap:battery-level"], {"battery_level": 90},
    ))
    gateway.add_child(SimulatedDevice(f"magnet.{device_id}", "lumi.magnet", ["cap:contact"]))
    return gateway


class SimulatedConnector(DeviceConnector):
    """Resolves every address to a demo gateway.

    ``failures`` makes that many leading connect attempts raise.
    """
    def __init__(self, failures: int = 0):
        self.failures = failures
        self.attempts = 0
        self.gateways: Dict[str, SimulatedGateway] = {}

    async def connect(self, params: Dict[str, Any]) -> BaseDevice:
        self.attempts += 1
        address = params.get("address")
        if self.attempts <= self.failures:
            raise DeviceError(f"No response from {address}")
        if address not in self.gateways:
            device_id = hashlib.sha1(str(address).encode()).hexdigest()[:8]
            self.gateways[address] = build_demo_gateway(device_id)
        return self.gateways[address]
