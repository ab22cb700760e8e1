# Host-facing accessory model: accessories group services, services group characteristics
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional
from ..utils.exceptions import ReadOnlyCharacteristicError
from ..utils.logging import get_logger

logger = get_logger(__name__)

ACCESSORY_NAMESPACE = uuid.UUID("6f1c8f7e-2a4b-4c1e-9d8e-3b5a7c9e1f20")

GetHandler = Callable[[], Any]
SetHandler = Callable[[Any], Awaitable[None]]


class ServiceType(str, Enum):
    ACCESSORY_INFORMATION = "accessory-information"
    LIGHTBULB = "lightbulb"
    OUTLET = "outlet"
    TEMPERATURE_SENSOR = "temperature-sensor"
    HUMIDITY_SENSOR = "humidity-sensor"
    LIGHT_SENSOR = "light-sensor"
    MOTION_SENSOR = "motion-sensor"
    BATTERY = "battery"
    STATELESS_PROGRAMMABLE_SWITCH = "stateless-programmable-switch"


class CharacteristicType(str, Enum):
    NAME = "name"
    MANUFACTURER = "manufacturer"
    MODEL = "model"
    SERIAL_NUMBER = "serial-number"
    ON = "on"
    BRIGHTNESS = "brightness"
    HUE = "hue"
    SATURATION = "saturation"
    OUTLET_IN_USE = "outlet-in-use"
    CURRENT_TEMPERATURE = "current-temperature"
    CURRENT_RELATIVE_HUMIDITY = "current-relative-humidity"
    CURRENT_AMBIENT_LIGHT_LEVEL = "current-ambient-light-level"
    MOTION_DETECTED = "motion-detected"
    BATTERY_LEVEL = "battery-level"
    CHARGING_STATE = "charging-state"
    PROGRAMMABLE_SWITCH_EVENT = "programmable-switch-event"


class ProgrammableSwitchEvent:
    SINGLE_PRESS = 0
    DOUBLE_PRESS = 1
    LONG_PRESS = 2


class ChargingState:
    NOT_CHARGING = 0
    CHARGING = 1
    NOT_CHARGEABLE = 2


DEFAULT_PROPS: Dict[CharacteristicType, Dict[str, Any]] = {
    CharacteristicType.BRIGHTNESS: {"min_value": 0, "max_value": 100},
    CharacteristicType.HUE: {"min_value": 0, "max_value": 360},
    CharacteristicType.SATURATION: {"min_value": 0, "max_value": 100},
    CharacteristicType.CURRENT_TEMPERATURE: {"min_value": -100, "max_value": 100},
    CharacteristicType.CURRENT_RELATIVE_HUMIDITY: {"min_value": 0, "max_value": 100},
    CharacteristicType.CURRENT_AMBIENT_LIGHT_LEVEL: {"min_value": 0.0001, "max_value": 100000},
    CharacteristicType.BATTERY_LEVEL: {"min_value": 0, "max_value": 100},
}


class Characteristic:
    """A single observable value slot.

    The host reads through ``handle_get`` and writes through ``handle_set``;
    device side code pushes new values with ``update_value``. Without a get
    handler the last pushed value is returned, without a set handler the
    characteristic is read-only for the host.
    """
    def __init__(self, ctype: CharacteristicType, value: Any = None):
        self.ctype = ctype
        self.value = value
        self.props: Dict[str, Any] = dict(DEFAULT_PROPS.get(ctype, {}))
        self._get_handler: Optional[GetHandler] = None
        self._set_handler: Optional[SetHandler] = None
        self._listeners: List[Callable[["Characteristic", Any], None]] = []

    def __repr__(self) -> str:
        return f"<Characteristic {self.ctype.value}={self.value!r}>"

    @property
    def writable(self) -> bool:
        return self._set_handler is not None

    def on_get(self, handler: GetHandler) -> "Characteristic":
        self._get_handler = handler
        return self

    def on_set(self, handler: SetHandler) -> "Characteristic":
        self._set_handler = handler
        return self

    def set_props(self, **props: Any) -> "Characteristic":
        self.props.update(props)
        return self

    def subscribe(self, listener: Callable[["Characteristic", Any], None]) -> None:
        """Register a callback for values pushed with update_value"""
        self._listeners.append(listener)

    def update_value(self, value: Any) -> "Characteristic":
        self.value = value
        for listener in list(self._listeners):
            listener(self, value)
        return self

    def handle_get(self) -> Any:
        if self._get_handler is None:
            return self.value
        return self._get_handler()

    async def handle_set(self, value: Any) -> None:
        if self._set_handler is None:
            raise ReadOnlyCharacteristicError(f"{self.ctype.value} is read-only")
        await self._set_handler(value)
        if self._get_handler is None:
            self.value = value


class Service:
    def __init__(self, stype: ServiceType, name: Optional[str] = None):
        self.stype = stype
        self.name = name or stype.value
        self.characteristics: Dict[CharacteristicType, Characteristic] = {}

    def __repr__(self) -> str:
        return f"<Service {self.stype.value} {self.name!r}>"

    def get_characteristic(self, ctype: CharacteristicType) -> Characteristic:
        """Return the characteristic, creating it on first use"""
        if ctype not in self.characteristics:
            self.characteristics[ctype] = Characteristic(ctype)
        return self.characteristics[ctype]

    def update_characteristic(self, ctype: CharacteristicType, value: Any) -> "Service":
        self.get_characteristic(ctype).update_value(value)
        return self


class Accessory:
    """A host-side accessory backed by one device"""

    def __init__(self, display_name: str, accessory_uuid: str):
        self.display_name = display_name
        self.uuid = accessory_uuid
        self.reachable = True
        self.is_new = False
        self.services: List[Service] = [
            Service(ServiceType.ACCESSORY_INFORMATION, display_name)
        ]
        self.information.update_characteristic(CharacteristicType.NAME, display_name)

    def __repr__(self) -> str:
        return f"<Accessory {self.display_name!r} {self.uuid}>"

    @staticmethod
    def generate_uuid(device_id: str) -> str:
        return str(uuid.uuid5(ACCESSORY_NAMESPACE, str(device_id)))

    @property
    def information(self) -> Service:
        return self.get_service(ServiceType.ACCESSORY_INFORMATION)

    def get_service(self, stype: ServiceType, name: Optional[str] = None) -> Optional[Service]:
        for service in self.services:
            if service.stype == stype and (name is None or service.name == name):
                return service
        return None

    def add_service(self, stype: ServiceType, name: Optional[str] = None) -> Service:
        service = Service(stype, name)
        self.services.append(service)
        return service

    def find_or_create_service(self, stype: ServiceType, name: Optional[str] = None) -> Service:
        return self.get_service(stype, name) or self.add_service(stype, name)

    def has_real_services(self) -> bool:
        """Whether any service besides information and battery was added"""
        return any(
            service.stype not in (ServiceType.ACCESSORY_INFORMATION, ServiceType.BATTERY)
            for service in self.services
        )

    def update_reachability(self, reachable: bool) -> None:
        if reachable != self.reachable:
            logger.info(f"{self.display_name} is now {'reachable' if reachable else 'unreachable'}")
        self.reachable = reachable
