# Capability registry: which services a device gets, based on its capability tags
from enum import Enum
from typing import Callable, Dict, List, Optional
from ..adapters.base import BaseDevice
from ..const import (
    EVENT_ACTION,
    EVENT_BATTERY_CHANGED,
    EVENT_HUMIDITY_CHANGED,
    EVENT_ILLUMINANCE_CHANGED,
    EVENT_INACTIVITY,
    EVENT_MOVEMENT,
    EVENT_TEMPERATURE_CHANGED,
    ILLUMINANCE_MAX_VALUE,
    TYPE_LIGHT,
)
from ..utils.exceptions import ConfigurationError
from .accessory import (
    Accessory,
    ChargingState,
    CharacteristicType,
    ProgrammableSwitchEvent,
    ServiceType,
)
from .binding import BindingContext, bind_power, bind_sensor
from .light import create_gateway_light


class Capability(str, Enum):
    ACTIONS = "cap:actions"
    TEMPERATURE = "cap:temperature"
    MOTION = "cap:motion"
    ILLUMINANCE = "cap:illuminance"
    BATTERY_LEVEL = "cap:battery-level"
    RELATIVE_HUMIDITY = "cap:relative-humidity"
    SWITCHABLE_POWER = "cap:switchable-power"


LIGHT = "light"

ACTION_MAP: Dict[str, int] = {
    "click": ProgrammableSwitchEvent.SINGLE_PRESS,
    "double_click": ProgrammableSwitchEvent.DOUBLE_PRESS,
    "long_click_press": ProgrammableSwitchEvent.LONG_PRESS,
}

WiringFn = Callable[[BindingContext, BaseDevice, Accessory], None]


def add_switch(context: BindingContext, device: BaseDevice, accessory: Accessory) -> None:
    context.logger.debug("Adding Switch service")
    service = accessory.find_or_create_service(ServiceType.STATELESS_PROGRAMMABLE_SWITCH, "Click")
    switch_event = service.get_characteristic(CharacteristicType.PROGRAMMABLE_SWITCH_EVENT)

    def handle_action(event: Dict) -> None:
        action = event.get("action")
        context.logger.debug(f"Button clicked. Action: {action}")
        press = ACTION_MAP.get(action)
        if press is None:
            context.logger.debug(f"Action {action} not implemented, doing nothing")
            return
        switch_event.update_value(press)

    device.on(EVENT_ACTION, handle_action)


def add_temperature_sensor(context: BindingContext, device: BaseDevice, accessory: Accessory) -> None:
    context.logger.debug("Adding Temperature Sensor service")
    service = accessory.find_or_create_service(ServiceType.TEMPERATURE_SENSOR, "Temperature")
    bind_sensor(
        context,
        device,
        service.get_characteristic(CharacteristicType.CURRENT_TEMPERATURE),
        EVENT_TEMPERATURE_CHANGED,
        device.temperature,
        label="temperature",
    )


def add_motion_sensor(context: BindingContext, device: BaseDevice, accessory: Accessory) -> None:
    context.logger.debug("Adding Motion Sensor service")
    service = accessory.find_or_create_service(ServiceType.MOTION_SENSOR, "Motion")
    motion = service.get_characteristic(CharacteristicType.MOTION_DETECTED)
    motion.update_value(False)

    def handle_movement(*_) -> None:
        context.logger.debug(f"Motion detected by {device}")
        motion.update_value(True)

    def handle_inactivity(*_) -> None:
        context.logger.debug(f"No more motion at {device}")
        motion.update_value(False)

    device.on(EVENT_MOVEMENT, handle_movement)
    device.on(EVENT_INACTIVITY, handle_inactivity)


def add_illumination(context: BindingContext, device: BaseDevice, accessory: Accessory) -> None:
    context.logger.debug("Adding Light Sensor service")
    service = accessory.find_or_create_service(ServiceType.LIGHT_SENSOR, "Light Sensor")
    light_level = service.get_characteristic(CharacteristicType.CURRENT_AMBIENT_LIGHT_LEVEL)
    light_level.set_props(max_value=ILLUMINANCE_MAX_VALUE)

    offset = context.illuminance_offset if device.matches(context.gateway_type) else 0
    bind_sensor(
        context,
        device,
        light_level,
        EVENT_ILLUMINANCE_CHANGED,
        device.illuminance,
        transform=lambda value: value - offset,
        label="illuminance",
    )


def add_battery_level(context: BindingContext, device: BaseDevice, accessory: Accessory) -> None:
    context.logger.debug("Adding Battery Level service")
    service = accessory.find_or_create_service(ServiceType.BATTERY, "Battery Level")
    service.update_characteristic(CharacteristicType.CHARGING_STATE, ChargingState.NOT_CHARGEABLE)
    bind_sensor(
        context,
        device,
        service.get_characteristic(CharacteristicType.BATTERY_LEVEL),
        EVENT_BATTERY_CHANGED,
        device.battery_level,
        label="battery level",
    )


def add_humidity(context: BindingContext, device: BaseDevice, accessory: Accessory) -> None:
    context.logger.debug("Adding Humidity service")
    service = accessory.find_or_create_service(ServiceType.HUMIDITY_SENSOR, "Humidity")
    bind_sensor(
        context,
        device,
        service.get_characteristic(CharacteristicType.CURRENT_RELATIVE_HUMIDITY),
        EVENT_HUMIDITY_CHANGED,
        device.relative_humidity,
        label="humidity",
    )


def add_switchable_power(context: BindingContext, device: BaseDevice, accessory: Accessory) -> None:
    context.logger.debug("Adding Power Plug")
    service = accessory.find_or_create_service(ServiceType.OUTLET, "Plug")
    # Don't know, so assume true
    service.update_characteristic(CharacteristicType.OUTLET_IN_USE, True)
    bind_power(context, device, service.get_characteristic(CharacteristicType.ON))


def add_light(context: BindingContext, device: BaseDevice, accessory: Accessory) -> None:
    context.logger.debug("Creating custom light bulb")
    create_gateway_light(context, device, accessory)


class CapabilityRegistry:
    """Maps capability tags to the functions that wire them onto an accessory.

    Every Capability must have a wiring function. Capabilities are applied in
    declaration order of the Capability enum.
    """
    default_wiring: Dict[Capability, WiringFn] = {
        Capability.ACTIONS: add_switch,
        Capability.TEMPERATURE: add_temperature_sensor,
        Capability.MOTION: add_motion_sensor,
        Capability.ILLUMINANCE: add_illumination,
        Capability.BATTERY_LEVEL: add_battery_level,
        Capability.RELATIVE_HUMIDITY: add_humidity,
        Capability.SWITCHABLE_POWER: add_switchable_power,
    }

    def __init__(self, context: BindingContext, wiring: Optional[Dict[Capability, WiringFn]] = None,
                 light_wiring: WiringFn = add_light):
        self.context = context
        self.wiring = dict(self.default_wiring if wiring is None else wiring)
        self.light_wiring = light_wiring
        missing = [capability.value for capability in Capability if capability not in self.wiring]
        if missing:
            raise ConfigurationError(f"No wiring for capabilities: {', '.join(missing)}")

    def matching_capabilities(self, device: BaseDevice) -> List[str]:
        """Names of the wirings decorate_accessory would apply, in order"""
        if device.matches(TYPE_LIGHT, Capability.SWITCHABLE_POWER.value):
            return [LIGHT]
        return [capability.value for capability in Capability if device.matches(capability.value)]

    def decorate_accessory(self, accessory: Accessory, device: BaseDevice) -> List[str]:
        """Add services for every matching capability, returns what was applied"""
        self.context.logger.debug(f"Decorating {accessory.display_name} for {device}")
        applied = self.matching_capabilities(device)
        for name in applied:
            if name == LIGHT:
                self.light_wiring(self.context, device, accessory)
            else:
                self.wiring[Capability(name)](self.context, device, accessory)
        return applied
