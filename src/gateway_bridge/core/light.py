# Light wiring: power, brightness and color on a single Lightbulb service
from typing import Any, Callable, Optional
from ..adapters.base import BaseDevice
from ..const import (
    CAP_BRIGHTNESS,
    CAP_COLORABLE,
    CAP_DIMMABLE,
    DEFAULT_BRIGHTNESS,
    EVENT_BRIGHTNESS_CHANGED,
    FULL_BRIGHTNESS,
)
from ..utils.color import HSLColor, pack_rgb
from .accessory import Accessory, Characteristic, CharacteristicType, Service, ServiceType
from .binding import BindingContext, TwoWayBinding, bind_power
from .scheduler import DeferredTask


class BrightnessBinding(TwoWayBinding):
    """Brightness binding that also drives the light's power characteristic.

    The device reports "off" as brightness 0 while the host models power as
    its own boolean. A pushed 0 therefore turns the power characteristic off
    and keeps the last non-zero brightness, which is what power-on restores.
    """
    def __init__(self, context: BindingContext, device: BaseDevice,
                 brightness: Characteristic, on_state: Characteristic):
        super().__init__(
            context,
            device,
            brightness,
            EVENT_BRIGHTNESS_CHANGED,
            read_fn=device.brightness,
            write_fn=device.set_brightness,
            default=DEFAULT_BRIGHTNESS,
            label="brightness",
        )
        self.on_state = on_state
        self.power = False

    def attach(self) -> "BrightnessBinding":
        super().attach()
        self.on_state.on_get(self.handle_power_get)
        self.on_state.on_set(self.handle_power_set)
        return self

    def publish(self, value: Any) -> None:
        if value == 0:
            self.log.debug(f"Turning off {self.device}, brightness is 0")
            self.power = False
            self.on_state.update_value(False)
            return

        self.power = True
        self.current_value = value
        self.characteristic.update_value(value)
        self.on_state.update_value(True)

    async def handle_set(self, value: Any) -> None:
        # Equal brightness is only redundant while the light is on
        if self.power and value == self.current_value:
            self.log.debug(f"Brightness of {self.device} already {value!r}, skipping device write")
            return

        self.log.debug(f"Setting brightness to: {value!r}")
        self.power = value > 0
        if self.power:
            self.current_value = value
        self._generation += 1
        self.on_state.update_value(self.power)
        await self.write_fn(value)

    def handle_power_get(self) -> bool:
        return self.power

    async def handle_power_set(self, value: Any) -> None:
        value = bool(value)
        if value == self.power:
            self.log.debug(f"Power of {self.device} already {value}, skipping device write")
            return

        self.log.debug(f"Setting ON state to: {value}, brightness: {self.current_value}")
        self.power = value
        self._generation += 1
        if value:
            await self.device.set_brightness(self.current_value)
        else:
            await self.device.change_power(False)


class ColorControls:
    """Hue and saturation writes merged into one packed color command.

    Hosts write hue and saturation as two independent sets; both land in
    the same deferred flush, which sends a single ``set_rgb`` to the
    gateway. Each set completes when that command settles.
    """
    def __init__(self, context: BindingContext, device: BaseDevice, service: Service,
                 brightness_source: Callable[[], int]):
        self.log = context.logger
        self.device = device
        self.hue = service.get_characteristic(CharacteristicType.HUE)
        self.saturation = service.get_characteristic(CharacteristicType.SATURATION)
        self.brightness_source = brightness_source
        self.desired_hue: Optional[float] = None
        self.desired_saturation: Optional[float] = None
        self.flush = DeferredTask(self.update_color, name=f"color-{device.device_id}")

    def attach(self) -> "ColorControls":
        self.hue.on_set(self.handle_hue_set)
        self.saturation.on_set(self.handle_saturation_set)
        return self

    async def handle_hue_set(self, value: float) -> None:
        self.desired_hue = value
        await self.flush.schedule()

    async def handle_saturation_set(self, value: float) -> None:
        self.desired_saturation = value
        await self.flush.schedule()

    async def update_color(self) -> int:
        # Take this window's values; writes from here on open a new window
        desired_hue, desired_saturation = self.desired_hue, self.desired_saturation
        self.desired_hue = self.desired_saturation = None

        current = await self.device.color()
        self.log.debug(f"Current color: {current}")

        new_color = HSLColor(
            hue=current.hue if desired_hue is None else desired_hue,
            saturation=current.saturation if desired_saturation is None else desired_saturation,
            lightness=50,
        )
        red, green, blue = new_color.to_rgb()
        self.log.debug(f"New color: {new_color} rgb: {(red, green, blue)}")

        # The gateway may not have applied a racing brightness change yet,
        # so the packed brightness comes from the binding cache
        brightness = self.brightness_source()
        self.log.debug(f"Current brightness is: {brightness}")
        rgb = pack_rgb(brightness, red, green, blue)

        await self.device.gateway.call("set_rgb", [rgb], refresh=["rgb"])
        return rgb


def create_gateway_light(context: BindingContext, device: BaseDevice, accessory: Accessory) -> Service:
    """Wire a switchable light: power, then brightness and color when supported"""
    service = accessory.find_or_create_service(ServiceType.LIGHTBULB, "Light")
    on_state = service.get_characteristic(CharacteristicType.ON)

    brightness_source: Callable[[], int] = lambda: FULL_BRIGHTNESS
    if device.matches(CAP_BRIGHTNESS, CAP_DIMMABLE):
        binding = BrightnessBinding(
            context,
            device,
            service.get_characteristic(CharacteristicType.BRIGHTNESS),
            on_state,
        ).attach()
        brightness_source = binding.handle_get
    else:
        bind_power(context, device, on_state)

    if device.matches(CAP_COLORABLE):
        ColorControls(context, device, service, brightness_source).attach()

    return service
