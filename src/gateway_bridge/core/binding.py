"""Two-way synchronisation between a device property and a characteristic.

A binding keeps ``current_value``, the last value it pushed to or accepted
from the host. The host's get is answered from that cache, never from the
device. A host set with the cached value is dropped; any other set updates
the cache first and then awaits the device write, so a failed write leaves
the optimistic value in place until the next push. Device pushes always
overwrite the cache.

On attach one read seeds the cache. Its result is discarded when a push or
a set was applied while the read was in flight, so a slow seed never
clobbers fresher state.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional
from ..adapters.base import BaseDevice
from ..const import DEFAULT_GATEWAY_TYPE, DEFAULT_ILLUMINANCE_OFFSET, EVENT_POWER_CHANGED
from ..utils.logging import get_logger
from .accessory import Characteristic

ReadFn = Callable[[], Awaitable[Any]]
WriteFn = Callable[[Any], Awaitable[None]]


def _identity(value: Any) -> Any:
    return value


@dataclass
class BindingContext:
    """Settings and bookkeeping shared by the wiring of one platform"""
    logger: logging.Logger = field(default_factory=lambda: get_logger("gateway_bridge.bindings"))
    gateway_type: str = DEFAULT_GATEWAY_TYPE
    illuminance_offset: float = DEFAULT_ILLUMINANCE_OFFSET
    bindings: List["TwoWayBinding"] = field(default_factory=list)

    def bindings_for(self, device: BaseDevice) -> List["TwoWayBinding"]:
        return [binding for binding in self.bindings if binding.device is device]


class TwoWayBinding:
    def __init__(self, context: BindingContext, device: BaseDevice,
                 characteristic: Characteristic, event_name: str,
                 read_fn: Optional[ReadFn] = None,
                 write_fn: Optional[WriteFn] = None,
                 transform: Optional[Callable[[Any], Any]] = None,
                 default: Any = False,
                 label: Optional[str] = None):
        self.context = context
        self.log = context.logger
        self.device = device
        self.characteristic = characteristic
        self.event_name = event_name
        self.read_fn = read_fn
        self.write_fn = write_fn
        self.transform = transform or _identity
        self.label = label or event_name
        self.current_value = default
        self.seed_task: Optional[asyncio.Task] = None
        # Bumped by every applied push or set
        self._generation = 0

    def __repr__(self) -> str:
        return f"<TwoWayBinding {self.label} {self.device.device_id}={self.current_value!r}>"

    @property
    def writable(self) -> bool:
        return self.write_fn is not None

    def attach(self) -> "TwoWayBinding":
        """Register host handlers, subscribe to the device and start the seed read.

        Must be called from inside the running event loop.
        """
        self.characteristic.on_get(self.handle_get)
        if self.writable:
            self.characteristic.on_set(self.handle_set)
        self.device.on(self.event_name, self.handle_event)
        if self.read_fn is not None:
            self.seed_task = asyncio.get_running_loop().create_task(self.seed())
        self.context.bindings.append(self)
        return self

    def handle_get(self) -> Any:
        return self.current_value

    async def handle_set(self, value: Any) -> None:
        if value == self.current_value:
            self.log.debug(f"{self.label} already {value!r}, skipping device write")
            return

        self.log.debug(f"Setting {self.label} to: {value!r}")
        self.current_value = value
        self._generation += 1
        await self.write_fn(value)

    def handle_event(self, event: Any) -> None:
        value = self.transform(event)
        self.log.debug(f"New {self.label} state: {value!r}")
        self._generation += 1
        self.publish(value)

    async def seed(self) -> None:
        generation = self._generation
        try:
            raw = await self.read_fn()
        except Exception as e:
            self.log.warning(f"Could not read initial {self.label} of {self.device}: {e}")
            return

        if generation != self._generation:
            self.log.debug(f"Discarding initial {self.label}, a newer value was applied meanwhile")
            return

        value = self.transform(raw)
        self.log.debug(f"Received initial {self.label}: {value!r}")
        self.publish(value)

    def publish(self, value: Any) -> None:
        """Store a device-originated value and push it to the characteristic"""
        self.current_value = value
        self.characteristic.update_value(value)


def bind_power(context: BindingContext, device: BaseDevice,
               characteristic: Characteristic) -> TwoWayBinding:
    return TwoWayBinding(
        context,
        device,
        characteristic,
        EVENT_POWER_CHANGED,
        read_fn=device.power,
        write_fn=device.change_power,
        default=False,
        label="power",
    ).attach()


def bind_sensor(context: BindingContext, device: BaseDevice,
                characteristic: Characteristic, event_name: str, read_fn: ReadFn,
                transform: Optional[Callable[[Any], Any]] = None,
                default: Any = 0, label: Optional[str] = None) -> TwoWayBinding:
    """Read-only binding, the characteristic gets no set handler"""
    return TwoWayBinding(
        context,
        device,
        characteristic,
        event_name,
        read_fn=read_fn,
        transform=transform,
        default=default,
        label=label,
    ).attach()
