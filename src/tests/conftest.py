import asyncio
from typing import Any, Iterable
from unittest.mock import AsyncMock
import pytest
from gateway_bridge.adapters.base import BaseDevice
from gateway_bridge.core.accessory import Accessory, Characteristic, CharacteristicType
from gateway_bridge.core.binding import BindingContext


class FakeDevice(BaseDevice):
    """Device whose property access is backed by AsyncMocks.

    ``reader`` gets the property name, ``writer`` the name and value.
    """
    def __init__(self, device_id: str = "fake.1", model: str = "test.device",
                 capabilities: Iterable[str] = (), values: dict = None):
        super().__init__(device_id, model, capabilities)
        self.values = dict(values or {})
        self.reader = AsyncMock(side_effect=lambda name: self.values[name])
        self.writer = AsyncMock()
        self.poller = AsyncMock()

    async def read_property(self, name: str) -> Any:
        return await self.reader(name)

    async def write_property(self, name: str, value: Any) -> None:
        await self.writer(name, value)

    async def poll(self) -> None:
        await self.poller()


async def settle(context: BindingContext) -> None:
    """Wait for every pending seed read"""
    tasks = [binding.seed_task for binding in context.bindings if binding.seed_task]
    await asyncio.gather(*tasks)


@pytest.fixture
def context():
    return BindingContext()


@pytest.fixture
def accessory():
    return Accessory("test.device fake.1", Accessory.generate_uuid("fake.1"))


@pytest.fixture
def characteristic():
    return Characteristic(CharacteristicType.ON)
