import pytest
from gateway_bridge.core.accessory import Accessory, Characteristic, CharacteristicType, ServiceType
from gateway_bridge.utils.exceptions import ReadOnlyCharacteristicError


def test_uuid_is_stable_per_device():
    assert Accessory.generate_uuid("158d0001") == Accessory.generate_uuid("158d0001")
    assert Accessory.generate_uuid("158d0001") != Accessory.generate_uuid("158d0002")


def test_find_or_create_service_reuses_existing(accessory):
    first = accessory.find_or_create_service(ServiceType.OUTLET, "Plug")
    second = accessory.find_or_create_service(ServiceType.OUTLET, "Plug")

    assert first is second
    assert len(accessory.services) == 2


def test_real_services_exclude_information_and_battery(accessory):
    assert not accessory.has_real_services()
    accessory.add_service(ServiceType.BATTERY, "Battery Level")
    assert not accessory.has_real_services()
    accessory.add_service(ServiceType.MOTION_SENSOR, "Motion")
    assert accessory.has_real_services()


def test_reachability(accessory):
    accessory.update_reachability(False)
    assert accessory.reachable is False
    accessory.update_reachability(True)
    assert accessory.reachable is True


def test_update_value_notifies_subscribers():
    characteristic = Characteristic(CharacteristicType.MOTION_DETECTED)
    seen = []
    characteristic.subscribe(lambda c, value: seen.append((c.ctype, value)))

    characteristic.update_value(True)

    assert seen == [(CharacteristicType.MOTION_DETECTED, True)]
    assert characteristic.handle_get() is True


@pytest.mark.asyncio
async def test_set_without_handler_is_rejected():
    characteristic = Characteristic(CharacteristicType.CURRENT_TEMPERATURE, 20)

    with pytest.raises(ReadOnlyCharacteristicError):
        await characteristic.handle_set(25)
    assert characteristic.value == 20


@pytest.mark.asyncio
async def test_set_stores_value_when_no_get_handler():
    characteristic = Characteristic(CharacteristicType.HUE)
    received = []

    async def handler(value):
        received.append(value)

    characteristic.on_set(handler)
    await characteristic.handle_set(180)

    assert received == [180]
    assert characteristic.handle_get() == 180
