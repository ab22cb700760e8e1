import asyncio
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from conftest import settle
from gateway_bridge.__main__ import APIServer, AppState
from gateway_bridge.adapters.simulated import SimulatedConnector
from gateway_bridge.core.accessory import Accessory
from gateway_bridge.core.platform import BridgePlatform
from gateway_bridge.models.config import APIConfig, BridgeConfig, GatewayConfig


@pytest_asyncio.fixture
async def platform():
    config = BridgeConfig(gateways=[GatewayConfig(address="10.0.0.2", name="hall")], poll_interval=3600)
    platform = BridgePlatform(config, SimulatedConnector())
    await platform.start()
    await settle(platform.context)
    yield platform
    await platform.stop()


@pytest_asyncio.fixture
async def client(platform):
    app_state = AppState()
    app_state.platform = platform
    app = APIServer(APIConfig(), asyncio.Event(), app_state).initialize()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def child(platform, model):
    gateway = platform.supervisors[0].session.device
    return next(device for device in gateway.children() if device.model == model)


def uuid_of(device):
    return Accessory.generate_uuid(device.device_id)


@pytest.mark.asyncio
async def test_list_accessories(client):
    response = await client.get("/api/v1/accessories")

    assert response.status_code == 200
    accessories = response.json()
    assert len(accessories) == 7
    registered = [a for a in accessories if a["registered"]]
    assert len(registered) == 6
    magnet = next(a for a in accessories if a["display_name"].startswith("lumi.magnet"))
    assert magnet["services"] == ["accessory-information"]


@pytest.mark.asyncio
async def test_get_accessory_details(client, platform):
    sensor = child(platform, "lumi.sensor_ht")

    response = await client.get(f"/api/v1/accessories/{uuid_of(sensor)}")

    assert response.status_code == 200
    data = response.json()
    services = {service["name"]: service for service in data["service_states"]}
    temperature = services["Temperature"]["characteristics"][0]
    assert temperature == {
        "type": "current-temperature",
        "value": 21.5,
        "writable": False,
        "props": {"min_value": -100, "max_value": 100},
    }


@pytest.mark.asyncio
async def test_unknown_accessory(client):
    response = await client.get("/api/v1/accessories/does-not-exist")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_turn_plug_on(client, platform):
    plug = child(platform, "lumi.plug")

    response = await client.put(
        f"/api/v1/accessories/{uuid_of(plug)}/characteristics/Plug/on", json={"value": True}
    )

    assert response.status_code == 200
    assert response.json()["value"] is True
    assert plug.writes == [("power", True)]


@pytest.mark.asyncio
async def test_unknown_service_or_characteristic(client, platform):
    plug = uuid_of(child(platform, "lumi.plug"))

    missing_service = await client.put(f"/api/v1/accessories/{plug}/characteristics/Lamp/on", json={"value": True})
    missing_characteristic = await client.put(
        f"/api/v1/accessories/{plug}/characteristics/Plug/hue", json={"value": 10}
    )

    assert missing_service.status_code == 404
    assert missing_characteristic.status_code == 404


@pytest.mark.asyncio
async def test_read_only_characteristic(client, platform):
    sensor = uuid_of(child(platform, "lumi.sensor_ht"))

    response = await client.put(
        f"/api/v1/accessories/{sensor}/characteristics/Temperature/current-temperature", json={"value": 30}
    )

    assert response.status_code == 405


@pytest.mark.asyncio
async def test_device_failure_is_reported(client, platform):
    plug = child(platform, "lumi.plug")
    plug.online = False

    response = await client.put(
        f"/api/v1/accessories/{uuid_of(plug)}/characteristics/Plug/on", json={"value": True}
    )

    assert response.status_code == 502
    assert "not responding" in response.json()["detail"]


@pytest.mark.asyncio
async def test_gateway_status(client, platform):
    response = await client.get("/api/v1/gateways")

    assert response.status_code == 200
    [status] = response.json()
    assert status["name"] == "hall"
    assert status["state"] == "polling"
    assert status["reachable"] is True
    assert status["attempts"] == 1
    assert status["device_id"] == platform.supervisors[0].session.device.device_id
    assert status["child_count"] == 6
