import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock
import pytest
import pytest_asyncio
from conftest import settle
from gateway_bridge.adapters.simulated import SimulatedConnector, SimulatedGateway
from gateway_bridge.core.accessory import Accessory
from gateway_bridge.core.gateway import GatewayState, GatewaySupervisor
from gateway_bridge.core.platform import BridgePlatform
from gateway_bridge.models.config import BridgeConfig, GatewayConfig
from gateway_bridge.utils.exceptions import DeviceError


def make_platform(connector, poll_interval=3600, gateways=None):
    config = BridgeConfig(
        gateways=gateways or [GatewayConfig(address="10.0.0.2", token="abc")],
        poll_interval=poll_interval,
    )
    return BridgePlatform(config, connector)


@pytest_asyncio.fixture
async def platform():
    platform = make_platform(SimulatedConnector())
    yield platform
    await platform.stop()


@pytest.mark.asyncio
async def test_attaches_gateway_and_children(platform):
    await platform.start()
    await settle(platform.context)

    supervisor = platform.supervisors[0]
    assert supervisor.state == GatewayState.POLLING
    assert supervisor.attempts == 1
    session = supervisor.session
    assert len(session.child_accessories) == 6
    assert session.accessory.reachable is True

    # The magnet has no known capability: tracked but never registered
    magnet = next(a for a in session.child_accessories if a.display_name.startswith("lumi.magnet"))
    assert not magnet.has_real_services()
    assert magnet.uuid not in platform.registered
    assert len(platform.registered) == 6


@pytest.mark.asyncio
async def test_accessory_information_is_filled(platform):
    await platform.start()
    gateway = platform.supervisors[0].session.device
    accessory = platform.get_accessory(Accessory.generate_uuid(gateway.device_id))

    info = {c.ctype.value: c.value for c in accessory.information.characteristics.values()}
    assert info["manufacturer"] == "Xiaomi"
    assert info["model"] == "lumi.gateway.v3"
    assert info["serial-number"] == gateway.device_id
    assert accessory.display_name == f"lumi.gateway.v3 {gateway.device_id}"


@pytest.mark.asyncio
async def test_first_discovery_failure_is_retried():
    connector = SimulatedConnector(failures=1)
    platform = make_platform(connector)

    await platform.start()

    supervisor = platform.supervisors[0]
    assert supervisor.state == GatewayState.POLLING
    assert connector.attempts == 2
    await platform.stop()


@pytest.mark.asyncio
async def test_two_discovery_failures_are_terminal(caplog):
    connector = SimulatedConnector(failures=5)
    platform = make_platform(connector)

    with caplog.at_level(logging.WARNING):
        await platform.start()

    supervisor = platform.supervisors[0]
    assert supervisor.state == GatewayState.FAILED
    assert supervisor.session is None
    assert connector.attempts == 2
    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "could not be found after retry" in errors[0].getMessage()
    assert platform.accessories == {}


@pytest.mark.asyncio
async def test_wrong_device_type_is_not_retried(caplog):
    connector = AsyncMock()
    connector.connect.return_value = SimulatedGateway("gw", model="lumi.plug", capabilities=["cap:switchable-power"])
    supervisor = GatewaySupervisor(GatewayConfig(address="10.0.0.3"), connector, make_platform(connector),
                                   poll_interval=60, gateway_type="type:miio:gateway")

    with caplog.at_level(logging.ERROR):
        assert await supervisor.start() is False

    assert supervisor.state == GatewayState.FAILED
    assert connector.connect.await_count == 1
    assert "not a compatible gateway" in supervisor.error
    assert len(caplog.records) == 1


@pytest.mark.asyncio
async def test_poll_flips_reachability(platform):
    await platform.start()
    supervisor = platform.supervisors[0]
    gateway = supervisor.session.device

    gateway.online = False
    assert await supervisor.poll_once() is False
    assert supervisor.reachable is False
    assert supervisor.state == GatewayState.POLLING

    gateway.online = True
    assert await supervisor.poll_once() is True
    assert supervisor.reachable is True


@pytest.mark.asyncio
async def test_poll_loop_survives_failures():
    connector = SimulatedConnector()
    platform = make_platform(connector, poll_interval=0.01)
    await platform.start()
    supervisor = platform.supervisors[0]
    gateway = supervisor.session.device
    gateway.poll = AsyncMock(side_effect=[DeviceError("timeout")] + [None] * 100)

    while gateway.poll.await_count < 3:
        await asyncio.sleep(0.01)

    assert not supervisor.session.poll_task.done()
    assert supervisor.reachable is True
    await platform.stop()
    assert supervisor.session.poll_task is None


@pytest.mark.asyncio
async def test_restored_accessory_is_reused_not_registered_again():
    connector = SimulatedConnector()
    platform = make_platform(connector)
    gateway = await connector.connect({"address": "10.0.0.2"})
    plug = next(child for child in gateway.children() if child.model == "lumi.plug")
    cached = Accessory("cached plug", Accessory.generate_uuid(plug.device_id))
    platform.configure_accessory(cached)
    platform.register_accessories = MagicMock()

    await platform.start()

    assert platform.get_accessory(cached.uuid) is cached
    registered = [call.args[0][0] for call in platform.register_accessories.call_args_list]
    assert cached not in registered
    await platform.stop()


@pytest.mark.asyncio
async def test_each_gateway_is_supervised_independently():
    connector = AsyncMock()
    good = SimulatedGateway("good")

    def connect(params):
        if params["address"] == "10.0.0.2":
            return good
        raise DeviceError("down")

    connector.connect.side_effect = connect
    platform = make_platform(connector, gateways=[
        GatewayConfig(address="10.0.0.2"),
        GatewayConfig(address="10.0.0.9", name="attic"),
    ])

    await platform.start()

    states = {s.config.label: s.state for s in platform.supervisors}
    assert states == {"10.0.0.2": GatewayState.POLLING, "attic": GatewayState.FAILED}
    await platform.stop()


@pytest.mark.asyncio
async def test_wiring_failure_only_fails_that_gateway(caplog):
    connector = AsyncMock()
    good, broken = SimulatedGateway("good"), SimulatedGateway("broken")
    connector.connect.side_effect = lambda params: good if params["address"] == "10.0.0.2" else broken
    platform = make_platform(connector, gateways=[
        GatewayConfig(address="10.0.0.2"),
        GatewayConfig(address="10.0.0.9", name="attic"),
    ])
    add_connected_device = platform.add_connected_device

    def add_device(device):
        if device is broken:
            raise RuntimeError("wiring exploded")
        return add_connected_device(device)

    platform.add_connected_device = add_device

    with caplog.at_level(logging.ERROR):
        await platform.start()

    states = {s.config.label: s.state for s in platform.supervisors}
    assert states == {"10.0.0.2": GatewayState.POLLING, "attic": GatewayState.FAILED}
    attic = platform.supervisors[1]
    assert attic.session is None
    assert "could not be attached" in attic.error
    assert "wiring exploded" in caplog.text
    await platform.stop()
