import pytest

from netlab.containers.ping import PingOrchestrator
from netlab.core.errors import NoBridgeError, NotFoundError, RuntimeCommandError

from conftest import FakeRuntime


def test_bridged_probe_installs_route_first(bridged_runtime):
    orchestrator = PingOrchestrator(bridged_runtime)
    output = orchestrator.resolve_bridge_and_probe("src", "dst")

    assert output == bridged_runtime.probe_output
    assert bridged_runtime.routes == [("src", "10.0.1.0/24", "10.0.0.1")]
    assert bridged_runtime.probes == [("src", "10.0.1.7")]


def test_direct_probe_skips_route():
    runtime = FakeRuntime({"a": {"net": "172.18.0.2"}, "b": {"net": "172.18.0.3"}})
    runtime.probe_output = "1 packets transmitted, 0 packets received, 100% packet loss"
    output = PingOrchestrator(runtime).resolve_bridge_and_probe("a", "b")

    assert output == runtime.probe_output
    assert runtime.routes == []
    assert runtime.probes == [("a", "172.18.0.3")]


def test_no_bridge_propagates():
    runtime = FakeRuntime({"a": {"n1": "10.0.0.2"}, "b": {"n2": "10.0.1.2"}})
    with pytest.raises(NoBridgeError):
        PingOrchestrator(runtime).resolve_bridge_and_probe("a", "b")
    assert runtime.probes == []


def test_route_failure_propagates_without_probe(bridged_runtime):
    bridged_runtime.route_error = "RTNETLINK answers: Operation not permitted"
    with pytest.raises(RuntimeCommandError, match="Operation not permitted"):
        PingOrchestrator(bridged_runtime).resolve_bridge_and_probe("src", "dst")
    assert bridged_runtime.probes == []


def test_unknown_container(bridged_runtime):
    with pytest.raises(NotFoundError):
        PingOrchestrator(bridged_runtime).resolve_bridge_and_probe("src", "ghost")


def test_plan_leaves_runtime_unchanged(bridged_runtime):
    result = PingOrchestrator(bridged_runtime).plan("src", "dst")
    assert result.bridge == "router1"
    assert bridged_runtime.routes == [] and bridged_runtime.probes == []
