from types import SimpleNamespace
from unittest import mock

import pytest
from docker.errors import APIError, NotFound

from netlab.containers.runtime import DockerRuntime
from netlab.core.errors import NotFoundError, RuntimeCommandError


@pytest.fixture
def client():
    return mock.MagicMock()


@pytest.fixture
def runtime(client):
    return DockerRuntime(client=client, probe_count=2, probe_timeout=4)


def test_network_memberships(runtime, client):
    client.containers.get.return_value.attrs = {
        "NetworkSettings": {
            "Networks": {
                "netA": {"IPAddress": "10.0.0.5"},
                "netB": {"IPAddress": "10.0.1.5"},
                "none": {"IPAddress": ""},
            }
        }
    }
    assert runtime.list_network_memberships("src") == {
        "netA": "10.0.0.5",
        "netB": "10.0.1.5",
    }
    client.containers.get.assert_called_with("src")


def test_network_members_by_name(runtime, client):
    client.networks.get.return_value.attrs = {
        "Containers": {
            "abc123": {"Name": "router1", "IPv4Address": "10.0.0.1/24"},
            "def456": {"Name": "src", "IPv4Address": "10.0.0.5/24"},
        }
    }
    assert runtime.list_network_members("netA") == {"router1", "src"}


def test_network_without_containers(runtime, client):
    client.networks.get.return_value.attrs = {"Containers": None}
    assert runtime.list_network_members("netA") == set()


def test_install_route(runtime, client):
    container = client.containers.get.return_value
    container.exec_run.return_value = SimpleNamespace(exit_code=0, output=b"")
    runtime.install_route("src", "10.0.1.0/24", "10.0.0.1")
    container.exec_run.assert_called_once_with(
        ["ip", "route", "replace", "10.0.1.0/24", "via", "10.0.0.1"]
    )


def test_install_route_failure(runtime, client):
    container = client.containers.get.return_value
    container.exec_run.return_value = SimpleNamespace(
        exit_code=2, output=b"RTNETLINK answers: Network unreachable\n"
    )
    with pytest.raises(RuntimeCommandError, match="Network unreachable"):
        runtime.install_route("src", "10.0.1.0/24", "10.0.0.1")


def test_probe_returns_raw_output_even_on_loss(runtime, client):
    container = client.containers.get.return_value
    container.exec_run.return_value = SimpleNamespace(
        exit_code=1, output=b"2 packets transmitted, 0 packets received, 100% packet loss\n"
    )
    output = runtime.run_probe("src", "10.0.1.7")
    assert "100% packet loss" in output
    container.exec_run.assert_called_once_with(["ping", "-c", "2", "-w", "4", "10.0.1.7"])


def test_missing_container_maps_to_not_found(runtime, client):
    client.containers.get.side_effect = NotFound("No such container: ghost")
    with pytest.raises(NotFoundError):
        runtime.list_network_memberships("ghost")


def test_api_error_maps_to_runtime_failure(runtime, client):
    client.containers.get.return_value.exec_run.side_effect = APIError("container is not running")
    with pytest.raises(RuntimeCommandError, match="not running"):
        runtime.run_probe("src", "10.0.1.7")


def test_create_bridge_router(runtime, client):
    container = mock.MagicMock()
    container.name = "bridge1"
    client.containers.run.return_value = container

    assert runtime.create_bridge_router("netA", "netB") == "bridge1"
    assert client.networks.get.call_args_list == [
        mock.call("bridge"),
        mock.call("netA"),
        mock.call("netB"),
    ]
    assert client.networks.get.return_value.connect.call_args_list == [
        mock.call("bridge1"),
        mock.call("bridge1"),
    ]
    _, kwargs = client.containers.run.call_args
    assert kwargs["cap_add"] == ["NET_ADMIN"]
