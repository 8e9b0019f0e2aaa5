import pytest

from netlab.core.errors import InvalidSenderError
from netlab.core.packet import Packet


@pytest.fixture
def pair(store):
    a = store.create_endpoint("H1", "10.0.0.1")
    b = store.create_endpoint("H2", "10.0.0.2")
    link = store.create_link("H1", "H2", 1.0)
    return a, b, link


def test_delivery_waits_for_delay(env, pair):
    a, b, link = pair
    packet = Packet(a.address, b.address, "hello")
    link.transmit(a, packet)

    env.run(until=0.999)
    assert b.received == []
    assert link.in_flight == 1

    env.run(until=1.001)
    assert b.received == [packet]
    assert packet.arrival_time == 1.0
    assert link.packets_sent == 1
    assert link.in_flight == 0


def test_transmit_works_in_both_directions(env, pair):
    a, b, link = pair
    packet = Packet(b.address, a.address)
    link.transmit(b, packet)
    env.run()
    assert a.received == [packet]


def test_transmit_rejects_foreign_sender(store, pair):
    _, _, link = pair
    outsider = store.create_endpoint("H3", "10.0.0.3")
    with pytest.raises(InvalidSenderError):
        link.transmit(outsider, Packet(outsider.address, "10.0.0.2"))
    assert link.in_flight == 0


def test_concurrent_transmissions_do_not_block(env, pair):
    a, b, link = pair
    first = Packet(a.address, b.address, "1")
    second = Packet(a.address, b.address, "2")
    link.transmit(a, first)
    env.run(until=0.5)
    link.transmit(a, second)

    env.run(until=1.2)
    assert b.received == [first]
    env.run(until=1.6)
    assert b.received == [first, second]
    assert second.arrival_time == 1.5


def test_delay_can_change_between_transmissions(env, pair):
    a, b, link = pair
    link.delay = 0.25
    packet = Packet(a.address, b.address)
    link.transmit(a, packet)
    env.run()
    assert packet.arrival_time == 0.25


def test_interrupted_delivery_is_dropped(env, pair):
    a, b, link = pair
    packet = Packet(a.address, b.address)
    process = link.transmit(a, packet)

    env.run(until=0.5)
    process.interrupt("link cut")
    env.run()

    assert b.received == []
    assert packet.dropped and packet.drop_reason == "cancelled"
    assert link.in_flight == 0
    assert link.packets_sent == 0


def test_other_end_and_connects_to(pair):
    a, b, link = pair
    assert link.other_end(a) is b
    assert link.other_end(b) is a
    assert link.connects_to("H1") and link.connects_to("H2")
    assert not link.connects_to("H3")
