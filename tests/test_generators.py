import numpy as np
import pytest

from netlab.traffic.generators import (
    bursty_traffic,
    constant_payload,
    constant_traffic,
    poisson_traffic,
    sequence_payload,
    variable_traffic,
)


def test_constant_traffic():
    interval = constant_traffic(4)
    assert interval() == 0.25
    with pytest.raises(ValueError):
        constant_traffic(0)


def test_variable_traffic_bounds():
    interval = variable_traffic(2, 10)
    for _ in range(50):
        assert 0.1 <= interval() <= 0.5


def test_variable_traffic_validates_rates():
    with pytest.raises(ValueError):
        variable_traffic(0, 10)
    with pytest.raises(ValueError):
        variable_traffic(10, 2)


def test_private_seeds_are_independent_of_global_state():
    first = poisson_traffic(5, seed=3)
    np.random.seed(1)
    second = poisson_traffic(5, seed=3)
    assert [first() for _ in range(3)] == [second() for _ in range(3)]

    slow = variable_traffic(2, 10, seed=3)
    again = variable_traffic(2, 10, seed=3)
    assert [slow() for _ in range(3)] == [again() for _ in range(3)]

    with pytest.raises(ValueError):
        poisson_traffic(-1)


def test_poisson_traffic_is_seeded():
    np.random.seed(7)
    first = [poisson_traffic(5)() for _ in range(3)]
    np.random.seed(7)
    second = [poisson_traffic(5)() for _ in range(3)]
    assert first == second
    assert all(x >= 0 for x in first)


def test_bursty_traffic():
    interval = bursty_traffic(3, 0.1)
    assert [interval() for _ in range(6)] == pytest.approx([0.1, 0.1, 0.3, 0.1, 0.1, 0.3])


def test_payloads():
    assert constant_payload("x")() == "x"
    payload = sequence_payload("p")
    assert [payload(), payload()] == ["p-1", "p-2"]
