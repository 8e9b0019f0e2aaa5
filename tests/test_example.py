from example import build_example_lab


def test_example_lab_runs():
    lab = build_example_lab()
    assert lab.resolve_reachability("H1", "H3")

    metrics = lab.run(until=30)

    assert len(lab.store.lookup_endpoint("H3").received) == 20
    assert len(lab.store.lookup_endpoint("H2").received) == 10
    assert metrics["drops_by_reason"] == {"no_route": 3}
    assert metrics["drops_by_endpoint"] == {"R1": 3}
