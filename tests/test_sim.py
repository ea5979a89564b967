import pytest

from meshsim.sim import Network, Simulator


def test_events_run_in_time_order():
    sim = Simulator()
    seen = []
    sim.schedule(5, seen.append, "late")
    sim.schedule(1, seen.append, "early")
    sim.schedule(3, seen.append, "middle")
    sim.run()
    assert seen == ["early", "middle", "late"]
    assert sim.now == 5


def test_equal_times_keep_scheduling_order():
    sim = Simulator()
    seen = []
    for label in ("a", "b", "c"):
        sim.schedule_now(seen.append, label)
    sim.run()
    assert seen == ["a", "b", "c"]


def test_run_until_stops_and_advances_clock():
    sim = Simulator()
    seen = []
    sim.schedule(2, seen.append, 2)
    sim.schedule(8, seen.append, 8)
    sim.run(until=4)
    assert seen == [2]
    assert sim.now == 4
    assert sim.pending == 1
    sim.run()
    assert seen == [2, 8]


def test_event_at_limit_runs():
    sim = Simulator()
    seen = []
    sim.schedule(4, seen.append, "x")
    sim.run(until=4)
    assert seen == ["x"]


def test_callbacks_can_schedule_more_events():
    sim = Simulator()
    times = []

    def tick(count):
        times.append(sim.now)
        if count > 1:
            sim.schedule(2, tick, count - 1)

    sim.schedule_now(tick, 3)
    assert sim.pending == 1
    sim.run()
    assert times == [0, 2, 4]
    assert sim.now == 4
    assert sim.pending == 0


def test_cancelled_event_does_not_run():
    sim = Simulator()
    seen = []
    event = sim.schedule(1, seen.append, "gone")
    event.cancel()
    sim.run()
    assert seen == []


def test_negative_delay_rejected():
    sim = Simulator()
    with pytest.raises(ValueError):
        sim.schedule(-1, print)


def test_network_delivers_to_bound_handler():
    sim = Simulator()
    net = Network(sim)
    received = []
    net.bind("b", lambda data, src: received.append((data, src)))
    assert net.send("a", "b", b"hello") is True
    assert received == []
    sim.run()
    assert received == [(b"hello", "a")]


def test_network_drops_unbound_destination():
    sim = Simulator()
    net = Network(sim)
    assert net.send("a", "nowhere", b"x") is False


def test_network_drops_unreachable():
    sim = Simulator()
    net = Network(sim, reachable=lambda src, dst: dst != "c")
    received = []
    net.bind("b", lambda data, src: received.append(data))
    net.bind("c", lambda data, src: received.append(data))
    assert net.send("a", "c", b"lost") is False
    assert net.send("a", "b", b"kept") is True
    sim.run()
    assert received == [b"kept"]


def test_double_bind_rejected():
    net = Network(Simulator())
    net.bind("a", lambda data, src: None)
    with pytest.raises(ValueError):
        net.bind("a", lambda data, src: None)