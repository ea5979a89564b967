import math

from meshsim.traces import B4MTraces


def test_bytes_accumulate_per_timestamp():
    traces = B4MTraces()
    traces.received_bytes(1.0, 10)
    traces.received_bytes(1.0, 20)
    traces.received_bytes(2.0, 5)
    assert traces.bytes_received == {1.0: 30, 2.0: 5}


def test_summary_totals():
    traces = B4MTraces()
    traces.received_bytes(1.0, 10)
    traces.sent_bytes(1.0, 7)
    traces.received_messages(3.0, 2)
    traces.sent_messages(3.0, 4)
    traces.dropped_messages(3.0, 1)
    summary = traces.print_summary()
    assert "Total bytes received : 10\n" in summary
    assert "Total bytes sent : 7\n" in summary
    assert "Total messages received : 2\n" in summary
    assert "Total messages sent : 4\n" in summary
    assert traces.messages_dropped == {3.0: 1}


def test_election_delay_recorded_once():
    traces = B4MTraces()
    traces.start_election(2.0)
    traces.start_election(3.0)
    traces.end_election(5.0)
    assert traces.election_delay == {2.0: 3.0}
    assert traces.election_started_at == -1
    traces.end_election(9.0)
    assert traces.election_delay == {2.0: 3.0}


def test_reset_election():
    traces = B4MTraces()
    traces.start_election(2.0)
    traces.reset_start_election()
    traces.end_election(5.0)
    assert traces.election_delay == {}


def test_config_change_keeps_start():
    traces = B4MTraces()
    traces.start_config_change(1.0)
    traces.end_config_change(2.0)
    traces.end_config_change(4.0)
    assert traces.config_change_delay == {1.0: 3.0}
    traces.reset_start_config_change()
    assert traces.config_change_started_at == -1


def test_raft_summary():
    traces = B4MTraces()
    traces.start_election(2.0)
    traces.end_election(4.0)
    summary = traces.print_raft_summary()
    assert "Number of elections : 1\n" in summary
    assert "Average election delay : 2\n" in summary
    assert "Number of configuration change : 0\n" in summary


def test_raft_summary_without_events_has_nan():
    summary = B4MTraces().print_raft_summary()
    lines = summary.splitlines()
    assert lines[0] == "Number of elections : 0"
    assert lines[2] == "Number of configuration change : 0"
    label, value = lines[1].split(" : ")
    assert label == "Average election delay"
    assert math.isnan(float(value)) is True