import ipaddress
from dataclasses import replace

import pytest

from meshsim.experiment import Experiment, LossModel, main
from meshsim.mobility import Vector


def make(n=10, sim_time=60, txn=2.5, mobility=1, loss=2, scenario=1, speed=2.0):
    return Experiment(n, sim_time, txn, mobility, loss, scenario, speed)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"txn": 0},
        {"n": 51},
        {"sim_time": 7201},
        {"mobility": 5},
        {"mobility": 0},
        {"loss": 0},
        {"loss": 5},
        {"scenario": 5},
        {"scenario": 1, "n": 2},
        {"scenario": 2, "n": 3},
        {"scenario": 3, "n": 8},
        {"scenario": 4, "n": 8},
    ],
)
def test_invalid_parameters_raise(kwargs):
    with pytest.raises(ValueError):
        make(**kwargs)


def test_group_random_walk_needs_known_node_count():
    with pytest.raises(ValueError):
        make(n=12, mobility=4)


def test_range_model_has_limit_and_others_do_not():
    assert LossModel.RANGE.max_range == 100.0
    assert LossModel.FRIIS.max_range is None
    assert LossModel(4) is LossModel.FIXED


def test_grid_placement_and_addresses():
    exp = make()
    assert exp.positions[0] == Vector(50.0, 50.0, 0.0)
    assert exp.positions[6] == Vector(55.0, 55.0, 0.0)
    assert exp.addresses[0] == ipaddress.IPv4Address("10.1.0.1")
    assert len(set(exp.addresses)) == exp.n_nodes


def test_range_model_drops_unreachable_node():
    exp = make(loss=2)
    exp.positions[1] = Vector(400.0, 0.0, 0.0)
    assert exp.network.send(exp.addresses[0], exp.addresses[1], b"x") is False
    assert exp.network.send(exp.addresses[0], exp.addresses[2], b"x") is True


def test_friis_model_reaches_far_node():
    exp = make(loss=1)
    exp.positions[1] = Vector(400.0, 0.0, 0.0)
    assert exp.network.send(exp.addresses[0], exp.addresses[1], b"x") is True


def test_run_leader_gets_all_acknowledgements(tmp_path):
    exp = make()
    exp.trace_path = tmp_path / "traces" / "BlockInfo.txt"
    exp.run()
    leader = exp.central_apps[1]
    assert leader.is_leader
    assert leader.current_term >= 1
    others = [m for i, m in enumerate(leader.members) if i != 1]
    assert all(m.in_group for m in others)
    assert all(m.last_term == leader.current_term for m in others)
    lines = exp.trace_path.read_text().splitlines()
    assert lines[0] == "#BlockHash GroupId NumTxs CreationTime"


def test_scenario_one_followers_track_leader(tmp_path):
    exp = make(sim_time=30)
    exp.trace_path = tmp_path / "out.txt"
    exp.run()
    leader_pos = exp.positions[0]
    assert all(exp.positions[i] == leader_pos for i in range(1, exp.n_nodes))


def test_random_walk_stays_in_bounds_and_moves(tmp_path):
    exp = make(sim_time=100, mobility=2, speed=5.0)
    before = {i: replace(p) for i, p in exp.positions.items()}
    exp.trace_path = tmp_path / "out.txt"
    exp.run()
    assert all(0.0 <= p.x <= 500.0 and 0.0 <= p.y <= 500.0 for p in exp.positions.values())
    assert any(exp.positions[i] != before[i] for i in before)


def test_group_random_walk_moves_only_leaders(tmp_path):
    exp = make(sim_time=100, mobility=4, speed=5.0)
    assert exp.n_groups == 2
    assert exp.leaders == [0, 5]
    followers_before = {i: replace(exp.positions[i]) for i in exp.followers}
    leaders_before = {i: replace(exp.positions[i]) for i in exp.leaders}
    exp.trace_path = tmp_path / "out.txt"
    exp.run()
    assert {i: exp.positions[i] for i in exp.followers} == followers_before
    assert any(exp.positions[i] != leaders_before[i] for i in exp.leaders)


def test_main_rejects_invalid_arguments(capsys):
    assert main(["--nNodes=51"]) == 1
    assert "at most 50" in capsys.readouterr().out


def test_main_runs_and_exports(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["--sTime=20", "--nNodes", "5"]) == 0
    out = tmp_path / "scratch" / "b4mesh" / "Traces" / "BlockInfo.txt"
    assert out.read_text().startswith("#BlockHash")