"""Simulation set-up: node placement, radio reachability, applications and the command line."""

from __future__ import annotations

import argparse
import enum
import ipaddress
import logging
import math
import os
import random
from collections import deque
from collections.abc import Sequence
from pathlib import Path

from .central import Central, install_central
from .mobility import B4MeshMobility, MobilityKind, Vector, install_mobility
from .sim import Network, Simulator
from .traces import DEFAULT_EXPORT_PATH, B4MTraces
from .utils import RANDOM_SEED

logger = logging.getLogger(__name__)

PHY_MODE = "DsssRate11Mbps"
ADDRESS_BASE = ipaddress.IPv4Address("10.1.0.0")

MAX_NODES = 50
MAX_SIM_TIME = 7200

MOBILITY_START_TIME = 5
CENTRAL_START_TIME = 6
EXTRA_RUN_TIME = 30

# Routes are re-evaluated at this period; listeners hear only of actual changes.
TOPOLOGY_POLL_INTERVAL = 1.0

GRID_DELTA = 5
GRID_WIDTH = 5
GRID_MIN = 50.0
LEADER_GRID_MIN = 0.0

WALK_BOUNDS = (0.0, 500.0, 0.0, 500.0)
WALK_COURSE_TIME = 20
WALK_MAX_DIRECTION = 5.0
WALK_STEP = 1.0

RANGE_MAX_DISTANCE = 100.0

GROUP_RANDOM_WALK = 4
_GROUPS_BY_NODES = {10: 2, 15: 3, 30: 5, 50: 5}


class LossModel(enum.IntEnum):
    """Radio propagation loss model."""

    FRIIS = 1
    RANGE = 2
    LOG_DISTANCE = 3
    FIXED = 4

    @property
    def max_range(self) -> float | None:
        """Largest distance at which two nodes hear each other; None means no limit."""
        return RANGE_MAX_DISTANCE if self is LossModel.RANGE else None


def _grid_position(slot: int, origin: float) -> Vector:
    return Vector(origin + GRID_DELTA * (slot % GRID_WIDTH),
                  origin + GRID_DELTA * (slot // GRID_WIDTH), 0.0)


def _validate(n_nodes: int, sim_time: int, time_between_txn: float,
              mobility_model: int, loss_model: int, scenario: int) -> None:
    if time_between_txn <= 0:
        raise ValueError("timeBetweenTxn must be a positive number")
    if n_nodes > MAX_NODES:
        raise ValueError(f"nNodes must be at most {MAX_NODES}")
    if sim_time > MAX_SIM_TIME:
        raise ValueError(f"sTime must be at most {MAX_SIM_TIME} seconds")
    if not 1 <= mobility_model <= 4:
        raise ValueError("mMobility must be (1, 2, or 3)")
    if not 1 <= loss_model <= 4:
        raise ValueError("mLoss must be (1, 2, 3 or 4)")
    if not 1 <= scenario <= 4:
        raise ValueError(f"nScen can only be (1, 2, 3 or 4) {scenario}")
    if scenario == 1 and n_nodes < 3:
        raise ValueError("nNodes must be at least 3 for this scenario")
    if scenario == 2 and n_nodes < 4:
        raise ValueError("nNodes must be at least 4 for this scenario")
    if scenario in (3, 4) and n_nodes < 9:
        raise ValueError("nNodes must be at least 9 for this scenario")


class _RandomWalk:
    """Moves nodes at constant speed, picking a new heading every course period."""

    def __init__(self, simulator: Simulator, positions: dict[int, Vector],
                 nodes: Sequence[int], speed: float) -> None:
        self.simulator = simulator
        self.positions = positions
        self.nodes = list(nodes)
        self.speed = speed
        self.rng = random.Random(RANDOM_SEED)
        self.velocity: dict[int, tuple[float, float]] = {}

    def start(self) -> None:
        self.simulator.schedule_now(self._new_course)
        self.simulator.schedule(WALK_STEP, self._step)

    def _new_course(self) -> None:
        for node in self.nodes:
            heading = self.rng.uniform(0.0, WALK_MAX_DIRECTION)
            self.velocity[node] = (self.speed * math.cos(heading),
                                   self.speed * math.sin(heading))
        self.simulator.schedule(WALK_COURSE_TIME, self._new_course)

    @staticmethod
    def _bounce(value: float, speed: float, low: float, high: float) -> tuple[float, float]:
        if value < low:
            return 2 * low - value, -speed
        if value > high:
            return 2 * high - value, -speed
        return value, speed

    def _step(self) -> None:
        x_min, x_max, y_min, y_max = WALK_BOUNDS
        for node in self.nodes:
            vx, vy = self.velocity.get(node, (0.0, 0.0))
            pos = self.positions[node]
            x, vx = self._bounce(pos.x + vx * WALK_STEP, vx, x_min, x_max)
            y, vy = self._bounce(pos.y + vy * WALK_STEP, vy, y_min, y_max)
            self.velocity[node] = (vx, vy)
            self.positions[node] = Vector(x, y, pos.z)
        self.simulator.schedule(WALK_STEP, self._step)


class Experiment:
    """Builds a network of nodes running the data-dissemination and mobility applications."""

    def __init__(self, n_nodes: int, sim_time: int, time_between_txn: float,
                 mobility_model: int, loss_model: int, scenario: int, speed: float) -> None:
        _validate(n_nodes, sim_time, time_between_txn, mobility_model, loss_model, scenario)
        self.n_nodes = n_nodes
        self.sim_time = sim_time
        self.time_between_txn = time_between_txn
        self.mobility_model = mobility_model
        self.loss_model = LossModel(loss_model)
        self.scenario = scenario
        self.speed = speed
        self.phy_mode = PHY_MODE
        self.trace_path: str | os.PathLike = DEFAULT_EXPORT_PATH
        self.traces = B4MTraces()

        self.simulator = Simulator()
        self.network = Network(self.simulator, self._reachable)
        self.positions: dict[int, Vector] = {}
        self.leaders: list[int] = []
        self.followers: list[int] = []
        self.n_groups: int | None = None
        self._walk: _RandomWalk | None = None
        self._last_routes: dict[int, frozenset[int]] = {}

        self._create_mobility()
        self.addresses = [ADDRESS_BASE + i + 1 for i in range(n_nodes)]
        self._node_of = {addr: i for i, addr in enumerate(self.addresses)}
        self.central_apps: list[Central] = []
        self.mobility_apps: list[B4MeshMobility] = []
        self._create_applications()
        self._create_mobility_applications()
        self.simulator.schedule(CENTRAL_START_TIME + TOPOLOGY_POLL_INTERVAL,
                                self._poll_topology)

    def _create_mobility(self) -> None:
        nodes = range(self.n_nodes)
        if self.mobility_model == GROUP_RANDOM_WALK:
            groups = _GROUPS_BY_NODES.get(self.n_nodes)
            if groups is None:
                raise ValueError(
                    f"group random walk needs nNodes in {sorted(_GROUPS_BY_NODES)}")
            self.n_groups = groups
            per_group = self.n_nodes // groups
            self.leaders = [i for i in nodes if i % per_group == 0]
            self.followers = [i for i in nodes if i % per_group != 0]
            for slot, node in enumerate(self.followers):
                self.positions[node] = _grid_position(slot, GRID_MIN)
            for slot, node in enumerate(self.leaders):
                self.positions[node] = _grid_position(slot, LEADER_GRID_MIN)
            self._walk = _RandomWalk(self.simulator, self.positions, self.leaders, self.speed)
        else:
            for node in nodes:
                self.positions[node] = _grid_position(node, GRID_MIN)
            if self.mobility_model == MobilityKind.RANDOM_WALK2:
                self._walk = _RandomWalk(self.simulator, self.positions, list(nodes), self.speed)
        if self._walk is not None:
            self._walk.start()

    def _schedule_lifetime(self, app: Central | B4MeshMobility, start: float) -> None:
        self.simulator.schedule(start, app.start)
        self.simulator.schedule(self.sim_time, app.stop)

    def _create_applications(self) -> None:
        self.central_apps = install_central(self.simulator, self.network,
                                            range(self.n_nodes), self.addresses)
        for app in self.central_apps:
            self._schedule_lifetime(app, CENTRAL_START_TIME)

    def _create_mobility_applications(self) -> None:
        self.mobility_apps = install_mobility(
            self.simulator, self.positions, range(self.n_nodes), self.addresses,
            self.sim_time, self.scenario, self.mobility_model, self.speed)
        for node, app in enumerate(self.mobility_apps):
            app.groups.on_change = self.central_apps[node].receive_new_topology
            self._schedule_lifetime(app, MOBILITY_START_TIME)

    def _in_range(self, a: int, b: int) -> bool:
        limit = self.loss_model.max_range
        if limit is None:
            return True
        pa, pb = self.positions[a], self.positions[b]
        return math.dist((pa.x, pa.y, pa.z), (pb.x, pb.y, pb.z)) <= limit

    def _component(self, start: int) -> frozenset[int]:
        """Nodes reachable from ``start`` over any number of radio hops."""
        seen = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for other in range(self.n_nodes):
                if other not in seen and self._in_range(current, other):
                    seen.add(other)
                    queue.append(other)
        return frozenset(seen)

    def _reachable(self, source, destination) -> bool:
        src = self._node_of.get(source)
        dst = self._node_of.get(destination)
        if src is None or dst is None:
            return False
        return dst in self._component(src)

    def _poll_topology(self) -> None:
        for node, app in enumerate(self.mobility_apps):
            if not app.running:
                continue
            routes = self._component(node) - {node}
            if self._last_routes.get(node) == routes:
                continue
            self._last_routes[node] = routes
            app.groups.table_change([self.addresses[i] for i in sorted(routes)],
                                    self.simulator.now)
        self.simulator.schedule(TOPOLOGY_POLL_INTERVAL, self._poll_topology)

    def run(self) -> None:
        """Run the simulation to its end and export the collected traces."""
        self.simulator.run(self.sim_time + EXTRA_RUN_TIME)
        Path(self.trace_path).parent.mkdir(parents=True, exist_ok=True)
        self.traces.export_results(self.trace_path)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="meshsim")
    parser.add_argument("--nNodes", type=int, default=10,
                        help="Number of nodes in the simulation - default (10)")
    parser.add_argument("--sTime", type=int, default=600,
                        help="Time of the simulation expressed in Seconds - default (600s)")
    parser.add_argument("--txGen", type=float, default=2.5,
                        help="The mean time for a node to generate a transaction in seconds")
    parser.add_argument("--mMobility", type=int, default=1,
                        help="Mobility model: 1 = Constant Position (default), "
                             "2 = Random Walk2, 3 = Constant Velocity, 4 = Group Random Walk")
    parser.add_argument("--mLoss", type=int, default=2,
                        help="Loss model: 1 = Friis, 2 = Range (default, 100m), "
                             "3 = Log Distance, 4 = Fixed")
    parser.add_argument("--nScen", type=int, default=1,
                        help="Mobility scenario for the Constant Position model")
    parser.add_argument("--speed", type=float, default=2.0,
                        help="The velocity of the nodes in m/s")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    print(f"--nNodes = {args.nNodes} --sTime = {args.sTime} --timeBetweenTxn = {args.txGen} "
          f"--mMobility = {args.mMobility} --mLoss = {args.mLoss} "
          f"--nScen = {args.nScen} --speed = {args.speed:g}")
    try:
        experiment = Experiment(args.nNodes, args.sTime, args.txGen, args.mMobility,
                                args.mLoss, args.nScen, args.speed)
    except ValueError as exc:
        print(f" {exc} ")
        return 1
    experiment.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())