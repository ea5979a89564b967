"""Scripted leader/follower movement of nodes over a bounded area."""

from __future__ import annotations

import enum
import logging
import math
from collections.abc import Hashable, Iterable, MutableMapping, Sequence
from dataclasses import dataclass, replace

from .group import GroupTracker
from .sim import Simulator

logger = logging.getLogger(__name__)

MOVE_INTERVAL = 5
REBOUND_OFFSET = 10


@dataclass
class Vector:
    """A position in space, in metres."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class MobilityKind(enum.IntEnum):
    CONSTANT_POSITION = 1
    RANDOM_WALK2 = 2
    CONSTANT_VELOCITY = 3


def _div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    return int(a / b)


def _rise(value: float, target: float, speed: float) -> float:
    return value + speed if value < target else target


def _fall(value: float, target: float, speed: float) -> float:
    return value - speed if value > target else target


class B4MeshMobility:
    """Moves mobility leaders through a scenario and drags their followers along.

    ``positions`` maps every node id to its current position and is shared by
    the applications of all nodes.
    """

    def __init__(self, simulator: Simulator, positions: MutableMapping[int, Vector]) -> None:
        self.simulator = simulator
        self.positions = positions
        self.running = False
        self.node_id: int = 0
        self.peers: list[Hashable] = []
        self.num_nodes = 0
        self.duration = 0
        self.scenario = 0
        self.mobility_model = 0
        self.speed: float = 0.0
        self.leader_id_mod = -1
        self.onethird = -1
        self.twothird = -1
        self.move_interval = MOVE_INTERVAL
        self.bounds: tuple[int, int, int, int] | None = None
        self.direct = 1
        self.groups: GroupTracker | None = None

    def setup(
        self,
        node_id: int,
        peers: Sequence[Hashable],
        duration: int,
        scenario: int,
        mobility_model: int,
        speed: float,
    ) -> None:
        """Configure the node, its peers and the movement scenario."""
        self.node_id = node_id
        self.peers = list(peers)
        self.num_nodes = len(self.peers)
        self.duration = int(duration)
        self.scenario = scenario
        self.mobility_model = int(mobility_model)
        self.speed = speed
        logger.debug("Mobility Model : %s Simulation time: %s Node's speed: %s",
                     self.mobility_model, self.duration, self.speed)

        if self.mobility_model == MobilityKind.CONSTANT_POSITION:
            n = self.num_nodes
            if scenario == 1:
                self.leader_id_mod = n
                self.bounds = (-200, -200, 200, 200)
            elif scenario == 2:
                self.leader_id_mod = math.ceil(n / 2)
                self.bounds = (-250, -250, 250, 250)
            elif scenario in (3, 4):
                self.leader_id_mod = math.ceil(n / 3)
                self.onethird = math.ceil(n / 3)
                self.twothird = self.onethird * 2
                if n > 25:
                    self.bounds = (-350, -350, 350, 350)
                else:
                    self.bounds = (-300, -300, 300, 300)
            else:
                raise ValueError(f"unknown mobility scenario {scenario}")
            logger.debug("Mobility Scenario: %s Speed: %s Update position interval : %s",
                         scenario, speed, self.move_interval)
        elif self.mobility_model == MobilityKind.RANDOM_WALK2:
            self.scenario = -1

        self.groups = GroupTracker(node_id, self.peers)

    def start(self) -> None:
        self.running = True
        if self.mobility_model == MobilityKind.CONSTANT_POSITION:
            self.simulator.schedule_now(self._constant_position_model)
        elif self.mobility_model == MobilityKind.CONSTANT_VELOCITY:
            self.simulator.schedule_now(logger.info, "Executing Constant Velocity model")
        elif self.mobility_model == MobilityKind.RANDOM_WALK2:
            self.simulator.schedule_now(logger.info, "Executing Random Walk2 model")

    def stop(self) -> None:
        self.running = False

    def _constant_position_model(self) -> None:
        logger.info("Executing Constant Position model")
        self.update_pos()

    def update_pos(self) -> None:
        """Move this node if it is a mobility leader, then reschedule itself."""
        if not self.running:
            return
        if self.node_id % self.leader_id_mod == 0:
            self.update_leader_pos()
            leader_pos = self.update_direction()
            if self.scenario == 1:
                self.update_followers_scn1(leader_pos)
            elif self.scenario == 2:
                self.update_followers_scn2(leader_pos)
            elif self.scenario in (3, 4):
                self.update_followers_scn3(leader_pos)
        self.simulator.schedule(self.move_interval, self.update_pos)

    def _step(self, x: float) -> float:
        return x + self.speed if self.direct > 0 else x - self.speed

    def update_leader_pos(self) -> Vector:
        """Advance this leader's position according to the scenario and the time."""
        pos = self.positions[self.node_id]
        x, y, z = pos.x, pos.y, pos.z
        now = self.simulator.now
        nid = self.node_id
        speed = self.speed
        d = self.duration
        b = self.bounds or (0, 0, 0, 0)
        b1h, b3h, b1q = _div(b[1], 2), _div(b[3], 2), _div(b[1], 4)
        one, two, lead = self.onethird, self.twothird, self.leader_id_mod

        if self.scenario == 1:
            if now < d:
                y = 0
                x = self._step(x)
        elif self.scenario == 2:
            third = _div(d, 3)
            half = _div(third, 2)
            t1, t2 = third - half, third * 2 - half
            if now < t1:
                y = 0
                x = self._step(x)
            elif t1 < now < t2:
                if nid == 0:
                    x = self._step(x)
                    y = _rise(y, b3h, speed)
                elif nid == lead:
                    x = self._step(x)
                    y = _fall(y, b1h, speed)
            elif now > t2:
                if nid == 0:
                    x = self._step(x)
                    y = _fall(y, 0, speed)
                if nid == lead:
                    x = self._step(x)
                    y = _rise(y, 0, speed)
        elif self.scenario == 3:
            t1, t2 = _div(d, 13), _div(d, 2)
            if now < t1:
                y = 0
                x = self._step(x)
            elif t1 < now < t2:
                if nid == 0:
                    x = self._step(x)
                    y = 0
                elif nid == one:
                    x = self._step(x)
                    y = _rise(y, b3h, speed)
                elif nid == two:
                    x = self._step(x)
                    y = _fall(y, b1h, speed)
            elif now > t2:
                if nid == 0:
                    x = self._step(x)
                    y = 0
                elif nid == one:
                    x = self._step(x)
                    y = _fall(y, 0, speed)
                elif nid == two:
                    x = self._step(x)
                    y = _rise(y, 0, speed)
        elif self.scenario == 4:
            s = _div(d, 6)
            t1 = s - _div(s, 2)
            t2 = 2 * s - _div(s, 4)
            t3 = 3 * s - _div(s, 4)
            t4 = 4 * s - _div(s, 4)
            if now < t1:
                y = 0
                x = self._step(x)
            elif t1 < now < t2:
                if nid == two:
                    x = self._step(x)
                    y = _rise(y, b3h, speed)
                elif nid in (0, one):
                    x = self._step(x)
                    y = _fall(y, b1h, speed)
            elif t2 < now < t3:
                if nid == two:
                    x = self._step(x)
                    y = b3h
                elif nid == one:
                    x = self._step(x)
                    y = _fall(y, b1h + b1q, speed)
                elif nid == 0:
                    x = self._step(x)
                    y = _rise(y, b1h - b1q, speed)
            elif t3 < now < t4:
                if nid == two:
                    x = self._step(x)
                    y = b3h
                elif nid == one:
                    x = self._step(x)
                    y = _rise(y, b1h, speed)
                elif nid == 0:
                    x = self._step(x)
                    y = _fall(y, b1h, speed)
            elif t4 < now < d:
                if nid == two:
                    x = self._step(x)
                    y = _fall(y, 0, speed)
                elif nid in (0, one):
                    x = self._step(x)
                    y = _rise(y, 0, speed)

        new_pos = Vector(x, y, z)
        self.positions[nid] = new_pos
        return replace(new_pos)

    def update_direction(self) -> Vector:
        """Bounce off the area limits, reversing direction; return the position."""
        pos = replace(self.positions[self.node_id])
        if self.bounds is None:
            return pos
        x_min, y_min, x_max, y_max = self.bounds
        logger.debug("Update direction. Position X: %s Y: %s", pos.x, pos.y)
        changed = True
        if pos.x < x_min:
            pos.x = x_min + REBOUND_OFFSET
        elif pos.x > x_max:
            pos.x = x_max - REBOUND_OFFSET
        elif pos.y < y_min:
            pos.y = y_min + REBOUND_OFFSET
        elif pos.y > y_max:
            pos.y = y_max - REBOUND_OFFSET
        else:
            changed = False
        if changed:
            self.direct = -self.direct
            self.positions[self.node_id] = replace(pos)
        return pos

    def _move_followers(self, followers: Iterable[int], leader_pos: Vector) -> None:
        for i in followers:
            logger.debug("Updating follower %s position to (%s, %s)", i, leader_pos.x, leader_pos.y)
            self.positions[i] = replace(leader_pos)

    def update_followers_scn1(self, leader_pos: Vector) -> None:
        """All other nodes follow the single leader."""
        self._move_followers(range(1, self.num_nodes), leader_pos)

    def update_followers_scn2(self, leader_pos: Vector) -> None:
        """Each of the two leaders moves its half of the nodes."""
        if self.node_id == 0:
            self._move_followers(range(1, self.leader_id_mod), leader_pos)
        if self.node_id == self.leader_id_mod:
            self._move_followers(range(self.leader_id_mod + 1, self.num_nodes), leader_pos)

    def update_followers_scn3(self, leader_pos: Vector) -> None:
        """Each of the three leaders moves its third of the nodes."""
        if self.node_id == 0:
            self._move_followers(range(1, self.onethird), leader_pos)
        if self.node_id == self.onethird:
            self._move_followers(range(self.onethird + 1, self.twothird), leader_pos)
        if self.node_id == self.twothird:
            self._move_followers(range(self.twothird + 1, self.num_nodes), leader_pos)


def install_mobility(
    simulator: Simulator,
    positions: MutableMapping[int, Vector],
    node_ids: Iterable[int],
    peers: Sequence[Hashable],
    duration: int,
    scenario: int,
    mobility_model: int,
    speed: float,
) -> list[B4MeshMobility]:
    """Create and set up one mobility application per node id."""
    apps = []
    for node_id in node_ids:
        logger.info("Install B4MeshMobility on node : %s", node_id)
        app = B4MeshMobility(simulator, positions)
        app.setup(node_id, peers, duration, scenario, mobility_model, speed)
        apps.append(app)
    return apps