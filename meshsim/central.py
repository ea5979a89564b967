"""Central leader/follower data dissemination application."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass

from .packet import ApplicationPacket, Service
from .sim import Network, Simulator

logger = logging.getLogger(__name__)

INITIAL_DATA_SIZE = 50000
DATA_SIZE_INCREMENT = 100
DISSEMINATION_INTERVAL = 50
RETRANSMISSION_INTERVAL = 2
MAX_RETRANSMISSIONS = 20
LEADER_ID = 1


@dataclass
class MemberStatus:
    """Whether a node is in the current group and the last term it acknowledged."""

    in_group: bool = False
    last_term: int = 0


class Central:
    """Node application: the leader periodically sends data; followers acknowledge it."""

    def __init__(self, simulator: Simulator, network: Network) -> None:
        self.simulator = simulator
        self.network = network
        self.is_leader = False
        self.current_term = 0
        self.size_of_data: float = INITIAL_DATA_SIZE
        self.members: list[MemberStatus] = []
        self.node_id: int | None = None
        self.peers: list[Hashable] = []
        self.running = False

    def _debug(self, message: str) -> None:
        logger.debug("%ss: Central : Node %s : %s", self.simulator.now, self.node_id, message)

    @property
    def address(self) -> Hashable:
        return self.peers[self.node_id]

    def setup(self, node_id: int, peers: Sequence[Hashable]) -> None:
        """Attach the application to ``node_id`` and listen on its own address."""
        self.peers = list(peers)
        self.node_id = node_id
        self.members = [MemberStatus() for _ in self.peers]
        if node_id == LEADER_ID:
            self.is_leader = True
        self.network.bind(self.address, self.receive_packet)

    def start(self) -> None:
        self.running = True
        self._debug(f"Start B4Mesh on node : {self.node_id}")
        self.simulator.schedule_now(self.disseminate_data)

    def stop(self) -> None:
        self.running = False

    def receive_packet(self, data: bytes, source: Hashable) -> None:
        """Handle a DATA packet (follower) or a REPLY packet (leader)."""
        self._debug(f"Received Packet : New packet of {len(data)}B from Node {source}")
        try:
            packet = ApplicationPacket.from_bytes(data)
        except ValueError as exc:
            logger.error("%s", exc)
            return
        if packet.service is Service.DATA:
            self._debug(f"Follower received DATA of size {packet.size} from "
                        f"{self.id_from_ip(source)} Sending reply")
            self.send_packet(ApplicationPacket.reply(packet.term), source)
        elif packet.service is Service.REPLY:
            self._debug(f"Leader received REPLY from {self.id_from_ip(source)}")
            self.process_follower_response(packet, source)

    def send_packet(self, packet: ApplicationPacket, ip: Hashable) -> bool:
        """Send ``packet`` to ``ip``; never to this node itself. Return True if sent."""
        if not self.running or ip == self.address:
            return False
        self._debug(f"Sending packet of size {packet.size} to {self.id_from_ip(ip)}")
        return self.network.send(self.address, ip, packet.serialize())

    def broadcast_packet(self, packet: ApplicationPacket) -> None:
        """Send ``packet`` to every peer in the current group."""
        self._debug(f"Broadcasting packet of size {packet.size} to all nodes within group.")
        if not self.running:
            return
        for ip in self.peers:
            if self.members[self.id_from_ip(ip)].in_group:
                self.send_packet(packet, ip)

    def disseminate_data(self) -> None:
        """Leader only: grow the data set, start a new term and broadcast it."""
        if not self.running or not self.is_leader:
            return
        self.size_of_data += DATA_SIZE_INCREMENT
        self.current_term += 1
        self._debug(f"Disseminating data {self.size_of_data:g} at term {self.current_term}")
        self.broadcast_packet(ApplicationPacket.data(self.current_term, self.size_of_data))
        self.simulator.schedule(RETRANSMISSION_INTERVAL, self.retransmit_data,
                                self.current_term, 1)
        self.simulator.schedule(DISSEMINATION_INTERVAL, self.disseminate_data)

    def retransmit_data(self, term: int, increment_count: int) -> None:
        """Resend data to group members that have not acknowledged the current term."""
        if not self.running or not self.is_leader:
            return
        if increment_count >= MAX_RETRANSMISSIONS:
            return
        self._debug(f"Check for retransmittion at term {term} increment {increment_count}")
        pending = [
            node_id for node_id, status in enumerate(self.members)
            if node_id != self.node_id and status.in_group
            and status.last_term < self.current_term
        ]
        for node_id in pending:
            self._debug(f"Retransmitting to {node_id}")
            self.send_data(self.size_of_data, self.ip_from_id(node_id))
        if pending:
            self.simulator.schedule(RETRANSMISSION_INTERVAL, self.retransmit_data,
                                    term, increment_count + 1)

    def id_from_ip(self, ip: Hashable) -> int:
        """Index of ``ip`` among the peers, or -1 if it is unknown."""
        try:
            return self.peers.index(ip)
        except ValueError:
            return -1

    def ip_from_id(self, node_id: int) -> Hashable:
        return self.peers[node_id]

    def send_data(self, size_of_data: float, destination: Hashable) -> bool:
        """Leader only: send a DATA packet of the current term to ``destination``."""
        if not self.running or not self.is_leader:
            return False
        packet = ApplicationPacket.data(self.current_term, size_of_data)
        return self.send_packet(packet, destination)

    def process_follower_response(self, packet: ApplicationPacket, sender: Hashable) -> None:
        """Record the term a follower has acknowledged."""
        if not self.running or not self.is_leader:
            return
        follower_id = self.id_from_ip(sender)
        if follower_id < 0:
            return
        self.members[follower_id].last_term = packet.term

    def receive_new_topology(self, new_group: Iterable[tuple[int, Hashable]]) -> None:
        """Replace the current group with the nodes listed in ``new_group``."""
        if not self.running:
            return
        for status in self.members:
            status.in_group = False
        for node_id, _ip in new_group:
            if 0 <= node_id < len(self.members):
                self.members[node_id].in_group = True


def install_central(
    simulator: Simulator,
    network: Network,
    node_ids: Iterable[int],
    peers: Sequence[Hashable],
) -> list[Central]:
    """Create and set up one Central application per node id."""
    apps = []
    for node_id in node_ids:
        logger.info("Install Central on node : %s", node_id)
        app = Central(simulator, network)
        app.setup(node_id, peers)
        apps.append(app)
    return apps