"""Group membership tracking from routing-table changes."""

from __future__ import annotations

import enum
import ipaddress
import logging
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any

from .utils import TOPOLOGY_TOLERANCE_TIME

logger = logging.getLogger(__name__)

GROUP_ID_SIZE = 32
_INT_MAX = 2**31 - 1

Member = tuple[int, Hashable]
ChangeCallback = Callable[[list[Member]], Any]


class GroupChange(enum.IntEnum):
    """Nature of a change between two successive groups."""

    NONE = 0
    SPLIT = 1
    MERGE = 2
    ARBITRARY = 3


def _ip_bytes(ip: Hashable) -> bytes:
    """Network-order bytes of an address given as bytes, text, integer or address object."""
    if isinstance(ip, (bytes, bytearray)):
        return bytes(ip)
    return ipaddress.ip_address(ip).packed


def _sorted_group(group: Iterable[Member]) -> list[Member]:
    return sorted(group, key=lambda member: (member[0], _ip_bytes(member[1])))


def _signed(byte: int) -> int:
    return byte - 256 if byte >= 128 else byte


def calculate_group_id(group: Iterable[Member]) -> bytes:
    """Identifier of a group: the sum of its encoded members, NUL-padded to 32 bytes."""
    encoded = b"".join(
        str(node_id).encode("ascii") + _ip_bytes(ip) for node_id, ip in _sorted_group(group)
    )
    total = sum(_signed(byte) for byte in encoded)
    remainder = abs(total) % _INT_MAX
    if total < 0:
        remainder = -remainder
    digest = str(remainder).encode("ascii")
    return digest.ljust(GROUP_ID_SIZE, b"\0")


def detect_nature_change(old_group: Sequence[Member], new_group: Sequence[Member]) -> GroupChange:
    """Classify the move from ``old_group`` to ``new_group``."""
    old_group = list(old_group)
    new_group = list(new_group)
    if new_group == old_group:
        return GroupChange.NONE
    common = sum(1 for member in new_group if member in old_group)
    if common == len(new_group):
        return GroupChange.SPLIT
    if common == len(old_group):
        return GroupChange.MERGE
    return GroupChange.ARBITRARY


class GroupTracker:
    """Keeps the current group of a node and reports accepted changes."""

    def __init__(
        self,
        node_id: int,
        peers: Sequence[Hashable],
        on_change: ChangeCallback | None = None,
    ) -> None:
        self.node_id = node_id
        self.peers = list(peers)
        self.on_change = on_change
        self.group: list[Member] = []
        self.group_id: bytes = bytes(GROUP_ID_SIZE)
        self.time_change: float = 0
        self.last_change: GroupChange = GroupChange.NONE

    @property
    def address(self) -> Hashable:
        return self.peers[self.node_id]

    def table_change(self, destinations: Iterable[Hashable], now: float) -> bool:
        """Build a candidate group from routing destinations; return True if applied."""
        own = self.address
        candidate: list[Member] = [(self.node_id, own)]
        for dest in destinations:
            if dest == own:
                continue
            candidate.extend((i, dest) for i, peer in enumerate(self.peers) if peer == dest)
        candidate = _sorted_group(candidate)
        if candidate == self.group:
            return False
        return self.check_group_change(candidate, now)

    def check_group_change(self, candidate: Sequence[Member], now: float) -> bool:
        """Apply ``candidate`` now, unless the topology changed too recently for a small change."""
        if now - self.time_change < TOPOLOGY_TOLERANCE_TIME:
            logger.debug("Topology changed again; checking whether the change is considerable")
            if not self.differs_enough(candidate):
                logger.debug("Difference between groups too small; ignoring this change")
                return False
        self.change_group(candidate, now)
        return True

    def change_group(self, candidate: Sequence[Member], now: float) -> None:
        """Make ``candidate`` the current group and notify the listener."""
        candidate = list(candidate)
        logger.debug(
            "Old topology : %s New topology : %s",
            [m[0] for m in self.group],
            [m[0] for m in candidate],
        )
        self.group_id = calculate_group_id(candidate)
        self.last_change = detect_nature_change(self.group, candidate)
        self.group = candidate
        if self.on_change is not None:
            self.on_change(list(self.group))
        self.time_change = int(now)

    def differs_enough(self, candidate: Sequence[Member]) -> bool:
        """True if ``candidate`` differs from the current group by enough members."""
        candidate = list(candidate)
        diff = len(self.group) - len(candidate)
        if abs(diff) < 2:
            new_members = sum(1 for member in candidate if member not in self.group)
            limit = 1 if len(candidate) < len(self.group) else 2
            if new_members < limit:
                return False
        return True