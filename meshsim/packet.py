"""Application packets exchanged between the leader and its followers."""

from __future__ import annotations

import enum
import math
import random
import struct
from dataclasses import dataclass, field

_HEADER = struct.Struct("<ib")
_TERM = struct.Struct("<i")


class Service(enum.IntEnum):
    DATA = 0
    REPLY = 1


@dataclass
class ApplicationPacket:
    """A packet: a 5-byte header (size, service) followed by a payload."""

    service: Service = Service.DATA
    payload: bytes = b""
    size: int = field(default=-1)

    def __post_init__(self) -> None:
        self.service = Service(self.service)
        self.payload = bytes(self.payload)
        if self.size < 0:
            self.size = self.calculate_size()

    @classmethod
    def data(cls, term: int, data_size: float) -> "ApplicationPacket":
        """DATA packet: the term followed by ``data_size`` random bytes."""
        count = max(0, math.ceil(data_size))
        return cls(Service.DATA, _TERM.pack(term) + random.randbytes(count))

    @classmethod
    def reply(cls, term: int) -> "ApplicationPacket":
        """REPLY packet carrying only the term."""
        return cls(Service.REPLY, _TERM.pack(term))

    @classmethod
    def from_bytes(cls, data: bytes) -> "ApplicationPacket":
        """Rebuild a packet from its serialised form."""
        data = bytes(data)
        if len(data) < _HEADER.size:
            raise ValueError("truncated packet header")
        size, service = _HEADER.unpack_from(data)
        if size < _HEADER.size or size > len(data):
            raise ValueError(f"invalid packet size {size}")
        return cls(Service(service), data[_HEADER.size:size], size)

    @staticmethod
    def header_size() -> int:
        return _HEADER.size

    def calculate_size(self) -> int:
        """Size of the serialised packet, header included."""
        return _HEADER.size + len(self.payload)

    @property
    def term(self) -> int:
        """Term stored in the first four payload bytes, or -1 if absent."""
        if len(self.payload) < _TERM.size:
            return -1
        return _TERM.unpack_from(self.payload)[0]

    def serialize(self) -> bytes:
        return _HEADER.pack(self.size, int(self.service)) + self.payload

    def __str__(self) -> str:
        return f"Packet({int(self.service)},{self.size},{self.payload!r})"