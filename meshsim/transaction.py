"""Transactions carried inside blocks."""

from __future__ import annotations

import struct

from .utils import dump, hashing


class Transaction:
    """A transaction identified by a hash computed over its serialised form."""

    HASH_SIZE = 20
    _HEADER = struct.Struct(f"<di{HASH_SIZE}s")

    def __init__(
        self,
        hash: bytes = b"",
        size: int = 0,
        payload: bytes = b"",
        timestamp: float = 0.0,
    ) -> None:
        # The given hash and size are replaced by values computed from the content.
        self.hash = bytes(hash)
        self._size = size
        self._payload = bytes(payload)
        self._timestamp = float(timestamp)
        self.calculate_size()
        self.calculate_hash()

    @classmethod
    def from_bytes(cls, data: bytes) -> "Transaction":
        """Rebuild a transaction from its serialised form."""
        data = bytes(data)
        if len(data) < cls._HEADER.size:
            raise ValueError("truncated transaction header")
        timestamp, size, raw_hash = cls._HEADER.unpack_from(data)
        if size < cls._HEADER.size or len(data) < size:
            raise ValueError(f"invalid transaction size {size}")
        tx = cls.__new__(cls)
        tx.hash = raw_hash
        tx._size = size
        tx._timestamp = timestamp
        tx._payload = data[cls._HEADER.size:size]
        return tx

    @property
    def size(self) -> int:
        return self.calculate_size()

    @size.setter
    def size(self, value: int) -> None:
        self._size = value
        self.calculate_hash()

    @property
    def payload(self) -> bytes:
        return self._payload

    @payload.setter
    def payload(self, value: bytes) -> None:
        self._payload = bytes(value)
        self.calculate_size()
        self.calculate_hash()

    @property
    def timestamp(self) -> float:
        return self._timestamp

    @timestamp.setter
    def timestamp(self, value: float) -> None:
        self._timestamp = float(value)
        self.calculate_hash()

    def serialize(self) -> bytes:
        """Header (timestamp, size, hash) followed by the payload."""
        return self._HEADER.pack(self._timestamp, self._size, self.hash) + self._payload

    def calculate_size(self) -> int:
        self._size = self.calculate_header_size() + len(self._payload)
        return self._size

    def calculate_header_size(self) -> int:
        return self.HASH_SIZE + 4 + 8

    def calculate_hash(self) -> bytes:
        self.hash = bytes(self.HASH_SIZE)
        self.hash = hashing(self.serialize(), self.HASH_SIZE)
        return self.hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.hash == other.hash

    def __hash__(self) -> int:
        return hash(self.hash)

    def __repr__(self) -> str:
        return (
            f"Transaction({dump(self.hash, 10)},{self._timestamp:g},"
            f"{self._size},{dump(self._payload, 10)})"
        )