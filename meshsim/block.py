"""Blocks of the block graph."""

from __future__ import annotations

import enum
import struct
from collections.abc import Iterable

from .transaction import Transaction
from .utils import dump, hashing


class BlockType(enum.IntEnum):
    REGULAR = 0
    MERGE = 1


HASH_SIZE = 32


def _pad(value: bytes, filler: bytes) -> bytes:
    value = bytes(value)
    if len(value) > HASH_SIZE:
        raise ValueError(f"value longer than {HASH_SIZE} bytes")
    return value + filler * (HASH_SIZE - len(value))


class Block:
    """A block: header fields, parent hashes and a list of transactions."""

    HASH_SIZE = HASH_SIZE
    _HEADER = struct.Struct(f"<diiiiii{HASH_SIZE}s{HASH_SIZE}s")

    def __init__(
        self,
        hash: bytes | None = None,
        index: int = 0,
        leader: int = 0,
        block_type: int = BlockType.REGULAR,
        group_id: bytes | None = None,
        parents: Iterable[bytes] = (),
        timestamp: float = 0.0,
        transactions: Iterable[Transaction] = (),
    ) -> None:
        """Build a block; with no hash given, the hash is computed from the content."""
        self.hash = bytes(self.HASH_SIZE) if hash is None else _pad(hash, b"1")
        self._index = index
        self._leader = leader
        self._block_type = int(block_type)
        self._group_id = bytes(self.HASH_SIZE) if group_id is None else _pad(group_id, b"0")
        self._parents = [bytes(p) for p in parents]
        self._timestamp = float(timestamp)
        self._transactions = list(transactions)
        self._size = self.calculate_size()
        if hash is None:
            self.calculate_hash()

    @classmethod
    def from_bytes(cls, data: bytes) -> "Block":
        """Rebuild a block from its serialised form."""
        data = bytes(data)
        if len(data) < cls._HEADER.size:
            raise ValueError("truncated block header")
        (timestamp, size, index, leader, parents_count, tx_count,
         block_type, group_id, raw_hash) = cls._HEADER.unpack_from(data)
        if parents_count < 0 or tx_count < 0:
            raise ValueError("negative element count in block header")
        offset = cls._HEADER.size
        parents_end = offset + parents_count * cls.HASH_SIZE
        if len(data) < parents_end:
            raise ValueError("truncated block parents")
        parents = [data[pos:pos + cls.HASH_SIZE]
                   for pos in range(offset, parents_end, cls.HASH_SIZE)]
        offset = parents_end
        transactions = []
        for _ in range(tx_count):
            tx = Transaction.from_bytes(data[offset:])
            transactions.append(tx)
            offset += tx.size

        block = cls.__new__(cls)
        block.hash = raw_hash
        block._index = index
        block._leader = leader
        block._block_type = block_type
        block._group_id = group_id
        block._parents = parents
        block._timestamp = timestamp
        block._transactions = transactions
        block._size = size
        block._size = block.calculate_size()
        return block

    @property
    def index(self) -> int:
        return self._index

    @index.setter
    def index(self, value: int) -> None:
        self._index = value
        self.calculate_hash()

    @property
    def leader(self) -> int:
        return self._leader

    @leader.setter
    def leader(self, value: int) -> None:
        self._leader = value
        self.calculate_hash()

    @property
    def block_type(self) -> int:
        return self._block_type

    @block_type.setter
    def block_type(self, value: int) -> None:
        self._block_type = int(value)
        self.calculate_hash()

    @property
    def group_id(self) -> bytes:
        return self._group_id

    @group_id.setter
    def group_id(self, value: bytes) -> None:
        self._group_id = _pad(value, b"\0")
        self.calculate_hash()

    @property
    def parents(self) -> list[bytes]:
        return list(self._parents)

    @parents.setter
    def parents(self, value: Iterable[bytes]) -> None:
        self._parents = [_pad(p, b"\0") for p in value]
        self._size = self.calculate_size()
        self.calculate_hash()

    @property
    def timestamp(self) -> float:
        return self._timestamp

    @timestamp.setter
    def timestamp(self, value: float) -> None:
        self._timestamp = float(value)
        self.calculate_hash()

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @transactions.setter
    def transactions(self, value: Iterable[Transaction]) -> None:
        self._transactions = list(value)
        self._size = self.calculate_size()
        self.calculate_hash()

    @property
    def size(self) -> int:
        return self._size

    @size.setter
    def size(self, value: int) -> None:
        self._size = value
        self.calculate_hash()

    @property
    def txs_count(self) -> int:
        return len(self._transactions)

    def is_parent(self, block: "Block") -> bool:
        """True if this block is one of ``block``'s parents."""
        return self.hash in block._parents

    def is_child(self, block: "Block") -> bool:
        """True if ``block`` is one of this block's parents."""
        return block.is_parent(self)

    def is_part_of_group(self, group_id: bytes) -> bool:
        # The block's own group id is compared with itself, so every block matches.
        return self._group_id == self._group_id

    def is_merge_block(self) -> bool:
        return self._block_type == BlockType.MERGE

    def calculate_hash(self) -> bytes:
        self.hash = bytes(self.HASH_SIZE)
        self.hash = hashing(self.serialize(), self.HASH_SIZE)
        return self.hash

    def calculate_size(self) -> int:
        return self.calculate_header_size() + self.calculate_txs_size()

    def calculate_txs_size(self) -> int:
        return sum(tx.size for tx in self._transactions)

    def calculate_header_size(self) -> int:
        fixed = self.HASH_SIZE + 4 + 4 + 4 + 4 + 8 + self.HASH_SIZE
        return fixed + len(self._parents) * self.HASH_SIZE

    def serialize(self) -> bytes:
        """Header, then parent hashes, then serialised transactions."""
        header = self._HEADER.pack(
            self._timestamp,
            self._size,
            self._index,
            self._leader,
            len(self._parents),
            len(self._transactions),
            self._block_type,
            self._group_id,
            self.hash,
        )
        parts = [header, *self._parents]
        parts.extend(tx.serialize() for tx in self._transactions)
        return b"".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Block):
            return NotImplemented
        return self.hash == other.hash

    def __hash__(self) -> int:
        return hash(self.hash)

    def __repr__(self) -> str:
        parents = "".join(f"{dump(p, 10)}," for p in self._parents)
        if len(self._transactions) <= 2:
            txs = "".join(f"{tx!r}," for tx in self._transactions)
        else:
            txs = "..."
        return (
            f"Block({dump(self.hash, 10)},{self._index},{self._leader},"
            f"{self._block_type},{dump(self._group_id, 10)},{self._timestamp:g},"
            f"{self._size},[{parents}],[{txs}])"
        )