"""A block graph: blocks keyed by hash, linked through their parent hashes."""

from __future__ import annotations

import re
from collections.abc import Iterator

from .block import Block
from .transaction import Transaction

_UNKNOWN_GROUP = b"0000"
_LEADING_DIGITS = re.compile(rb"\d+")


def _hash_number(tx_hash: bytes) -> int:
    """Numeric value of the leading decimal digits of a transaction hash."""
    match = _LEADING_DIGITS.match(tx_hash)
    return int(match.group()) if match else 0


class Blockgraph:
    """A set of blocks indexed by hash, starting with a genesis block."""

    def __init__(self) -> None:
        self._blocks: dict[bytes, Block] = {}
        self.txs_count = 0
        self.txs_byte_size = 0
        genesis = Block(b"0", 0, 0, 0, b"0", [], 0.0, [])
        self.add_block(genesis)

    def _ordered(self) -> Iterator[Block]:
        for key in sorted(self._blocks):
            yield self._blocks[key]

    @property
    def blocks(self) -> dict[bytes, Block]:
        """All blocks, keyed by hash, in hash order."""
        return {key: self._blocks[key] for key in sorted(self._blocks)}

    @property
    def blocks_count(self) -> int:
        return len(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, (Block, bytes)):
            return self.has_block(item)
        return False

    def byte_size(self) -> int:
        """Total size in bytes of all blocks."""
        return sum(block.size for block in self._blocks.values())

    def add_block(self, block: Block) -> None:
        """Add ``block`` unless a block with the same hash is already present."""
        if self.has_block(block):
            return
        self.txs_count += block.txs_count
        self.txs_byte_size += block.calculate_txs_size()
        self._blocks[block.hash] = block

    def has_block(self, block_or_hash: Block | bytes) -> bool:
        key = block_or_hash.hash if isinstance(block_or_hash, Block) else bytes(block_or_hash)
        return key in self._blocks

    def get_block(self, hash: bytes) -> Block:
        """Return the block with the given hash; raise KeyError if absent."""
        try:
            return self._blocks[bytes(hash)]
        except KeyError:
            raise KeyError(f"no block with hash {bytes(hash)!r}") from None

    def get_children(self, block: Block) -> list[bytes]:
        # Selects the stored blocks for which ``block.is_child`` holds, i.e. those
        # listed among ``block``'s parents.
        return [b.hash for b in self._ordered() if block.is_child(b)]

    def get_group_id(self, hash: bytes) -> bytes:
        """Group id of the block with ``hash``, or ``b"0000"`` if unknown."""
        block = self._blocks.get(bytes(hash))
        return block.group_id if block is not None else _UNKNOWN_GROUP

    def all_block_hashes(self) -> list[bytes]:
        return sorted(self._blocks)

    def blocks_from_group(self, group_id: bytes) -> list[Block]:
        return [b for b in self._ordered() if b.group_id == group_id]

    def childless_block_list(self) -> list[bytes]:
        """Hashes of blocks that no stored block names as a parent, in hash order."""
        referenced = {p for b in self._blocks.values() for p in b.parents}
        return sorted(set(self._blocks) - referenced)

    def childless_blocks(self) -> list[Block]:
        return [self._blocks[key] for key in self.childless_block_list()]

    def is_childless(self, block: Block) -> bool:
        return not any(block.hash in b.parents for b in self._blocks.values())

    def _all_transactions(self) -> Iterator[Transaction]:
        for block in self._ordered():
            yield from block.transactions

    def is_tx_in_bg(self, tx: Transaction) -> bool:
        return any(t.hash == tx.hash for t in self._all_transactions())

    def count_rep_tx(self, tx: Transaction) -> int:
        """Number of times a transaction with ``tx``'s hash appears in the graph."""
        return sum(1 for t in self._all_transactions() if t.hash == tx.hash)

    def compute_transaction_repetition(self) -> int:
        """Count distinct transactions occurring more than once, reporting each."""
        seen: dict[bytes, int] = {}
        for tx in self._all_transactions():
            occurrences = self.count_rep_tx(tx)
            if occurrences > 1 and tx.hash not in seen:
                print(f"Transaction Hash: {_hash_number(tx.hash)} : Ocurrences : {occurrences}")
                seen[tx.hash] = occurrences
        return len(seen)

    def mean_tx_per_block(self) -> float:
        """Whole number of transactions per block (integer division), as a float."""
        total = sum(b.txs_count for b in self._blocks.values())
        return float(total // len(self._blocks))

    def __repr__(self) -> str:
        inner = "".join(f"{block!r}," for block in self._ordered())
        return f"Blockgraph ({len(self._blocks)},[{inner}])"