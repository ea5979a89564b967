"""Shared helpers: hex dumps, tokenising, directory listing, hashing and random draws."""

from __future__ import annotations

import math
import os
import random
import re
import zlib

# Transaction payload size (bytes)
TX_PAYLOAD_MIN = 300
TX_PAYLOAD_MAX = 600
TX_MEAN_SIZE = 450

# Minimum time to propagate a block before creating a new one (seconds)
TIME_BTW_BLOCK = 15

# Block size limits and mempool size, in KB
MAX_SIZE_BLOCK = 54
MIN_SIZE_BLOCK = 36
SIZE_MEMPOOL = 5000

# Recurrent timers (seconds)
SEC_60_TIMER = 60
SEC_10_TIMER = 10
SEC_5_TIMER = 5
TESTMEMPOOL_TIMER = 1.5
RETRANSMISSION_TIMER = 60

# Seconds a topology must be stable before a small change is accepted
TOPOLOGY_TOLERANCE_TIME = 10

RANDOM_SEED = 2

_POISSON_MEAN = 4
_UNIFORM_SPAN = 100000

_poisson_rng = random.Random(RANDOM_SEED)
_uniform_rng = random.Random(RANDOM_SEED)


def dump(data: bytes, size: int) -> str:
    """Return the first ``size`` bytes of ``data`` as a ``0x``-prefixed hex string."""
    return "0x" + bytes(data[:size]).hex()


def tokenize(s: str, delimiters: str = " ") -> list[str]:
    """Split ``s`` on any character of ``delimiters``, dropping empty tokens."""
    if not delimiters:
        return [s] if s else []
    pattern = "[" + re.escape(delimiters) + "]+"
    return [token for token in re.split(pattern, s) if token]


def list_dir(dirname: str | os.PathLike) -> list[str]:
    """Names of the regular files in ``dirname``; empty if it cannot be read."""
    try:
        with os.scandir(dirname) as entries:
            return sorted(e.name for e in entries if e.is_file(follow_symlinks=False))
    except OSError:
        return []


def hashing(data: bytes | str, hash_size: int = 20) -> bytes:
    """CRC-32 of ``data`` shifted right by 8 bits, in decimal, NUL-padded to ``hash_size``."""
    if isinstance(data, str):
        data = data.encode()
    digest = str(zlib.crc32(data) >> 8).encode("ascii")
    return digest.ljust(hash_size, b"\0")


def poisson_rand() -> int:
    """Draw from a Poisson distribution of mean 4 using a fixed-seed generator."""
    limit = math.exp(-_POISSON_MEAN)
    count = 0
    product = _poisson_rng.random()
    while product > limit:
        count += 1
        product *= _poisson_rng.random()
    return count


def uniform_rand(low: int = 0, high: int = 100000) -> int:
    """Draw an integer in ``[low, high]`` using a fixed-seed generator."""
    draw = _uniform_rng.randint(0, _UNIFORM_SPAN)
    proportion = draw / _UNIFORM_SPAN
    return int(proportion * (high - low) + low)