"""Counters and timings collected during a simulation run."""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_EXPORT_PATH = Path("scratch/b4mesh/Traces/BlockInfo.txt")


def _accumulate(table: dict[float, int], timestamp: float, value: int) -> None:
    table[timestamp] = table.get(timestamp, 0) + value


def _fmt(value: float) -> str:
    return f"{value:g}"


def _average(total: float, count: int) -> float:
    return total / count if count else float("nan")


class B4MTraces:
    """Traffic counters keyed by timestamp, plus election and block statistics."""

    def __init__(self) -> None:
        self.bytes_received: dict[float, int] = {}
        self.bytes_sent: dict[float, int] = {}
        self.messages_received: dict[float, int] = {}
        self.messages_sent: dict[float, int] = {}
        self.messages_dropped: dict[float, int] = {}
        self.election_delay: dict[float, float] = {}
        self.election_started_at: float = -1
        self.config_change_delay: dict[float, float] = {}
        self.config_change_started_at: float = -1
        self.block_creation: list[tuple[int, int, int, float]] = []
        self.txs_per_block: list[tuple[float, str, int]] = []

    def start_election(self, timestamp: float) -> None:
        if self.election_started_at == -1:
            self.election_started_at = timestamp

    def end_election(self, timestamp: float) -> None:
        if self.election_started_at != -1:
            start = self.election_started_at
            self.election_delay[start] = timestamp - start
            self.election_started_at = -1

    def reset_start_election(self) -> None:
        self.election_started_at = -1

    def start_config_change(self, timestamp: float) -> None:
        if self.config_change_started_at == -1:
            self.config_change_started_at = timestamp

    def end_config_change(self, timestamp: float) -> None:
        # The start time is kept; reset_start_config_change clears it.
        if self.config_change_started_at != -1:
            start = self.config_change_started_at
            self.config_change_delay[start] = timestamp - start

    def reset_start_config_change(self) -> None:
        self.config_change_started_at = -1

    def received_block_info(self, block_hash: int, group_id: int, num_txs: int,
                            creation_time: float) -> None:
        self.block_creation.append((block_hash, group_id, num_txs, creation_time))

    def received_bytes(self, timestamp: float, value: int) -> None:
        _accumulate(self.bytes_received, timestamp, value)

    def sent_bytes(self, timestamp: float, value: int) -> None:
        _accumulate(self.bytes_sent, timestamp, value)

    def received_messages(self, timestamp: float, value: int) -> None:
        _accumulate(self.messages_received, timestamp, value)

    def sent_messages(self, timestamp: float, value: int) -> None:
        _accumulate(self.messages_sent, timestamp, value)

    def dropped_messages(self, timestamp: float, value: int) -> None:
        _accumulate(self.messages_dropped, timestamp, value)

    def print_summary(self) -> str:
        """Totals of bytes and messages sent and received."""
        return (
            f"Total bytes received : {sum(self.bytes_received.values())}\n"
            f"Total bytes sent : {sum(self.bytes_sent.values())}\n"
            f"Total messages received : {sum(self.messages_received.values())}\n"
            f"Total messages sent : {sum(self.messages_sent.values())}\n"
        )

    def print_raft_summary(self) -> str:
        """Number and average delay of elections and configuration changes."""
        elections = len(self.election_delay)
        configs = len(self.config_change_delay)
        election_avg = _average(sum(self.election_delay.values()), elections)
        config_avg = _average(sum(self.config_change_delay.values()), configs)
        return (
            f"Number of elections : {elections}\n"
            f"Average election delay : {_fmt(election_avg)}\n"
            f"Number of configuration change : {configs}\n"
            f"Average configuration change delay : {_fmt(config_avg)}\n"
        )

    def export_results(self, path: str | os.PathLike = DEFAULT_EXPORT_PATH) -> None:
        """Write block creation records to ``path``, one per line."""
        with open(path, "w", encoding="utf-8") as out:
            out.write("#BlockHash GroupId NumTxs CreationTime\n")
            for block_hash, group_id, num_txs, creation_time in self.block_creation:
                out.write(f"{block_hash} {group_id} {num_txs} {_fmt(creation_time)}\n")