"""Time-ordered ids for slots and matches.

An id packs the milliseconds since the club epoch, the MACHINE_ID of the
process and a per-millisecond counter into one integer, so ids sort in
creation order. Business ids carry a short prefix ("SLT-", "MCH-") which
makes ledger references and log lines self-describing.
"""

import threading
import time

from config.settings import settings

CLUB_EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
MACHINE_BITS = 10
COUNTER_BITS = 12
MAX_MACHINE_ID = (1 << MACHINE_BITS) - 1
MAX_COUNTER = (1 << COUNTER_BITS) - 1


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class SnowflakeIdGenerator:
    def __init__(self, machine_id: int = 0) -> None:
        if machine_id < 0 or machine_id > MAX_MACHINE_ID:
            raise ValueError(f"machine_id must be 0-{MAX_MACHINE_ID}, got {machine_id}")
        self._machine_id = machine_id
        self._last_ms = -1
        self._counter = 0
        self._mutex = threading.Lock()

    def next_int(self) -> int:
        with self._mutex:
            now = max(_now_ms(), self._last_ms)
            if now == self._last_ms:
                self._counter = (self._counter + 1) & MAX_COUNTER
                if self._counter == 0:
                    # counter exhausted for this millisecond
                    while now <= self._last_ms:
                        now = _now_ms()
            else:
                self._counter = 0
            self._last_ms = now
            elapsed = now - CLUB_EPOCH_MS
            return (elapsed << (MACHINE_BITS + COUNTER_BITS)) | (
                self._machine_id << COUNTER_BITS
            ) | self._counter


_generator = SnowflakeIdGenerator(settings.MACHINE_ID)


def generate_id(prefix: str = "") -> str:
    """generate_id("SLT") -> 'SLT-81234567890123'; no prefix gives bare digits."""
    value = _generator.next_int()
    return f"{prefix}-{value}" if prefix else str(value)
