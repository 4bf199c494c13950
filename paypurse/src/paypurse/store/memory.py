"""
In-memory coin store for single-process deployments and tests.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from paypurse.store.base import CoinStore
from paypurse.wallet.models import Coin, Outpoint


class MemoryCoinStore(CoinStore):
    """
    Dict-backed store with an expiring key table for reservations.

    ``clock`` returns seconds; inject a fake one to step leases forward.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._coins: dict[Outpoint, int] = {}
        self._expiring: dict[str, tuple[str, float]] = {}
        self._mutex = threading.Lock()

    async def insert(self, outpoint: Outpoint, value: int) -> None:
        with self._mutex:
            self._coins[outpoint] = value

    async def remove(self, outpoint: Outpoint) -> None:
        with self._mutex:
            self._coins.pop(outpoint, None)

    async def top_by_value(self, limit: int) -> list[Coin]:
        with self._mutex:
            ranked = sorted(self._coins.items(), key=lambda item: item[1], reverse=True)
        return [Coin(outpoint=op, value=value) for op, value in ranked[: max(limit, 0)]]

    async def clear(self) -> None:
        with self._mutex:
            self._coins.clear()

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        now = self.clock()
        with self._mutex:
            self._purge_expired(now)
            if key in self._expiring:
                return False
            self._expiring[key] = (value, now + ttl_seconds)
            return True

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (_, expiry) in self._expiring.items() if expiry <= now]
        for k in expired:
            del self._expiring[k]

    def get(self, key: str) -> str | None:
        """Current value of an unexpired key"""
        with self._mutex:
            existing = self._expiring.get(key)
        if existing is None or existing[1] <= self.clock():
            return None
        return existing[0]

    def __len__(self) -> int:
        return len(self._coins)
