"""
Per-coin reservation leases.
"""

from __future__ import annotations

import time

from loguru import logger

from paypurse.constants import LOCK_KEY_PREFIX, LOCK_TTL_SECONDS
from paypurse.store.base import CoinStore
from paypurse.wallet.models import Outpoint


class ReservationLock:
    """
    Time-bounded exclusive claim on a coin.

    This is a lease, not a mutex: there is no release. A reservation lapses
    only when its lease elapses, whether or not the holder used the coin.
    The coin itself stays in the store and remains visible to selection.
    """

    def __init__(self, store: CoinStore, lease_seconds: int = LOCK_TTL_SECONDS):
        self.store = store
        self.lease_seconds = lease_seconds

    @staticmethod
    def key_for(outpoint: Outpoint) -> str:
        return LOCK_KEY_PREFIX + str(outpoint)

    async def try_acquire(self, outpoint: Outpoint, lease_seconds: int | None = None) -> bool:
        """Reserve ``outpoint``. Exactly one concurrent caller gets True."""
        acquired = await self.store.set_if_absent(
            self.key_for(outpoint),
            str(int(time.time())),
            lease_seconds or self.lease_seconds,
        )
        if not acquired:
            logger.debug(f"Coin {outpoint} already reserved")
        return acquired
