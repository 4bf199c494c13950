"""
Greedy coin selection over a fixed window of the highest-value coins.
"""

from __future__ import annotations

from loguru import logger

from paypurse.constants import LOCK_TTL_SECONDS, SELECTION_WINDOW
from paypurse.errors import InsufficientFunds
from paypurse.store.base import CoinStore
from paypurse.wallet.lock import ReservationLock
from paypurse.wallet.models import Coin


class CoinSelector:
    """
    Reserve coins until their value covers a target.

    Only the top ``window`` coins by value are ever inspected in one call.
    Coins reserved by someone else still occupy a window slot, so coins
    beyond the window are unreachable even when the window is mostly leased.
    """

    def __init__(
        self,
        store: CoinStore,
        lock: ReservationLock | None = None,
        window: int = SELECTION_WINDOW,
        lease_seconds: int = LOCK_TTL_SECONDS,
    ):
        if window < 1:
            raise ValueError("Selection window must be at least 1")
        self.store = store
        self.lock = lock or ReservationLock(store, lease_seconds)
        self.window = window
        self.lease_seconds = lease_seconds

    async def select(self, target: int) -> list[Coin]:
        """
        Reserve coins worth at least ``target`` satoshis.

        Returns:
            Reserved coins in descending value order (empty for target 0)

        Raises:
            InsufficientFunds: The window ran out before reaching target.
                Coins reserved on the way stay leased until expiry.
            StoreError: On store failure
        """
        candidates = await self.store.top_by_value(self.window)

        selected: list[Coin] = []
        collected = 0
        for coin in candidates:
            if collected >= target:
                break
            if await self.lock.try_acquire(coin.outpoint, self.lease_seconds):
                selected.append(coin)
                collected += coin.value
                logger.debug(f"Reserved {coin.outpoint} ({coin.value} sats)")

        if collected < target:
            logger.warning(
                f"Insufficient funds: need {target}, reserved {collected} "
                f"from {len(candidates)} candidates"
            )
            raise InsufficientFunds(target, collected, selected)

        if selected:
            logger.info(f"Selected {len(selected)} coin(s) worth {collected} sats for {target}")
        return selected
