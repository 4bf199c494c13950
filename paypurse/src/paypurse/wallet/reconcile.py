"""
Full resynchronization of the coin store from a remote source.
"""

from __future__ import annotations

from loguru import logger

from paypurse.backends.base import UnspentSource
from paypurse.errors import StoreError
from paypurse.store.base import CoinStore
from paypurse.wallet.models import Outpoint


class Reconciler:
    """
    Replaces the local inventory with the remote snapshot.

    The remote fetch completes before anything local is touched, so a failed
    fetch never destroys existing state.
    """

    def __init__(self, store: CoinStore, source: UnspentSource, address: str):
        self.store = store
        self.source = source
        self.address = address

    async def resync(self) -> tuple[int, int]:
        """
        Returns:
            (total value, coin count) of the entries written

        Raises:
            RemoteSourceError: Fetch failed; store left untouched
            StoreError: The store could not be cleared
        """
        utxos = await self.source.get_unspent(self.address)

        await self.store.clear()

        balance = 0
        count = 0
        for utxo in utxos:
            if utxo.is_spent:
                logger.debug(f"Skipping {utxo.tx_hash}.{utxo.tx_pos}: spent in mempool")
                continue
            try:
                outpoint = Outpoint(utxo.tx_hash.lower(), utxo.tx_pos)
                await self.store.insert(outpoint, utxo.value)
            except StoreError as e:
                logger.warning(f"Failed to store {utxo.tx_hash}.{utxo.tx_pos}: {e}")
                continue
            balance += utxo.value
            count += 1

        logger.info(f"Resynced {self.address}: {count} coin(s), {balance} sats")
        return balance, count
