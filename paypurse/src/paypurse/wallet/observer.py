"""
Applies observed transactions to the coin store.
"""

from __future__ import annotations

from loguru import logger

from paypurse.store.base import CoinStore
from paypurse.wallet.models import Outpoint
from paypurse.wallet.transaction import Transaction


class LedgerObserver:
    def __init__(self, store: CoinStore, locking_script: bytes):
        self.store = store
        self.locking_script = locking_script

    async def observe(self, tx: Transaction) -> None:
        """
        Remove every coin the transaction spends and add every output paying
        the owner. Spent outpoints that are not ours are harmless no-ops.
        """
        for inp in tx.inputs:
            await self.store.remove(Outpoint(inp.source_txid, inp.source_vout))

        txid = tx.txid()
        received = 0
        for vout, out in enumerate(tx.outputs):
            if out.locking_script == self.locking_script:
                await self.store.insert(Outpoint(txid, vout), out.satoshis)
                received += 1

        logger.info(f"Observed {txid}: spent {len(tx.inputs)}, received {received}")
