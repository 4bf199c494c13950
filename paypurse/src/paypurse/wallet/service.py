"""
Payment purse service: the process-wide context for one owner identity.
"""

from __future__ import annotations

from loguru import logger

from paypurse.backends.base import UnspentSource
from paypurse.backends.whatsonchain import WhatsOnChainSource
from paypurse.config import Settings
from paypurse.constants import (
    DEFAULT_SATS_PER_KB,
    FUNDING_MARGIN,
    LOCK_TTL_SECONDS,
    MAX_FUNDING_ATTEMPTS,
    SELECTION_WINDOW,
)
from paypurse.crypto import OwnerKey
from paypurse.store.base import CoinStore
from paypurse.store.redis_store import RedisCoinStore
from paypurse.wallet.builder import P2PKHTransactionBuilder, TransactionBuilder
from paypurse.wallet.fees import SatoshisPerKilobyte
from paypurse.wallet.funding import FundingOrchestrator
from paypurse.wallet.lock import ReservationLock
from paypurse.wallet.models import Coin
from paypurse.wallet.observer import LedgerObserver
from paypurse.wallet.reconcile import Reconciler
from paypurse.wallet.selector import CoinSelector
from paypurse.wallet.signing import P2PKHTemplate
from paypurse.wallet.transaction import Transaction


class PayPurse:
    """
    Spendable coin inventory of a single account.

    Holds the owner's signing credential and the store handle for the
    lifetime of the process. All collaborators are injected; the only
    teardown is ``close()``.
    """

    def __init__(
        self,
        owner: OwnerKey,
        store: CoinStore,
        source: UnspentSource | None = None,
        builder: TransactionBuilder | None = None,
        sats_per_kb: int = DEFAULT_SATS_PER_KB,
        change_splits: int = 1,
        selection_window: int = SELECTION_WINDOW,
        lock_ttl: int = LOCK_TTL_SECONDS,
        funding_margin: int = FUNDING_MARGIN,
        max_funding_attempts: int = MAX_FUNDING_ATTEMPTS,
    ):
        self.owner = owner
        self.store = store
        self.source = source
        self.sats_per_kb = sats_per_kb
        self.change_splits = change_splits
        self.selection_window = selection_window

        self.template = P2PKHTemplate(owner.private_key, compressed=owner.compressed)
        self.builder = builder or P2PKHTransactionBuilder(SatoshisPerKilobyte(sats_per_kb))
        self.lock = ReservationLock(store, lock_ttl)
        self.selector = CoinSelector(store, self.lock, selection_window, lock_ttl)
        self.orchestrator = FundingOrchestrator(
            self.selector,
            self.builder,
            owner.locking_script,
            self.template,
            change_splits=change_splits,
            funding_margin=funding_margin,
            max_attempts=max_funding_attempts,
        )
        self.observer = LedgerObserver(store, owner.locking_script)

        logger.info(f"Initialized purse for {owner.address}")

    @classmethod
    def from_settings(cls, settings: Settings) -> PayPurse:
        """
        Build a purse from configuration.

        Raises:
            CryptoError: The WIF is missing or invalid
            StoreError: The redis URL is invalid
        """
        owner = OwnerKey.from_wif(settings.wif)
        if owner.network != settings.network:
            logger.warning(f"WIF is for {owner.network}, configured network is {settings.network}")

        store = RedisCoinStore.from_url(settings.redis_url, owner.address)
        source = WhatsOnChainSource(settings.woc_url, timeout=settings.remote_timeout)
        return cls(
            owner,
            store,
            source=source,
            sats_per_kb=settings.sats_per_kb,
            change_splits=settings.change_splits,
            selection_window=settings.selection_window,
            lock_ttl=settings.lock_ttl,
            funding_margin=settings.funding_margin,
            max_funding_attempts=settings.max_funding_attempts,
        )

    @property
    def address(self) -> str:
        return self.owner.address

    async def update_from_tx(self, tx: Transaction) -> None:
        """Apply a transaction the account has seen accepted"""
        await self.observer.observe(tx)

    async def fund_and_sign(self, tx: Transaction, fund_outputs: bool = False) -> Transaction:
        return await self.orchestrator.fund(tx, fund_outputs)

    async def lock_utxos(self, satoshis: int) -> list[Coin]:
        """Reserve coins worth at least ``satoshis``"""
        return await self.selector.select(satoshis)

    async def balance(self) -> tuple[int, int]:
        """(sum, count) over the selection window"""
        return await self.store.total_value(self.selection_window)

    async def refresh_balance(self) -> tuple[int, int]:
        """Resync the inventory from the remote source"""
        if self.source is None:
            raise ValueError("No unspent source configured")
        return await Reconciler(self.store, self.source, self.address).resync()

    async def close(self) -> None:
        await self.store.close()
        if self.source is not None:
            await self.source.close()
