"""
End-to-end tests of the purse facade over in-memory and fake Redis stores.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from factories import OTHER_SCRIPT, OWNER_ADDRESS, OWNER_WIF, make_outpoint

from paypurse.backends.base import RemoteUTXO
from paypurse.config import Settings
from paypurse.crypto import CryptoError
from paypurse.errors import InsufficientFunds, RemoteSourceError
from paypurse.store.redis_store import RedisCoinStore
from paypurse.wallet.models import Outpoint
from paypurse.wallet.service import PayPurse
from paypurse.wallet.transaction import Transaction, TxInput, TxOutput


@pytest.fixture
def source() -> MagicMock:
    source = MagicMock()
    source.get_unspent = AsyncMock(
        return_value=[
            RemoteUTXO(tx_pos=0, tx_hash="a1" * 32, value=60_000),
            RemoteUTXO(tx_pos=2, tx_hash="b2" * 32, value=15_000),
            RemoteUTXO(tx_pos=1, tx_hash="c3" * 32, value=99_000, isSpentInMempoolTx=True),
        ]
    )
    source.close = AsyncMock()
    return source


@pytest.fixture
def purse(owner, store, source) -> PayPurse:
    return PayPurse(owner, store, source=source, sats_per_kb=500, change_splits=2)


def receive(purse: PayPurse, value: int) -> Transaction:
    """A transaction from elsewhere paying the purse"""
    return Transaction(
        inputs=[TxInput(make_outpoint("funder").txid, 0, unlocking_script=b"\x00")],
        outputs=[TxOutput(value, purse.owner.locking_script)],
    )


class TestPayPurse:
    @pytest.mark.asyncio
    async def test_receive_fund_observe_cycle(self, purse):
        incoming = receive(purse, 100_000)
        await purse.update_from_tx(incoming)
        assert await purse.balance() == (100_000, 1)

        payment = Transaction(outputs=[TxOutput(30_000, OTHER_SCRIPT)])
        await purse.fund_and_sign(payment)

        assert payment.inputs[0].source_txid == incoming.txid()
        assert all(inp.unlocking_script for inp in payment.inputs)

        await purse.update_from_tx(payment)

        balance, count = await purse.balance()
        change = [out for out in payment.outputs if out.change]
        assert count == 2
        assert balance == sum(out.satoshis for out in change)
        assert balance < 70_000

    @pytest.mark.asyncio
    async def test_concurrent_funding_uses_distinct_coins(self, owner, redis_store, source):
        purse = PayPurse(owner, redis_store, source=source, sats_per_kb=500)
        await redis_store.insert(make_outpoint("A"), 50_000)
        await redis_store.insert(make_outpoint("B"), 50_000)

        first = Transaction(outputs=[TxOutput(20_000, OTHER_SCRIPT)])
        second = Transaction(outputs=[TxOutput(20_000, OTHER_SCRIPT)])
        await asyncio.gather(purse.fund_and_sign(first), purse.fund_and_sign(second))

        first_inputs = {(i.source_txid, i.source_vout) for i in first.inputs}
        second_inputs = {(i.source_txid, i.source_vout) for i in second.inputs}
        assert first_inputs.isdisjoint(second_inputs)

        with pytest.raises(InsufficientFunds):
            await purse.fund_and_sign(Transaction(outputs=[TxOutput(20_000, OTHER_SCRIPT)]))

    @pytest.mark.asyncio
    async def test_lock_utxos(self, purse, store):
        await store.insert(make_outpoint("A"), 5_000)
        coins = await purse.lock_utxos(1_000)
        assert [c.value for c in coins] == [5_000]

    @pytest.mark.asyncio
    async def test_refresh_balance(self, purse, store):
        await store.insert(make_outpoint("stale"), 1)

        assert await purse.refresh_balance() == (75_000, 2)
        assert await purse.balance() == (75_000, 2)
        coins = {c.outpoint for c in await store.top_by_value(25)}
        assert Outpoint("a1" * 32, 0) in coins
        purse.source.get_unspent.assert_awaited_once_with(OWNER_ADDRESS)

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_balance(self, purse, store, source):
        await store.insert(make_outpoint("kept"), 4_321)
        before = await purse.balance()
        source.get_unspent.side_effect = RemoteSourceError("timeout")

        with pytest.raises(RemoteSourceError):
            await purse.refresh_balance()
        assert await purse.balance() == before

    @pytest.mark.asyncio
    async def test_refresh_without_source(self, owner, store):
        purse = PayPurse(owner, store)
        with pytest.raises(ValueError):
            await purse.refresh_balance()

    @pytest.mark.asyncio
    async def test_close(self, purse, source):
        await purse.close()
        source.close.assert_awaited_once()


class TestFromSettings:
    def test_invalid_wif(self):
        with pytest.raises(CryptoError):
            PayPurse.from_settings(Settings(wif="garbage"))

    @pytest.mark.asyncio
    async def test_builds_redis_purse(self):
        settings = Settings(wif=OWNER_WIF, change_splits=3, selection_window=10)
        purse = PayPurse.from_settings(settings)
        try:
            assert purse.address == OWNER_ADDRESS
            assert isinstance(purse.store, RedisCoinStore)
            assert purse.store.utxo_key == f"u:{OWNER_ADDRESS}"
            assert purse.selector.window == 10
            assert purse.orchestrator.change_splits == 3
        finally:
            await purse.close()
