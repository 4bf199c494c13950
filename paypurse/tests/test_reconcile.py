"""
Tests for full resynchronization from WhatsOnChain.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest
from factories import OWNER_ADDRESS, fill_store, make_outpoint

from paypurse.backends.whatsonchain import WhatsOnChainSource
from paypurse.errors import RemoteSourceError, StoreError
from paypurse.store.memory import MemoryCoinStore
from paypurse.wallet.models import Outpoint
from paypurse.wallet.reconcile import Reconciler

BASE_URL = "https://woc.test/v1/bsv/main"


def utxo(tx_hash: str, pos: int, value: int, spent: bool = False) -> dict[str, Any]:
    return {
        "height": 800000,
        "tx_pos": pos,
        "tx_hash": tx_hash,
        "value": value,
        "isSpentInMempoolTx": spent,
        "status": "confirmed",
    }


def source_returning(status: int = 200, **response: Any) -> WhatsOnChainSource:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status, **response)

    source = WhatsOnChainSource(
        BASE_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    source.requests = requests  # type: ignore[attr-defined]
    return source


def failing_source(exc: Exception) -> WhatsOnChainSource:
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    return WhatsOnChainSource(
        BASE_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


TX1 = "a1" * 32
TX2 = "b2" * 32
TX3 = "c3" * 32

REMOTE = {
    "address": OWNER_ADDRESS,
    "error": "",
    "result": [
        utxo(TX1, 0, 40_000),
        utxo(TX2, 1, 25_000),
        utxo(TX3, 0, 9_000, spent=True),
    ],
}


class TestReconciler:
    @pytest.mark.asyncio
    async def test_replaces_local_inventory(self, store):
        await fill_store(store, {make_outpoint("stale"): 1_000_000})
        source = source_returning(json=REMOTE)

        result = await Reconciler(store, source, OWNER_ADDRESS).resync()

        assert result == (65_000, 2)
        assert await store.total_value(25) == (65_000, 2)
        coins = {c.outpoint: c.value for c in await store.top_by_value(25)}
        assert coins == {Outpoint(TX1, 0): 40_000, Outpoint(TX2, 1): 25_000}
        assert str(source.requests[0].url) == (
            f"{BASE_URL}/address/{OWNER_ADDRESS}/unspent/all"
        )

    @pytest.mark.asyncio
    async def test_error_status_keeps_store(self, store):
        await fill_store(store, {make_outpoint("kept"): 1_234})
        before = await store.total_value(25)

        with pytest.raises(RemoteSourceError, match="503"):
            await Reconciler(store, source_returning(503, text="busy"), OWNER_ADDRESS).resync()

        assert await store.total_value(25) == before

    @pytest.mark.asyncio
    async def test_transport_error_keeps_store(self, store):
        await fill_store(store, {make_outpoint("kept"): 1_234})

        source = failing_source(httpx.ConnectError("connection refused"))
        with pytest.raises(RemoteSourceError):
            await Reconciler(store, source, OWNER_ADDRESS).resync()

        assert await store.total_value(25) == (1_234, 1)

    @pytest.mark.asyncio
    async def test_malformed_payload_keeps_store(self, store):
        await fill_store(store, {make_outpoint("kept"): 1_234})

        for source in (
            source_returning(text="<html>oops</html>"),
            source_returning(json={"result": [{"tx_pos": 0, "value": 5}]}),
        ):
            with pytest.raises(RemoteSourceError, match="Malformed"):
                await Reconciler(store, source, OWNER_ADDRESS).resync()

        assert await store.total_value(25) == (1_234, 1)

    @pytest.mark.asyncio
    async def test_remote_error_field(self, store):
        await fill_store(store, {make_outpoint("kept"): 1_234})
        source = source_returning(json={"error": "address not found", "result": []})

        with pytest.raises(RemoteSourceError, match="address not found"):
            await Reconciler(store, source, OWNER_ADDRESS).resync()
        assert await store.total_value(25) == (1_234, 1)

    @pytest.mark.asyncio
    async def test_insert_failures_skipped(self, clock):
        class FlakyStore(MemoryCoinStore):
            async def insert(self, outpoint, value):
                if outpoint.txid == TX1:
                    raise StoreError("write failed")
                await super().insert(outpoint, value)

        store = FlakyStore(clock=clock)

        result = await Reconciler(store, source_returning(json=REMOTE), OWNER_ADDRESS).resync()

        assert result == (25_000, 1)
        assert await store.total_value(25) == (25_000, 1)

    @pytest.mark.asyncio
    async def test_empty_remote_clears_store(self, store):
        await fill_store(store, {make_outpoint("gone"): 5})
        source = source_returning(json={"error": "", "result": []})

        assert await Reconciler(store, source, OWNER_ADDRESS).resync() == (0, 0)
        assert await store.total_value(25) == (0, 0)
