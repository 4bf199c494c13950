"""
Test configuration for paypurse tests.
"""

from __future__ import annotations

import pytest
from factories import OWNER_ADDRESS, OWNER_WIF
from fakeredis import FakeAsyncRedis, FakeServer

from paypurse.crypto import OwnerKey
from paypurse.store.memory import MemoryCoinStore
from paypurse.store.redis_store import RedisCoinStore


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def owner() -> OwnerKey:
    return OwnerKey.from_wif(OWNER_WIF)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryCoinStore:
    return MemoryCoinStore(clock=clock)


@pytest.fixture
def redis_server() -> FakeServer:
    """Fresh fake server per test, shared by every client of that test"""
    return FakeServer()


@pytest.fixture
def redis_client(redis_server: FakeServer) -> FakeAsyncRedis:
    return FakeAsyncRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def redis_store(redis_client: FakeAsyncRedis) -> RedisCoinStore:
    return RedisCoinStore(redis_client, OWNER_ADDRESS)
