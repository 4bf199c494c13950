"""
WhatsOnChain unspent-output source.
"""

from __future__ import annotations

import httpx
from loguru import logger
from pydantic import ValidationError

from paypurse.backends.base import RemoteUTXO, UnspentResponse, UnspentSource
from paypurse.constants import WHATSONCHAIN_MAINNET_URL
from paypurse.errors import RemoteSourceError

DEFAULT_TIMEOUT = 30.0


class WhatsOnChainSource(UnspentSource):
    def __init__(
        self,
        base_url: str = WHATSONCHAIN_MAINNET_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def get_unspent(self, address: str) -> list[RemoteUTXO]:
        url = f"{self.base_url}/address/{address}/unspent/all"
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Unspent query failed for {address}: {e}")
            raise RemoteSourceError(f"Unspent query failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            logger.error(f"Unspent query for {address} returned {response.status_code}")
            raise RemoteSourceError(
                f"Unspent query returned {response.status_code} {response.reason_phrase}"
            )

        try:
            payload = UnspentResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Malformed unspent response for {address}: {e}")
            raise RemoteSourceError(f"Malformed unspent response: {e}") from e

        if payload.error:
            raise RemoteSourceError(f"Unspent query error: {payload.error}")

        logger.debug(f"Fetched {len(payload.result)} unspent outputs for {address}")
        return payload.result

    async def close(self) -> None:
        await self.client.aclose()
