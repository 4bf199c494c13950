"""
Base interface for the authoritative unspent-output source.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field


class RemoteUTXO(BaseModel):
    """One unspent output as reported by the remote indexer"""

    model_config = ConfigDict(populate_by_name=True)

    tx_pos: int = Field(..., ge=0)
    tx_hash: str = Field(..., min_length=64, max_length=64)
    value: int = Field(..., ge=0)
    is_spent: bool = Field(default=False, alias="isSpentInMempoolTx")
    status: str = ""


class UnspentResponse(BaseModel):
    error: str = ""
    result: list[RemoteUTXO] = Field(default_factory=list)


class UnspentSource(ABC):
    """
    Authoritative source of an address's unspent outputs, used for full
    resynchronization of the local inventory.
    """

    @abstractmethod
    async def get_unspent(self, address: str) -> list[RemoteUTXO]:
        """All unspent outputs of ``address``.

        Raises:
            RemoteSourceError: On transport, status or decode failure
        """

    async def close(self) -> None:
        """Close source connection"""
        pass
