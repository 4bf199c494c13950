"""
Wallet data models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Outpoint:
    """Reference to a transaction output: (txid, output index)"""

    txid: str
    vout: int

    def __str__(self) -> str:
        return f"{self.txid}.{self.vout}"

    @classmethod
    def from_string(cls, value: str) -> Outpoint:
        """Parse the ``<txid>.<vout>`` form used as store member."""
        txid, sep, vout = value.rpartition(".")
        if not sep or len(txid) != 64:
            raise ValueError(f"Invalid outpoint: {value!r}")
        try:
            bytes.fromhex(txid)
            index = int(vout)
        except ValueError as e:
            raise ValueError(f"Invalid outpoint: {value!r}") from e
        if index < 0:
            raise ValueError(f"Invalid outpoint: {value!r}")
        return cls(txid=txid.lower(), vout=index)


@dataclass(frozen=True)
class Coin:
    """An unspent output owned by the purse"""

    outpoint: Outpoint
    value: int

    @property
    def txid(self) -> str:
        return self.outpoint.txid

    @property
    def vout(self) -> int:
        return self.outpoint.vout
