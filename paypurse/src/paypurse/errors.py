"""
Exception hierarchy for the payment purse.

Callers can tell apart:
- funds not yet available (InsufficientFunds) - try again later
- malformed or inconsistent drafts (InsufficientInputs, MissingSourceOutput)
- downstream/environment failures (StoreError, RemoteSourceError, TransactionError)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from paypurse.wallet.models import Coin


class PurseError(Exception):
    pass


class InsufficientFunds(PurseError):
    """Selection window exhausted before reaching the target value.

    Coins reserved during the failed attempt are listed in ``reserved``. Their
    leases are not released; they simply expire.
    """

    def __init__(
        self,
        target: int,
        collected: int,
        reserved: list[Coin] | None = None,
        message: str | None = None,
    ):
        self.target = target
        self.collected = collected
        self.reserved = reserved or []
        super().__init__(message or f"Insufficient funds: need {target}, collected {collected}")


class InsufficientInputs(PurseError):
    """Inputs do not cover outputs and the caller asked for fully funded outputs."""

    def __init__(self, inputs: int, outputs: int):
        self.inputs = inputs
        self.outputs = outputs
        super().__init__(f"Insufficient inputs: {inputs} sats in, {outputs} sats out")


class MissingSourceOutput(PurseError):
    """An existing input does not carry the output it spends."""

    def __init__(self, txid: str, vout: int):
        self.txid = txid
        self.vout = vout
        super().__init__(f"Missing source output for input {txid}.{vout}")


class StoreError(PurseError):
    pass


class RemoteSourceError(PurseError):
    pass


class TransactionError(PurseError):
    pass
