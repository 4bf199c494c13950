"""
paypurse - Spendable coin inventory for an automated payment-funding service

Tracks the coins one account owns, reserves them for concurrent funding
calls, and reconciles against observed transactions and a remote indexer.
"""

__version__ = "0.1.0"

from paypurse.errors import (
    InsufficientFunds,
    InsufficientInputs,
    MissingSourceOutput,
    PurseError,
    RemoteSourceError,
    StoreError,
    TransactionError,
)
from paypurse.wallet.models import Coin, Outpoint
from paypurse.wallet.service import PayPurse
from paypurse.wallet.transaction import Transaction, TxInput, TxOutput

__all__ = [
    "Coin",
    "InsufficientFunds",
    "InsufficientInputs",
    "MissingSourceOutput",
    "Outpoint",
    "PayPurse",
    "PurseError",
    "RemoteSourceError",
    "StoreError",
    "Transaction",
    "TransactionError",
    "TxInput",
    "TxOutput",
]
