"""
Transaction builder capability consumed by the funding orchestrator.

Fee computation, change sizing and signing are injected so that coin
selection and funding can be exercised with a stub builder.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from loguru import logger

from paypurse.constants import DEFAULT_SATS_PER_KB
from paypurse.errors import PurseError, TransactionError
from paypurse.wallet.fees import (
    ChangeDistribution,
    FeeModel,
    SatoshisPerKilobyte,
    distribute_change,
)
from paypurse.wallet.signing import sign_transaction
from paypurse.wallet.transaction import Transaction


class TransactionBuilder(ABC):
    @abstractmethod
    def compute_fee(self, tx: Transaction) -> int:
        """Fee required by the draft in its current shape"""

    @abstractmethod
    def distribute_change(self, tx: Transaction) -> None:
        """Size (or drop) the change placeholders"""

    @abstractmethod
    def sign(self, tx: Transaction) -> None:
        """Produce unlocking scripts for every input"""


class P2PKHTransactionBuilder(TransactionBuilder):
    """Default builder: size-based fee model, equal change split, P2PKH signing"""

    def __init__(
        self,
        fee_model: FeeModel | None = None,
        policy: ChangeDistribution = ChangeDistribution.EQUAL,
    ):
        self.fee_model = fee_model or SatoshisPerKilobyte(DEFAULT_SATS_PER_KB)
        self.policy = policy

    def compute_fee(self, tx: Transaction) -> int:
        return self.fee_model.compute_fee(tx)

    def distribute_change(self, tx: Transaction) -> None:
        fee = distribute_change(tx, self.fee_model, self.policy)
        logger.debug(f"Transaction fee: {fee} sats")

    def sign(self, tx: Transaction) -> None:
        try:
            sign_transaction(tx)
        except PurseError:
            raise
        except Exception as e:
            raise TransactionError(f"Signing failed: {e}") from e
