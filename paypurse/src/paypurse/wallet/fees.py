"""
Fee model and change distribution.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from loguru import logger

from paypurse.constants import DEFAULT_SATS_PER_KB
from paypurse.errors import MissingSourceOutput, TransactionError
from paypurse.wallet.transaction import Transaction


class ChangeDistribution(str, Enum):
    EQUAL = "equal"
    FIRST = "first"


class FeeModel(ABC):
    @abstractmethod
    def compute_fee(self, tx: Transaction) -> int:
        """Required fee in satoshis for the transaction as it stands"""


class SatoshisPerKilobyte(FeeModel):
    """Fee proportional to the estimated signed size, rounded up"""

    def __init__(self, satoshis: int = DEFAULT_SATS_PER_KB):
        if satoshis < 0:
            raise ValueError("Fee rate cannot be negative")
        self.satoshis = satoshis

    def compute_fee(self, tx: Transaction) -> int:
        size = tx.estimated_size()
        return (size * self.satoshis + 999) // 1000


def total_input_satoshis(tx: Transaction) -> int:
    """
    Sum the values of all spent outputs.

    Raises:
        MissingSourceOutput: If any input does not carry its source output
    """
    total = 0
    for inp in tx.inputs:
        value = inp.source_satoshis()
        if value is None:
            raise MissingSourceOutput(inp.source_txid, inp.source_vout)
        total += value
    return total


def distribute_change(
    tx: Transaction,
    fee_model: FeeModel,
    policy: ChangeDistribution = ChangeDistribution.EQUAL,
) -> int:
    """
    Size the change placeholders so that inputs - outputs == fee.

    Change outputs are removed when nothing is left over for them. The fee is
    computed with the change outputs in place, before their removal.

    Returns:
        The fee paid by the transaction

    Raises:
        TransactionError: If inputs cannot cover the fixed outputs plus fee
    """
    sats_in = total_input_satoshis(tx)
    fixed_out = sum(out.satoshis for out in tx.outputs if not out.change)
    change_outputs = [out for out in tx.outputs if out.change]

    fee = fee_model.compute_fee(tx)
    if sats_in < fixed_out + fee:
        raise TransactionError(
            f"Insufficient inputs for fee: {sats_in} in, {fixed_out} out, fee {fee}"
        )

    change = sats_in - fixed_out - fee
    if not change_outputs:
        return sats_in - fixed_out

    if change <= 0 or (policy == ChangeDistribution.EQUAL and change < len(change_outputs)):
        logger.debug(f"Dropping {len(change_outputs)} change output(s), leftover {change}")
        tx.outputs = [out for out in tx.outputs if not out.change]
        return sats_in - fixed_out

    if policy == ChangeDistribution.FIRST:
        change_outputs[0].satoshis = change
        tx.outputs = [out for out in tx.outputs if not out.change or out is change_outputs[0]]
        return fee

    share, remainder = divmod(change, len(change_outputs))
    for index, out in enumerate(change_outputs):
        out.satoshis = share + (1 if index < remainder else 0)

    logger.debug(f"Distributed {change} sats change over {len(change_outputs)} output(s)")
    return fee
