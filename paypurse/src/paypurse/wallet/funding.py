"""
Funding orchestrator: turns a draft into a funded, signed transaction.
"""

from __future__ import annotations

from loguru import logger

from paypurse.constants import FUNDING_MARGIN, MAX_FUNDING_ATTEMPTS
from paypurse.errors import InsufficientFunds, InsufficientInputs
from paypurse.wallet.builder import TransactionBuilder
from paypurse.wallet.fees import total_input_satoshis
from paypurse.wallet.selector import CoinSelector
from paypurse.wallet.signing import UnlockingTemplate
from paypurse.wallet.transaction import Transaction, TxInput, TxOutput


class FundingOrchestrator:
    """
    Funds a draft transaction from the purse's coins.

    Steps:
    1. Sum existing inputs (each must carry its source output) and outputs
    2. Optionally require the draft's own inputs to cover its outputs
    3. Select and append coins until inputs cover outputs + fee
    4. Append ``change_splits`` change placeholders paying the owner
    5. Size change and sign via the injected builder

    A failed call may leave coins reserved; the leases simply expire.
    """

    def __init__(
        self,
        selector: CoinSelector,
        builder: TransactionBuilder,
        locking_script: bytes,
        template: UnlockingTemplate,
        change_splits: int = 1,
        funding_margin: int = FUNDING_MARGIN,
        max_attempts: int = MAX_FUNDING_ATTEMPTS,
    ):
        self.selector = selector
        self.builder = builder
        self.locking_script = locking_script
        self.template = template
        self.change_splits = change_splits
        self.funding_margin = funding_margin
        self.max_attempts = max_attempts

    async def fund(self, tx: Transaction, fund_outputs: bool = False) -> Transaction:
        """
        Fund, complete and sign ``tx`` in place.

        Args:
            tx: Draft transaction
            fund_outputs: Fail unless the draft's own inputs cover its outputs

        Returns:
            The same transaction object, signed

        Raises:
            MissingSourceOutput: An existing input has no known value
            InsufficientInputs: ``fund_outputs`` set and inputs < outputs
            InsufficientFunds: Selection failed or the attempt cap was hit
            StoreError: On store failure
            TransactionError: From fee distribution or signing
        """
        sats_in = total_input_satoshis(tx)
        sats_out = tx.total_output_satoshis()

        if fund_outputs and sats_in < sats_out:
            raise InsufficientInputs(sats_in, sats_out)

        fee = self.builder.compute_fee(tx)
        attempts = 0
        while sats_in < sats_out + fee:
            if attempts >= self.max_attempts:
                raise InsufficientFunds(
                    sats_out + fee,
                    sats_in,
                    message=(
                        f"Gave up funding after {attempts} selection rounds: "
                        f"need {sats_out + fee}, have {sats_in}"
                    ),
                )
            attempts += 1

            coins = await self.selector.select(sats_out + fee + self.funding_margin)
            for coin in coins:
                tx.add_input(
                    TxInput(
                        source_txid=coin.txid,
                        source_vout=coin.vout,
                        source_output=TxOutput(
                            satoshis=coin.value, locking_script=self.locking_script
                        ),
                        template=self.template,
                    )
                )
                sats_in += coin.value
            fee = self.builder.compute_fee(tx)
            logger.debug(f"Funding round {attempts}: {sats_in} in, {sats_out} out, fee {fee}")

        for _ in range(self.change_splits):
            tx.add_output(TxOutput(satoshis=0, locking_script=self.locking_script, change=True))

        self.builder.distribute_change(tx)
        self.builder.sign(tx)

        logger.info(
            f"Funded transaction with {len(tx.inputs)} input(s), {len(tx.outputs)} output(s)"
        )
        return tx
