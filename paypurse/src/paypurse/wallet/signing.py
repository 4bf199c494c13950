"""
Transaction signing for P2PKH inputs.

BSV signatures commit to the spent value using the BIP143 digest algorithm
with the FORKID flag set (SIGHASH_ALL | SIGHASH_FORKID = 0x41).
"""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod

from coincurve import PrivateKey

from paypurse.constants import SIGHASH_ALL_FORKID
from paypurse.crypto import hash256
from paypurse.errors import TransactionError
from paypurse.wallet.transaction import Transaction, encode_varint

# Push opcode + DER signature (max 72) + sighash byte
MAX_SIGNATURE_PUSH = 1 + 73


class UnlockingTemplate(ABC):
    """Produces the unlocking script for one input of a transaction"""

    @abstractmethod
    def sign(self, tx: Transaction, input_index: int) -> bytes:
        """Return the unlocking script for ``tx.inputs[input_index]``"""

    @abstractmethod
    def estimate_length(self, tx: Transaction, input_index: int) -> int:
        """Upper bound of the unlocking script length, used for fee estimation"""


def compute_sighash_forkid(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    sighash_type: int = SIGHASH_ALL_FORKID,
) -> bytes:
    if input_index >= len(tx.inputs):
        raise TransactionError("Input index out of range")

    hash_prevouts = hash256(b"".join(inp.serialize_outpoint() for inp in tx.inputs))
    hash_sequence = hash256(b"".join(struct.pack("<I", inp.sequence) for inp in tx.inputs))
    hash_outputs = hash256(b"".join(out.serialize() for out in tx.outputs))

    target_input = tx.inputs[input_index]

    preimage = (
        struct.pack("<I", tx.version)
        + hash_prevouts
        + hash_sequence
        + target_input.serialize_outpoint()
        + encode_varint(len(script_code))
        + script_code
        + struct.pack("<Q", value)
        + struct.pack("<I", target_input.sequence)
        + hash_outputs
        + struct.pack("<I", tx.locktime)
        + struct.pack("<I", sighash_type)
    )

    return hash256(preimage)


def push_data(data: bytes) -> bytes:
    """Minimal push for data shorter than OP_PUSHDATA1"""
    if len(data) >= 0x4C:
        raise TransactionError(f"Push of {len(data)} bytes not supported")
    return bytes([len(data)]) + data


class P2PKHTemplate(UnlockingTemplate):
    """Unlocks P2PKH outputs with ``<sig> <pubkey>``"""

    def __init__(
        self,
        private_key: PrivateKey,
        compressed: bool = True,
        sighash_type: int = SIGHASH_ALL_FORKID,
    ):
        self.private_key = private_key
        self.pubkey = private_key.public_key.format(compressed=compressed)
        self.sighash_type = sighash_type

    def sign(self, tx: Transaction, input_index: int) -> bytes:
        inp = tx.inputs[input_index]
        if inp.source_output is None:
            raise TransactionError(
                f"Cannot sign input {input_index}: source output of "
                f"{inp.source_txid}.{inp.source_vout} unknown"
            )

        sighash = compute_sighash_forkid(
            tx,
            input_index,
            inp.source_output.locking_script,
            inp.source_output.satoshis,
            self.sighash_type,
        )
        # sighash is already SHA256d, skip coincurve's hashing
        signature = self.private_key.sign(sighash, hasher=None)
        return push_data(signature + bytes([self.sighash_type])) + push_data(self.pubkey)

    def estimate_length(self, tx: Transaction, input_index: int) -> int:
        return MAX_SIGNATURE_PUSH + 1 + len(self.pubkey)


def sign_transaction(tx: Transaction) -> None:
    """
    Fill the unlocking script of every input that has a template.

    Must run after all outputs are final: signatures commit to them.
    """
    for index, inp in enumerate(tx.inputs):
        if inp.template is None:
            if inp.unlocking_script is None:
                raise TransactionError(f"Input {index} has neither template nor unlocking script")
            continue
        inp.unlocking_script = inp.template.sign(tx, index)
