"""
Transaction model and legacy (non-segwit) serialization.

A draft transaction carries, for every input, the output it spends
(``source_output``) so values can be summed and sighashes computed, and an
optional unlocking template that produces the unlocking script at signing
time. Outputs flagged ``change`` are placeholders sized by the fee step.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from paypurse.crypto import hash256
from paypurse.errors import TransactionError

if TYPE_CHECKING:
    from paypurse.wallet.signing import UnlockingTemplate


def encode_varint(value: int) -> bytes:
    if value < 0xFD:
        return bytes([value])
    if value <= 0xFFFF:
        return b"\xfd" + struct.pack("<H", value)
    if value <= 0xFFFFFFFF:
        return b"\xfe" + struct.pack("<I", value)
    return b"\xff" + struct.pack("<Q", value)


def read_varint(data: bytes, offset: int) -> tuple[int, int]:
    """Read varint at offset, return (value, new_offset)."""
    first = data[offset]
    offset += 1

    if first < 0xFD:
        return first, offset
    if first == 0xFD:
        return struct.unpack("<H", data[offset : offset + 2])[0], offset + 2
    if first == 0xFE:
        return struct.unpack("<I", data[offset : offset + 4])[0], offset + 4
    return struct.unpack("<Q", data[offset : offset + 8])[0], offset + 8


@dataclass
class TxOutput:
    satoshis: int
    locking_script: bytes
    change: bool = False

    def serialize(self) -> bytes:
        return (
            struct.pack("<Q", self.satoshis)
            + encode_varint(len(self.locking_script))
            + self.locking_script
        )


@dataclass
class TxInput:
    source_txid: str
    source_vout: int
    source_output: TxOutput | None = None
    unlocking_script: bytes | None = None
    template: UnlockingTemplate | None = None
    sequence: int = 0xFFFFFFFF

    def source_satoshis(self) -> int | None:
        """Value of the spent output, or None when unknown"""
        if self.source_output is None:
            return None
        return self.source_output.satoshis

    def serialize_outpoint(self) -> bytes:
        # txid is in display (big-endian) order, raw tx wants little-endian
        return bytes.fromhex(self.source_txid)[::-1] + struct.pack("<I", self.source_vout)

    def serialize(self, unlocking_script: bytes | None = None) -> bytes:
        script = unlocking_script if unlocking_script is not None else self.unlocking_script
        script = script or b""
        return (
            self.serialize_outpoint()
            + encode_varint(len(script))
            + script
            + struct.pack("<I", self.sequence)
        )


@dataclass
class Transaction:
    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    version: int = 1
    locktime: int = 0

    def add_input(self, tx_input: TxInput) -> None:
        self.inputs.append(tx_input)

    def add_output(self, tx_output: TxOutput) -> None:
        self.outputs.append(tx_output)

    def total_output_satoshis(self) -> int:
        return sum(out.satoshis for out in self.outputs)

    def serialize(self) -> bytes:
        result = struct.pack("<I", self.version)
        result += encode_varint(len(self.inputs))
        for inp in self.inputs:
            result += inp.serialize()
        result += encode_varint(len(self.outputs))
        for out in self.outputs:
            result += out.serialize()
        result += struct.pack("<I", self.locktime)
        return result

    def to_hex(self) -> str:
        return self.serialize().hex()

    def txid(self) -> str:
        """Double SHA256 of the serialized transaction, display order"""
        return hash256(self.serialize())[::-1].hex()

    def estimated_size(self) -> int:
        """
        Serialized size once every input is unlocked.

        Inputs without an unlocking script use their template's estimate.
        """
        size = 4 + encode_varint_len(len(self.inputs))
        for index, inp in enumerate(self.inputs):
            if inp.unlocking_script is not None:
                script_len = len(inp.unlocking_script)
            elif inp.template is not None:
                script_len = inp.template.estimate_length(self, index)
            else:
                script_len = 0
            size += 32 + 4 + encode_varint_len(script_len) + script_len + 4
        size += encode_varint_len(len(self.outputs))
        for out in self.outputs:
            size += 8 + encode_varint_len(len(out.locking_script)) + len(out.locking_script)
        return size + 4

    @classmethod
    def from_hex(cls, tx_hex: str) -> Transaction:
        try:
            return cls.from_bytes(bytes.fromhex(tx_hex))
        except ValueError as e:
            raise TransactionError(f"Invalid transaction hex: {e}") from e

    @classmethod
    def from_bytes(cls, tx_bytes: bytes) -> Transaction:
        """
        Parse a raw transaction.

        Source outputs are unknown after parsing; callers that need input
        values must attach them.
        """
        try:
            offset = 0
            version = struct.unpack("<I", tx_bytes[offset : offset + 4])[0]
            offset += 4

            input_count, offset = read_varint(tx_bytes, offset)
            inputs: list[TxInput] = []
            for _ in range(input_count):
                txid = tx_bytes[offset : offset + 32][::-1].hex()
                offset += 32
                vout = struct.unpack("<I", tx_bytes[offset : offset + 4])[0]
                offset += 4
                script_len, offset = read_varint(tx_bytes, offset)
                script = tx_bytes[offset : offset + script_len]
                if len(script) != script_len:
                    raise ValueError("truncated input script")
                offset += script_len
                sequence = struct.unpack("<I", tx_bytes[offset : offset + 4])[0]
                offset += 4
                inputs.append(
                    TxInput(
                        source_txid=txid,
                        source_vout=vout,
                        unlocking_script=script,
                        sequence=sequence,
                    )
                )

            output_count, offset = read_varint(tx_bytes, offset)
            outputs: list[TxOutput] = []
            for _ in range(output_count):
                satoshis = struct.unpack("<Q", tx_bytes[offset : offset + 8])[0]
                offset += 8
                script_len, offset = read_varint(tx_bytes, offset)
                script = tx_bytes[offset : offset + script_len]
                if len(script) != script_len:
                    raise ValueError("truncated output script")
                offset += script_len
                outputs.append(TxOutput(satoshis=satoshis, locking_script=script))

            locktime = struct.unpack("<I", tx_bytes[offset : offset + 4])[0]
            offset += 4
            if offset != len(tx_bytes):
                raise ValueError(f"{len(tx_bytes) - offset} trailing bytes")

            return cls(inputs=inputs, outputs=outputs, version=version, locktime=locktime)

        except (IndexError, struct.error, ValueError) as e:
            raise TransactionError(f"Failed to parse transaction: {e}") from e


def encode_varint_len(value: int) -> int:
    return len(encode_varint(value))
