"""
Owner identity primitives: WIF keys, P2PKH addresses and locking scripts.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

import base58
from coincurve import PrivateKey

from paypurse.constants import P2PKH_VERSION, WIF_VERSION


class CryptoError(Exception):
    pass


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    h = hashlib.new("ripemd160")
    h.update(hashlib.sha256(data).digest())
    return h.digest()


def hash256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def p2pkh_locking_script(pubkey_hash: bytes) -> bytes:
    """OP_DUP OP_HASH160 <20-byte-pubkeyhash> OP_EQUALVERIFY OP_CHECKSIG"""
    if len(pubkey_hash) != 20:
        raise CryptoError(f"Invalid pubkey hash length: {len(pubkey_hash)}")
    return bytes([0x76, 0xA9, 0x14]) + pubkey_hash + bytes([0x88, 0xAC])


def pubkey_hash_to_address(pubkey_hash: bytes, network: str = "mainnet") -> str:
    version = P2PKH_VERSION.get(network)
    if version is None:
        raise CryptoError(f"Unknown network: {network}")
    return base58.b58encode_check(bytes([version]) + pubkey_hash).decode("ascii")


def address_to_locking_script(address: str) -> bytes:
    """
    Convert a base58 P2PKH address (mainnet or testnet) to its locking script.

    Raises:
        CryptoError: If the address is malformed or not P2PKH
    """
    try:
        decoded = base58.b58decode_check(address)
    except ValueError as e:
        raise CryptoError(f"Invalid address {address}: {e}") from e

    version, payload = decoded[0], decoded[1:]
    if version not in P2PKH_VERSION.values() or len(payload) != 20:
        raise CryptoError(f"Unsupported address version: {version}")
    return p2pkh_locking_script(payload)


@dataclass
class OwnerKey:
    """
    The signing credential of the account whose coins the purse manages.

    Every stored coin is locked to ``locking_script``; nothing else is ever
    added to the inventory.
    """

    private_key: PrivateKey
    network: str = "mainnet"
    compressed: bool = True
    pubkey: bytes = field(init=False)
    address: str = field(init=False)
    locking_script: bytes = field(init=False)

    def __post_init__(self) -> None:
        self.pubkey = self.private_key.public_key.format(compressed=self.compressed)
        pubkey_hash = hash160(self.pubkey)
        self.address = pubkey_hash_to_address(pubkey_hash, self.network)
        self.locking_script = p2pkh_locking_script(pubkey_hash)

    @classmethod
    def from_wif(cls, wif: str) -> OwnerKey:
        """
        Decode a WIF private key.

        The network is taken from the version byte; a trailing 0x01 marks a
        compressed public key.

        Raises:
            CryptoError: On bad checksum, unknown version or wrong length
        """
        if not wif:
            raise CryptoError("Empty WIF")
        try:
            decoded = base58.b58decode_check(wif)
        except ValueError as e:
            raise CryptoError(f"Invalid WIF: {e}") from e

        networks = {v: k for k, v in WIF_VERSION.items()}
        network = networks.get(decoded[0])
        if network is None:
            raise CryptoError(f"Unknown WIF version byte: {decoded[0]:#x}")

        payload = decoded[1:]
        if len(payload) == 33 and payload[-1] == 0x01:
            secret, compressed = payload[:32], True
        elif len(payload) == 32:
            secret, compressed = payload, False
        else:
            raise CryptoError(f"Invalid WIF payload length: {len(payload)}")

        try:
            private_key = PrivateKey(secret)
        except ValueError as e:
            raise CryptoError(f"Invalid private key: {e}") from e
        return cls(private_key, network=network, compressed=compressed)

    def to_wif(self) -> str:
        payload = bytes([WIF_VERSION[self.network]]) + self.private_key.secret
        if self.compressed:
            payload += b"\x01"
        return base58.b58encode_check(payload).decode("ascii")
