"""
Funding and store constants.

Defaults mirror the behaviour of the original payment purse:
- a 25-coin candidate window for selection and for balance reporting
- one-minute reservation leases
- a small safety margin added on top of the fee when selecting coins
"""

from __future__ import annotations

# Fee rate in satoshis per kilobyte
DEFAULT_SATS_PER_KB = 10

# Number of highest-value coins inspected per selection (and per balance query)
SELECTION_WINDOW = 25

# Reservation lease duration in seconds
LOCK_TTL_SECONDS = 60

# Extra satoshis requested from the selector on top of outputs + fee
FUNDING_MARGIN = 10

# Selection rounds a single funding call may run before giving up
MAX_FUNDING_ATTEMPTS = 3

# Key prefixes in the coin/lock store
UTXO_KEY_PREFIX = "u:"
LOCK_KEY_PREFIX = "lock:"

# Signature hash flags (BSV requires FORKID on every signature)
SIGHASH_ALL = 0x01
SIGHASH_FORKID = 0x40
SIGHASH_ALL_FORKID = SIGHASH_ALL | SIGHASH_FORKID

# Base58check version bytes
P2PKH_VERSION = {"mainnet": 0x00, "testnet": 0x6F}
WIF_VERSION = {"mainnet": 0x80, "testnet": 0xEF}

WHATSONCHAIN_MAINNET_URL = "https://api.whatsonchain.com/v1/bsv/main"
WHATSONCHAIN_TESTNET_URL = "https://api.whatsonchain.com/v1/bsv/test"
