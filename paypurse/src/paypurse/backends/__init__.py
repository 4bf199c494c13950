"""
Remote unspent-output sources used for full resynchronization.

Available sources:
- WhatsOnChainSource: WhatsOnChain REST API (BSV mainnet/testnet)
"""

from paypurse.backends.base import RemoteUTXO, UnspentResponse, UnspentSource
from paypurse.backends.whatsonchain import WhatsOnChainSource

__all__ = [
    "RemoteUTXO",
    "UnspentResponse",
    "UnspentSource",
    "WhatsOnChainSource",
]
