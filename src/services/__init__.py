"""
Services package - Backend services for the PLT wallet.

Contains:
- ChainClient: Contract for the RPC collaborator
- WalletSession: Import / unlock / lock flow for the active wallet
- configure_logging: Application logging setup
"""

from .client import (
    ChainClient,
    ClientConnector,
    BroadcastResult,
    Coin,
    Fee,
    connect_client,
)
from .logging import configure_logging
from .session import WalletSession, ImportResult, STATE_LOCKED, STATE_UNLOCKED

__all__ = [
    "ChainClient",
    "ClientConnector",
    "BroadcastResult",
    "Coin",
    "Fee",
    "connect_client",
    "configure_logging",
    "WalletSession",
    "ImportResult",
    "STATE_LOCKED",
    "STATE_UNLOCKED",
]
