"""
Models package - Data models for the PLT wallet.

Contains:
- TransferBuilder: Prepare / confirm / broadcast state machine
- TransferIntent, TransferOutcome: Snapshots of a transfer
- Coin, Fee, BroadcastResult, ChainClient: Values exchanged with the RPC client
"""

from .chain import BroadcastResult, ChainClient, Coin, Fee
from .transfer import (
    TransferBuilder,
    TransferIntent,
    TransferOutcome,
    calculate_fee,
    DEFAULT_GAS_LIMIT,
    STATE_IDLE,
    STATE_PREPARED,
    STATE_CONFIRMED,
    STATE_BROADCAST,
    STATE_SETTLED,
    STATE_FAILED,
    REASON_CHAIN,
    REASON_TRANSPORT,
)

__all__ = [
    "BroadcastResult",
    "ChainClient",
    "Coin",
    "Fee",
    "TransferBuilder",
    "TransferIntent",
    "TransferOutcome",
    "calculate_fee",
    "DEFAULT_GAS_LIMIT",
    "STATE_IDLE",
    "STATE_PREPARED",
    "STATE_CONFIRMED",
    "STATE_BROADCAST",
    "STATE_SETTLED",
    "STATE_FAILED",
    "REASON_CHAIN",
    "REASON_TRANSPORT",
]
