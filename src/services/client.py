"""
Chain Client - Connecting the RPC collaborator.

The wallet core never speaks the RPC protocol itself. It talks to any
object implementing models.chain.ChainClient, obtained from a connector
callable supplied by the embedding application.
"""

import logging
from typing import Callable

from models.chain import BroadcastResult, ChainClient, Coin, Fee
from wallet.errors import ChainIdMismatchError

logger = logging.getLogger(__name__)


# (rpc_url, key material or None for read-only) -> connected client
ClientConnector = Callable[..., ChainClient]


def connect_client(connector: ClientConnector, rpc_url: str, expected_chain_id: str,
                   signer=None) -> ChainClient:
    """
    Connect and make sure the node serves the expected chain.

    Raises:
        ChainIdMismatchError: Node reports a different chain-id (the
            client is disconnected before raising)
    """
    client = connector(rpc_url, signer)
    remote_chain_id = client.get_chain_id()
    if remote_chain_id != expected_chain_id:
        client.disconnect()
        logger.warning(f"Chain-id mismatch at {rpc_url}: expected {expected_chain_id}, got {remote_chain_id}")
        raise ChainIdMismatchError(expected_chain_id, remote_chain_id)

    logger.info(f"Connected to {rpc_url} ({remote_chain_id})")
    return client


__all__ = [
    "BroadcastResult",
    "ChainClient",
    "ClientConnector",
    "Coin",
    "Fee",
    "connect_client",
]
