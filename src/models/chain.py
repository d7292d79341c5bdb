"""
Chain models.

Coins, fees and broadcast results exchanged with the RPC client, plus
the ChainClient contract the wallet core expects from it.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol


@dataclass(frozen=True)
class Coin:
    """An amount of one denomination, in base units."""
    denom: str
    amount: int

    def to_dict(self) -> dict:
        return {"denom": self.denom, "amount": str(self.amount)}


@dataclass(frozen=True)
class Fee:
    """Transaction fee: coins paid plus the gas limit they buy."""
    amount: list[Coin]
    gas: int

    def to_dict(self) -> dict:
        return {"amount": [c.to_dict() for c in self.amount], "gas": str(self.gas)}


@dataclass(frozen=True)
class BroadcastResult:
    """What the node answered for a broadcast transaction."""
    code: int
    transaction_hash: str
    raw_log: str = ""
    height: Optional[int] = None
    events: list = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.code == 0


class ChainClient(Protocol):
    """RPC client, optionally bound to a signer."""

    def get_chain_id(self) -> str:
        ...

    def get_height(self) -> int:
        ...

    def get_balance(self, address: str, denom: str) -> Coin:
        ...

    def send_tokens(self, sender: str, destination: str, amount: list[Coin],
                    fee: Fee, memo: Optional[str] = None) -> BroadcastResult:
        ...

    def disconnect(self) -> None:
        ...
