"""
PLT Networks - Chain configurations and amount formatting

Supports the PLT test network and Cosmos Hub.
"""

import logging
import re
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Optional

logger = logging.getLogger(__name__)


# ============================================
# Gas Price
# ============================================

GAS_PRICE_PATTERN = re.compile(r"^([0-9]+(?:\.[0-9]+)?)([a-zA-Z][a-zA-Z0-9/:._-]{2,127})$")


@dataclass(frozen=True)
class GasPrice:
    """Price per unit of gas, in base denomination units."""
    amount: Decimal
    denom: str

    @classmethod
    def from_string(cls, value: str) -> "GasPrice":
        """Parse a gas price like "0.025uplt"."""
        match = GAS_PRICE_PATTERN.match(value.strip())
        if not match:
            raise ValueError(f"Invalid gas price string: {value!r}")
        return cls(amount=Decimal(match.group(1)), denom=match.group(2))

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


# ============================================
# Network Configurations
# ============================================

@dataclass(frozen=True)
class NetworkConfig:
    """Fixed parameters of a Cosmos-SDK network."""
    chain_id: str
    name: str
    display_name: str
    rpc_url: str
    explorer_url: str           # Transaction URL prefix, hash is appended
    address_prefix: str         # bech32 human readable part
    base_denom: str             # Smallest unit, e.g. "uplt"
    display_denom: str          # e.g. "PLT"
    display_decimals: int = 6
    gas_price: str = "0.025uplt"

    @property
    def parsed_gas_price(self) -> GasPrice:
        return GasPrice.from_string(self.gas_price)

    def explorer_tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_url}{tx_hash}"


NETWORKS = {
    # PLT local/test network
    "plt-test0": NetworkConfig(
        chain_id="plt-test0",
        name="plt-test",
        display_name="PLT Testnet",
        rpc_url="http://localhost:26657",
        explorer_url="http://localhost:26657/tx?hash=0x",
        address_prefix="plt",
        base_denom="uplt",
        display_denom="PLT",
        display_decimals=6,
        gas_price="0.025uplt",
    ),
    # Cosmos Hub mainnet
    "cosmoshub-4": NetworkConfig(
        chain_id="cosmoshub-4",
        name="cosmoshub",
        display_name="Cosmos Hub",
        rpc_url="https://rpc.cosmos.directory/cosmoshub",
        explorer_url="https://www.mintscan.io/cosmos/txs/",
        address_prefix="cosmos",
        base_denom="uatom",
        display_denom="ATOM",
        display_decimals=6,
        gas_price="0.025uatom",
    ),
}

DEFAULT_NETWORK = "plt-test0"


def get_network(chain_id: str) -> Optional[NetworkConfig]:
    """Get network config by chain ID."""
    return NETWORKS.get(chain_id)


def get_network_by_name(name: str) -> Optional[NetworkConfig]:
    """Get network config by name."""
    for network in NETWORKS.values():
        if network.name == name:
            return network
    return None


def load_network_config(settings: Optional[dict] = None) -> NetworkConfig:
    """
    Resolve the network to use at startup.

    Settings keys (all optional):
        network:  chain ID or name of a built-in network
        rpc_url:  custom RPC endpoint
        chain_id: expected chain ID reported by the node
        gas_price: gas price string, e.g. "0.03uplt"
    """
    settings = settings or {}

    key = settings.get("network") or DEFAULT_NETWORK
    network = get_network(key) or get_network_by_name(key)
    if network is None:
        logger.warning(f"Unknown network '{key}', falling back to {DEFAULT_NETWORK}")
        network = NETWORKS[DEFAULT_NETWORK]

    overrides = {}
    rpc_url = (settings.get("rpc_url") or "").strip()
    if rpc_url:
        overrides["rpc_url"] = rpc_url
    chain_id = (settings.get("chain_id") or "").strip()
    if chain_id:
        overrides["chain_id"] = chain_id
    gas_price = (settings.get("gas_price") or "").strip()
    if gas_price:
        GasPrice.from_string(gas_price)  # Validate
        overrides["gas_price"] = gas_price

    return replace(network, **overrides) if overrides else network


# ============================================
# Amount Formatting
# ============================================

def to_base_units(amount: Decimal, decimals: int) -> int:
    """Scale a display amount to base units, rounding half up."""
    with localcontext() as ctx:
        # Enough digits to hold every integer digit of the scaled value
        ctx.prec = max(28, amount.adjusted() + decimals + 2)
        scaled = amount.scaleb(decimals)
        return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def parse_display_amount(value) -> Decimal:
    """
    Parse user input into a Decimal.

    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Amount is not a number: {value!r}")
    if not amount.is_finite():
        raise ValueError("Amount must be finite")
    return amount


def format_amount(amount: str | int, decimals: int) -> str:
    """
    Format a base-unit integer string as a display amount.

    "1234567" with 6 decimals -> "1.234567"
    """
    amount = str(amount) if amount is not None else ""
    if not amount:
        return "0"
    if decimals <= 0:
        return amount

    negative = amount.startswith("-")
    digits = amount[1:] if negative else amount
    padded = digits.rjust(decimals + 1, "0")
    integer_part = padded[:-decimals].lstrip("0") or "0"
    fractional_part = padded[-decimals:]
    formatted = f"{integer_part}.{fractional_part}"

    return f"-{formatted}" if negative else formatted


def format_address(address: str, head: int = 10, tail: int = 7) -> str:
    """Format address as plt1abcdef...1234567"""
    if len(address) <= head + tail + 3:
        return address
    return f"{address[:head]}...{address[-tail:]}"
