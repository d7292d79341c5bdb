"""
Transfer model.

Builds, confirms and broadcasts a token transfer from the active wallet.

State lifecycle:
- idle: Nothing prepared
- prepared: Destination, amount and fee validated; waiting for the user
- confirmed: User approved the prepared transfer
- broadcast: Handed to the chain client, waiting for the answer
- settled: Node accepted the transaction (code 0)
- failed: Node rejected it, or the RPC call itself failed

Nothing is ever broadcast without passing through confirmed. Failed
validation leaves the builder exactly as it was.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, DecimalException, ROUND_CEILING
from typing import Optional

from networks import GasPrice, NetworkConfig, parse_display_amount, to_base_units
from wallet.errors import (
    InsufficientFundsError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidTransitionError,
)
from wallet.signer import is_valid_address
from .chain import ChainClient, Coin, Fee

logger = logging.getLogger(__name__)


DEFAULT_GAS_LIMIT = 200_000

# Valid state values
STATE_IDLE = "idle"
STATE_PREPARED = "prepared"
STATE_CONFIRMED = "confirmed"
STATE_BROADCAST = "broadcast"
STATE_SETTLED = "settled"
STATE_FAILED = "failed"

# Failure reasons
REASON_CHAIN = "chain"          # Node answered with a non-zero code
REASON_TRANSPORT = "transport"  # RPC call raised


def calculate_fee(gas_limit: int, gas_price: GasPrice) -> Fee:
    """Fee = gas_limit x gas_price, rounded up to whole base units."""
    amount = (Decimal(gas_limit) * gas_price.amount).to_integral_value(rounding=ROUND_CEILING)
    return Fee(amount=[Coin(denom=gas_price.denom, amount=int(amount))], gas=gas_limit)


@dataclass(frozen=True)
class TransferIntent:
    """A validated transfer waiting for confirmation or broadcast."""
    sender: str
    destination: str
    amount_base: int
    fee_base: int
    denom: str
    gas_limit: int
    memo: Optional[str] = None

    @property
    def total_base(self) -> int:
        return self.amount_base + self.fee_base

    @property
    def coins(self) -> list[Coin]:
        return [Coin(denom=self.denom, amount=self.amount_base)]

    @property
    def fee(self) -> Fee:
        return Fee(amount=[Coin(denom=self.denom, amount=self.fee_base)], gas=self.gas_limit)


@dataclass(frozen=True)
class TransferOutcome:
    """Terminal result of a broadcast."""
    status: str                         # settled | failed
    transaction_hash: Optional[str] = None
    code: Optional[int] = None
    raw_log: Optional[str] = None
    reason: Optional[str] = None        # chain | transport, for failures
    error: Optional[str] = None         # Transport error message

    @property
    def is_settled(self) -> bool:
        return self.status == STATE_SETTLED

    def describe(self) -> str:
        """One-line text for the UI."""
        if self.is_settled:
            return f"Transaction sent. Hash: {self.transaction_hash}"
        if self.reason == REASON_CHAIN:
            return f"Transaction rejected. Error code: {self.code}. Message: {self.raw_log}"
        return f"Transaction could not be sent. Message: {self.error}"


class TransferBuilder:
    """
    State machine for one transfer at a time.

    Usage:
        builder = TransferBuilder(client, network, sender, balance)
        intent = builder.prepare("plt1...", "1.5", memo="rent")
        builder.confirm()
        outcome = builder.send()
        builder.reset()
    """

    def __init__(self, client: ChainClient, network: NetworkConfig, sender: str,
                 available_balance: int, gas_limit: int = DEFAULT_GAS_LIMIT):
        gas_price = network.parsed_gas_price
        if gas_price.denom != network.base_denom:
            raise ValueError(
                f"Gas price denom {gas_price.denom} does not match {network.base_denom}"
            )

        self._client = client
        self._network = network
        self._gas_price = gas_price
        self._gas_limit = gas_limit
        self.sender = sender
        self.available_balance = available_balance
        self._state = STATE_IDLE
        self._intent: Optional[TransferIntent] = None
        self._outcome: Optional[TransferOutcome] = None

    @property
    def state(self) -> str:
        return self._state

    @property
    def intent(self) -> Optional[TransferIntent]:
        """The prepared transfer, if any."""
        return self._intent

    @property
    def outcome(self) -> Optional[TransferOutcome]:
        """Result of the last broadcast, if any."""
        return self._outcome

    def _require(self, *states: str) -> None:
        if self._state not in states:
            raise InvalidTransitionError(
                f"Cannot do that while transfer is {self._state}"
            )

    def update_balance(self, available_balance: int) -> None:
        """Record a refreshed balance (base units)."""
        if self._state == STATE_BROADCAST:
            raise InvalidTransitionError("Cannot change balance during broadcast")
        self.available_balance = available_balance

    def prepare(self, destination: str, amount, memo: Optional[str] = None) -> TransferIntent:
        """
        Validate input and compute the fee.

        Args:
            destination: Recipient address
            amount: Display amount (e.g. "1.5" PLT), string or number
            memo: Optional note

        Raises:
            InvalidAddressError, InvalidAmountError, InsufficientFundsError
        """
        if self._state == STATE_BROADCAST:
            raise InvalidTransitionError("A transfer is already being broadcast")

        destination = destination.strip()
        if not is_valid_address(destination, self._network.address_prefix):
            raise InvalidAddressError("Destination address is not valid for this network")

        try:
            display_amount = parse_display_amount(amount)
        except ValueError as e:
            raise InvalidAmountError("Enter a numeric amount greater than zero") from e
        if display_amount <= 0:
            raise InvalidAmountError("Enter a numeric amount greater than zero")

        try:
            amount_base = to_base_units(display_amount, self._network.display_decimals)
        except DecimalException as e:
            raise InvalidAmountError("Amount is too large") from e
        if amount_base <= 0:
            raise InvalidAmountError("Amount is smaller than the smallest unit")

        fee = calculate_fee(self._gas_limit, self._gas_price)
        fee_base = fee.amount[0].amount

        required = amount_base + fee_base
        if required > self.available_balance:
            raise InsufficientFundsError(required, self.available_balance)

        self._intent = TransferIntent(
            sender=self.sender,
            destination=destination,
            amount_base=amount_base,
            fee_base=fee_base,
            denom=self._network.base_denom,
            gas_limit=self._gas_limit,
            memo=(memo or "").strip() or None,
        )
        self._outcome = None
        self._state = STATE_PREPARED
        return self._intent

    def confirm(self) -> TransferIntent:
        """Record the user's approval of the prepared transfer."""
        self._require(STATE_PREPARED)
        self._state = STATE_CONFIRMED
        return self._intent

    def send(self) -> TransferOutcome:
        """
        Broadcast the confirmed transfer.

        Node rejections and transport errors are returned as a failed
        outcome, never raised, and never retried.
        """
        self._require(STATE_CONFIRMED)
        intent = self._intent
        self._state = STATE_BROADCAST

        try:
            result = self._client.send_tokens(
                intent.sender,
                intent.destination,
                intent.coins,
                intent.fee,
                intent.memo,
            )
        except Exception as e:
            logger.error(f"Broadcast from {intent.sender} failed: {e}")
            outcome = TransferOutcome(status=STATE_FAILED, reason=REASON_TRANSPORT, error=str(e))
        else:
            if result.code != 0:
                logger.warning(f"Chain rejected transfer from {intent.sender}: code {result.code}")
                outcome = TransferOutcome(
                    status=STATE_FAILED,
                    transaction_hash=result.transaction_hash or None,
                    code=result.code,
                    raw_log=result.raw_log,
                    reason=REASON_CHAIN,
                )
            else:
                logger.info(f"Transfer settled: {result.transaction_hash}")
                outcome = TransferOutcome(
                    status=STATE_SETTLED,
                    transaction_hash=result.transaction_hash,
                    code=0,
                    raw_log=result.raw_log,
                )

        self._outcome = outcome
        self._state = outcome.status
        return outcome

    def explorer_url(self) -> Optional[str]:
        """Explorer link for a settled transfer."""
        if self._outcome is None or not self._outcome.is_settled:
            return None
        return self._network.explorer_tx_url(self._outcome.transaction_hash)

    def reset(self) -> None:
        """Return to idle, clearing destination, amount, memo and fee."""
        if self._state == STATE_BROADCAST:
            raise InvalidTransitionError("Cannot reset during broadcast")
        self._intent = None
        self._outcome = None
        self._state = STATE_IDLE
