"""
Trade Models - Shared Data Structures
=====================================

Caller intents, per-attempt records and final results passed between
the quoter, encoder and submitter.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_FLOOR
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import base58
from solders.pubkey import Pubkey

from .core.constants import TOKEN_UNIT
from .core.curve import check_u64
from .exceptions import (
    InputValidationError,
    InsufficientBalance,
    InvalidAddress,
    InvalidPercentage,
    ZeroBalance,
)

AddressLike = Union[str, Pubkey]


def parse_address(value: AddressLike) -> Pubkey:
    """Parse a base58 address, rejecting anything that is not 32 bytes"""
    if isinstance(value, Pubkey):
        return value
    try:
        raw = base58.b58decode(value.strip())
    except ValueError as e:
        raise InvalidAddress(f"Invalid base58 address {value!r}: {e}") from e
    if len(raw) != 32:
        raise InvalidAddress(f"Address {value!r} decodes to {len(raw)} bytes, expected 32")
    return Pubkey.from_bytes(raw)


class TradeSide(Enum):
    BUY = "BUY"
    SELL = "SELL"


class TradeState(Enum):
    BUILDING = "BUILDING"
    SIGNING = "SIGNING"
    SUBMITTED = "SUBMITTED"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (TradeState.CONFIRMED, TradeState.FAILED, TradeState.CANCELLED)


@dataclass(frozen=True)
class SellAmount:
    """
    How much to sell: an exact raw token amount or a percentage of balance.

    Usage:
        SellAmount.parse("50%")     # half of balance
        SellAmount.parse("31000")   # 31,000 whole tokens
    """
    raw_amount: Optional[int] = None
    percentage: Optional[float] = None

    def __post_init__(self):
        if (self.raw_amount is None) == (self.percentage is None):
            raise InputValidationError("Exactly one of raw_amount or percentage is required")
        if self.percentage is not None and not 0 < self.percentage <= 100:
            raise InvalidPercentage(f"Percentage must be between 0 and 100, got {self.percentage}")
        if self.raw_amount is not None:
            check_u64("Sell amount", self.raw_amount)
            if self.raw_amount == 0:
                raise InputValidationError("Sell amount must be positive")

    @classmethod
    def exact(cls, raw_amount: int) -> 'SellAmount':
        return cls(raw_amount=raw_amount)

    @classmethod
    def percent(cls, percentage: float) -> 'SellAmount':
        return cls(percentage=percentage)

    @classmethod
    def parse(cls, text: str) -> 'SellAmount':
        text = text.strip()
        if text.endswith('%'):
            try:
                percentage = float(text[:-1])
            except ValueError as e:
                raise InvalidPercentage(f"Invalid percentage {text!r}") from e
            return cls.percent(percentage)

        try:
            whole_tokens = int(text)
        except ValueError as e:
            raise InputValidationError(f"Invalid token amount {text!r}") from e
        return cls.exact(whole_tokens * TOKEN_UNIT)

    @property
    def is_percentage(self) -> bool:
        return self.percentage is not None

    def resolve(self, balance: int) -> int:
        """Exact raw amount to sell against a freshly fetched balance"""
        if balance == 0:
            raise ZeroBalance("No tokens to sell")

        if self.percentage is not None:
            share = Decimal(balance) * Decimal(repr(self.percentage)) / 100
            return int(share.to_integral_value(rounding=ROUND_FLOOR))

        if self.raw_amount > balance:
            raise InsufficientBalance(
                f"Sell amount {self.raw_amount} exceeds token balance {balance}"
            )
        return self.raw_amount

    def __str__(self) -> str:
        if self.percentage is not None:
            return f"{self.percentage:g}%"
        return f"{self.raw_amount / TOKEN_UNIT:g} tokens"


@dataclass
class TradeIntent:
    """What the caller wants to trade"""
    side: TradeSide
    mint: Pubkey
    sol_amount: int = 0                       # buy: lamports to spend
    sell_amount: Optional[SellAmount] = None  # sell: tokens to sell
    creator: Optional[Pubkey] = None
    creator_vault: Optional[Pubkey] = None    # overrides derivation from creator
    priority_fee: Optional[int] = None        # micro-lamports per compute unit

    def __post_init__(self):
        if self.creator is None and self.creator_vault is None:
            raise InputValidationError("Either creator or creator_vault is required")
        if self.priority_fee is not None:
            check_u64("Priority fee", self.priority_fee)
        if self.side == TradeSide.BUY:
            check_u64("Buy amount", self.sol_amount)
            if self.sol_amount == 0:
                raise InputValidationError("Buy amount must be a positive number of lamports")
        if self.side == TradeSide.SELL and self.sell_amount is None:
            raise InputValidationError("Sell requires a sell_amount")

    @classmethod
    def buy(
        cls,
        mint: AddressLike,
        sol_amount: int,
        creator: Optional[AddressLike] = None,
        creator_vault: Optional[AddressLike] = None,
        priority_fee: Optional[int] = None,
    ) -> 'TradeIntent':
        return cls(
            side=TradeSide.BUY,
            mint=parse_address(mint),
            sol_amount=sol_amount,
            creator=parse_address(creator) if creator is not None else None,
            creator_vault=parse_address(creator_vault) if creator_vault is not None else None,
            priority_fee=priority_fee,
        )

    @classmethod
    def sell(
        cls,
        mint: AddressLike,
        amount: Union[str, SellAmount],
        creator: Optional[AddressLike] = None,
        creator_vault: Optional[AddressLike] = None,
        priority_fee: Optional[int] = None,
    ) -> 'TradeIntent':
        if isinstance(amount, str):
            amount = SellAmount.parse(amount)
        return cls(
            side=TradeSide.SELL,
            mint=parse_address(mint),
            sell_amount=amount,
            creator=parse_address(creator) if creator is not None else None,
            creator_vault=parse_address(creator_vault) if creator_vault is not None else None,
            priority_fee=priority_fee,
        )

    def to_dict(self) -> dict:
        return {
            'side': self.side.value,
            'mint': str(self.mint),
            'sol_amount': self.sol_amount,
            'sell_amount': str(self.sell_amount) if self.sell_amount else None,
            'creator': str(self.creator) if self.creator else None,
            'creator_vault': str(self.creator_vault) if self.creator_vault else None,
            'priority_fee': self.priority_fee,
        }


@dataclass
class SubmissionAttempt:
    """One send-and-confirm try"""
    number: int
    tolerance: float
    token_amount: int
    blockhash: Optional[str] = None
    signature: Optional[str] = None
    error: Optional[str] = None
    retryable: bool = False
    started_at: float = field(default_factory=time.time)

    @property
    def confirmed(self) -> bool:
        return self.signature is not None

    def to_dict(self) -> dict:
        return {
            'number': self.number,
            'tolerance': self.tolerance,
            'token_amount': self.token_amount,
            'blockhash': self.blockhash,
            'signature': self.signature,
            'error': self.error,
            'retryable': self.retryable,
        }


@dataclass
class TradeResult:
    """Final outcome of a trade"""
    state: TradeState
    side: TradeSide
    mint: str
    signature: Optional[str] = None
    attempts: int = 0
    tolerance: Optional[float] = None
    token_amount: int = 0                     # buy: quoted tokens, sell: tokens sold
    sol_amount: int = 0                       # buy: lamports spent, sell: expected lamports
    error: Optional[str] = None
    simulation_logs: List[str] = field(default_factory=list)
    last_attempt: Optional[SubmissionAttempt] = None
    latency_ms: float = 0.0
    timestamp: float = field(default_factory=time.time)

    @property
    def success(self) -> bool:
        return self.state is TradeState.CONFIRMED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state.value,
            'side': self.side.value,
            'mint': self.mint,
            'success': self.success,
            'signature': self.signature,
            'attempts': self.attempts,
            'tolerance': self.tolerance,
            'token_amount': self.token_amount,
            'sol_amount': self.sol_amount,
            'error': self.error,
            'simulation_logs': list(self.simulation_logs),
            'latency_ms': self.latency_ms,
            'timestamp': self.timestamp,
        }
