"""
Pump.fun Bonding Curve Quotes
=============================

Decodes bonding curve account data and prices trades against it.

Two quote strategies, kept separate on purpose:

- PreciseCurveQuote (buy): constant product k = x * y over the virtual
  reserves, exactly what the program consumes.
- LinearApproxQuote (sell): token_amount * price / supply, the coarse
  proportional figure the venue exposes publicly.

Account layout (little-endian u64 words):
    [0:8]   real_token_reserves
    [8:16]  virtual_token_reserves   (read as token_supply by the linear path)
    [16:24] virtual_sol_reserves     (read as token_price by the linear path)
"""

import struct
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR

from ..exceptions import (
    ArithmeticOverflow,
    DivisionByZero,
    InputValidationError,
    MalformedAccount,
)
from .constants import U64_MAX, U128_MAX

CURVE_HEADER_SIZE = 24
_CURVE_WORDS = struct.Struct("<QQQ")


@dataclass(frozen=True)
class CurveState:
    """Snapshot of a token's bonding curve. Fetch fresh before every quote."""
    real_token_reserves: int
    virtual_token_reserves: int
    virtual_sol_reserves: int
    token_supply: int
    token_price: int


def decode_curve_state(raw: bytes) -> CurveState:
    """Decode raw bonding curve account bytes"""
    if len(raw) < CURVE_HEADER_SIZE:
        raise MalformedAccount(
            f"Bonding curve account data too short: {len(raw)} bytes (need {CURVE_HEADER_SIZE})"
        )

    real_tokens, virtual_tokens, virtual_sol = _CURVE_WORDS.unpack_from(raw, 0)

    return CurveState(
        real_token_reserves=real_tokens,
        virtual_token_reserves=virtual_tokens,
        virtual_sol_reserves=virtual_sol,
        token_supply=virtual_tokens,
        token_price=virtual_sol,
    )


def check_u64(name: str, value: int) -> None:
    """Reject anything that is not a plain int in [0, 2**64)"""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InputValidationError(f"{name} must be an integer, got {type(value).__name__}")
    if not 0 <= value <= U64_MAX:
        raise InputValidationError(f"{name} must be a u64, got {value}")


class PreciseCurveQuote:
    """
    Constant product buy quote.

        new_sol    = v_sol + input
        k          = v_sol * v_tok
        new_tokens = k // new_sol
        tokens_out = floor((v_tok - new_tokens) * tolerance)
    """

    name = "precise_curve"

    @staticmethod
    def quote_buy(curve: CurveState, input_amount: int, tolerance: float) -> int:
        """Tokens received for `input_amount` lamports, reduced by `tolerance`"""
        check_u64("input_amount", input_amount)
        if not 0 < tolerance <= 1:
            raise InputValidationError(f"Tolerance must be in (0, 1], got {tolerance}")

        new_sol_reserves = curve.virtual_sol_reserves + input_amount
        if new_sol_reserves == 0:
            raise DivisionByZero("Bonding curve has no virtual SOL reserves")

        invariant = curve.virtual_sol_reserves * curve.virtual_token_reserves
        new_token_reserves = invariant // new_sol_reserves
        tokens_out = curve.virtual_token_reserves - new_token_reserves

        # Decimal of the float's repr keeps 9900990100 * 0.98 exact
        scaled = Decimal(tokens_out) * Decimal(repr(float(tolerance)))
        return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


class LinearApproxQuote:
    """
    Proportional quotes from (token_supply, token_price), in u128-checked
    integer math.
    """

    name = "linear_approx"

    @staticmethod
    def quote_sell(curve: CurveState, token_amount: int) -> int:
        """Lamports received for selling `token_amount` raw tokens"""
        check_u64("token_amount", token_amount)

        product = token_amount * curve.token_price
        if product > U128_MAX:
            raise ArithmeticOverflow("Overflow in SOL calculation: token_amount * token_price")
        if curve.token_supply == 0:
            raise DivisionByZero("Division by zero in SOL calculation: token_supply is 0")

        sol_amount = product // curve.token_supply
        if sol_amount > U64_MAX:
            raise ArithmeticOverflow("SOL amount exceeds u64")
        return sol_amount

    @staticmethod
    def quote_buy_estimate(curve: CurveState, sol_amount: int) -> int:
        """Rough tokens-for-lamports estimate net of the 1% fee (display only)"""
        check_u64("sol_amount", sol_amount)

        product = sol_amount * curve.token_supply
        if product > U128_MAX:
            raise ArithmeticOverflow("Overflow in token calculation: sol_amount * token_supply")
        if curve.token_price == 0:
            raise DivisionByZero("Division by zero in token calculation: token_price is 0")

        tokens = product // curve.token_price
        if tokens * 99 > U128_MAX:
            raise ArithmeticOverflow("Overflow in fee calculation")
        tokens = tokens * 99 // 100

        if tokens > U64_MAX:
            raise ArithmeticOverflow("Token amount exceeds u64")
        return tokens


def quote_buy(curve: CurveState, input_amount: int, tolerance: float) -> int:
    return PreciseCurveQuote.quote_buy(curve, input_amount, tolerance)


def quote_sell(curve: CurveState, token_amount: int) -> int:
    return LinearApproxQuote.quote_sell(curve, token_amount)


def price_per_token(curve: CurveState) -> float:
    """Display price (token_price / token_supply)"""
    if curve.token_supply == 0:
        return 0.0
    return curve.token_price / curve.token_supply
