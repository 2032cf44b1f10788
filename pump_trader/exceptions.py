"""
Trade Errors
============

One hierarchy for everything a trade can fail with.

    TradeError
    ├── InputValidationError      bad caller input, raised before any RPC call
    ├── DerivationError           PDA seeds rejected / no bump found
    ├── MalformedAccount          curve account too short to decode
    ├── QuoteArithmeticError      overflow / division by zero in quote math
    └── LedgerError               RPC collaborator failures
        └── SubmissionError       send-and-confirm rejections

Only SubmissionError (and transport hiccups during an attempt) is ever
retried. Decode and arithmetic errors signal a state inconsistency, not a
transient condition.
"""


class TradeError(Exception):
    """Base class for all pump_trader errors"""


# === Input validation ===

class InputValidationError(TradeError, ValueError):
    """Caller input rejected before touching the network"""


class InvalidAddress(InputValidationError):
    pass


class InvalidPercentage(InputValidationError):
    pass


class ZeroBalance(InputValidationError):
    pass


class InsufficientBalance(InputValidationError):
    pass


# === Derivation ===

class DerivationError(TradeError):
    pass


class InvalidSeeds(DerivationError, ValueError):
    pass


class DerivationExhausted(DerivationError):
    """No bump in 255..0 produced an off-curve address"""


# === Decode / quote math ===

class MalformedAccount(TradeError):
    pass


class QuoteArithmeticError(TradeError, ArithmeticError):
    pass


class ArithmeticOverflow(QuoteArithmeticError):
    pass


class DivisionByZero(QuoteArithmeticError, ZeroDivisionError):
    pass


# === Ledger / RPC ===

class LedgerError(TradeError):
    pass


class NotFound(LedgerError):
    pass


class TransportError(LedgerError):
    pass


class SubmissionError(LedgerError):
    pass


class RetryableRejection(SubmissionError):
    """Transaction rejected or timed out; a fresh attempt may land"""


class FatalRejection(SubmissionError):
    """Transaction rejected for a reason another attempt cannot fix"""
