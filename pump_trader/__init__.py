"""
Pump.fun Bonding Curve Trader
=============================

Quote, derive, encode and submit buy/sell trades against the pump.fun
constant-product bonding curve on Solana.

Usage:
    from pump_trader import (
        SolanaLedgerClient, TradeIntent, TradeSubmitter, TradingConfig, load_keypair,
    )

    config = TradingConfig.from_env()
    async with SolanaLedgerClient(config.rpc_url) as ledger:
        submitter = TradeSubmitter(ledger, load_keypair(), config)
        result = await submitter.execute(
            TradeIntent.buy(mint, sol_amount=10_000_000, creator=creator)
        )
"""

__version__ = "0.1.0"

# Configuration
from .config import TradingConfig, DEFAULT_CONFIG, load_keypair

# Data models
from .models import (
    SellAmount,
    SubmissionAttempt,
    TradeIntent,
    TradeResult,
    TradeSide,
    TradeState,
    parse_address,
)

# Core math
from .core import (
    CurveState,
    PreciseCurveQuote,
    LinearApproxQuote,
    decode_curve_state,
    derive_pda,
    derive_trade_accounts,
    quote_buy,
    quote_sell,
)

# Execution
from .execution import TradeSubmitter, encode_buy, encode_sell
from .rpc import LedgerClient, SolanaLedgerClient

# Errors
from .exceptions import TradeError


__all__ = [
    '__version__',

    # Config
    'TradingConfig',
    'DEFAULT_CONFIG',
    'load_keypair',

    # Models
    'SellAmount',
    'SubmissionAttempt',
    'TradeIntent',
    'TradeResult',
    'TradeSide',
    'TradeState',
    'parse_address',

    # Core
    'CurveState',
    'PreciseCurveQuote',
    'LinearApproxQuote',
    'decode_curve_state',
    'derive_pda',
    'derive_trade_accounts',
    'quote_buy',
    'quote_sell',

    # Execution
    'TradeSubmitter',
    'encode_buy',
    'encode_sell',
    'LedgerClient',
    'SolanaLedgerClient',

    # Errors
    'TradeError',
]
