"""
EXECUTION MODULE
================

Pump.fun instruction encoding and transaction submission.

Components:
- PumpfunInstructionBuilder: buy/sell instruction layout
- TradeSubmitter: sign, submit, retry under a shrinking tolerance

Usage:
    from pump_trader.execution import TradeSubmitter

    submitter = TradeSubmitter(ledger, keypair, config)
    result = await submitter.execute(intent)
"""

from .instructions import (
    AccountMeta,
    PumpInstruction,
    PumpfunInstructionBuilder,
    BUY_DISCRIMINATOR,
    SELL_DISCRIMINATOR,
    TRADE_DATA_SIZE,
    encode_buy,
    encode_sell,
    compute_budget_instructions,
    build_trade_bundle,
    decode_pumpfun_instruction,
)

from .submitter import TradeSubmitter


__all__ = [
    # Instruction encoding
    'AccountMeta',
    'PumpInstruction',
    'PumpfunInstructionBuilder',
    'BUY_DISCRIMINATOR',
    'SELL_DISCRIMINATOR',
    'TRADE_DATA_SIZE',
    'encode_buy',
    'encode_sell',
    'compute_budget_instructions',
    'build_trade_bundle',
    'decode_pumpfun_instruction',

    # Submission
    'TradeSubmitter',
]
