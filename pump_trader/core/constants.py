"""
Pump.fun and Solana program constants.

Addresses taken from pump.fun on-chain program analysis.
"""

from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from spl.token.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    WRAPPED_SOL_MINT,
)

# Pump.fun Program Constants
PUMPFUN_PROGRAM_ID = Pubkey.from_string("6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P")
GLOBAL_STATE = Pubkey.from_string("4wTV1YmiEkRvAtNtsSGPtUrqRYQMe5SKy2uB4Jjaxnjf")
FEE_RECIPIENT = Pubkey.from_string("7hTckgnGnLQR6sdH7YkqFTAA7VwTfYFaZ6EhEsU3saCX")
EVENT_AUTHORITY = Pubkey.from_string("Ce6TQqeHC9p8KetsN6JsjHK7UTZk7nasjjnr7XxXp9F1")

# Seeds
BONDING_CURVE_SEED = b"bonding-curve"
CREATOR_VAULT_SEED = b"creator-vault"
PDA_MARKER = b"ProgramDerivedAddress"

# Token units
LAMPORTS_PER_SOL = 1_000_000_000
TOKEN_DECIMALS = 6
TOKEN_UNIT = 10 ** TOKEN_DECIMALS

U64_MAX = 2 ** 64 - 1
U128_MAX = 2 ** 128 - 1

__all__ = [
    'PUMPFUN_PROGRAM_ID',
    'GLOBAL_STATE',
    'FEE_RECIPIENT',
    'EVENT_AUTHORITY',
    'SYSTEM_PROGRAM_ID',
    'TOKEN_PROGRAM_ID',
    'ASSOCIATED_TOKEN_PROGRAM_ID',
    'WRAPPED_SOL_MINT',
    'BONDING_CURVE_SEED',
    'CREATOR_VAULT_SEED',
    'PDA_MARKER',
    'LAMPORTS_PER_SOL',
    'TOKEN_DECIMALS',
    'TOKEN_UNIT',
    'U64_MAX',
    'U128_MAX',
]
