"""
Core pump.fun math: address derivation and bonding curve quotes.
"""
from .constants import (
    PUMPFUN_PROGRAM_ID,
    GLOBAL_STATE,
    FEE_RECIPIENT,
    EVENT_AUTHORITY,
    LAMPORTS_PER_SOL,
    TOKEN_UNIT,
)
from .pda import (
    TradeAccounts,
    derive_pda,
    derive_bonding_curve,
    derive_associated_bonding_curve,
    derive_user_token_account,
    derive_creator_vault_authority,
    derive_creator_vault,
    derive_trade_accounts,
)
from .curve import (
    CurveState,
    PreciseCurveQuote,
    LinearApproxQuote,
    decode_curve_state,
    quote_buy,
    quote_sell,
    price_per_token,
)

__all__ = [
    'PUMPFUN_PROGRAM_ID', 'GLOBAL_STATE', 'FEE_RECIPIENT', 'EVENT_AUTHORITY',
    'LAMPORTS_PER_SOL', 'TOKEN_UNIT',
    'TradeAccounts', 'derive_pda', 'derive_bonding_curve',
    'derive_associated_bonding_curve', 'derive_user_token_account',
    'derive_creator_vault_authority', 'derive_creator_vault',
    'derive_trade_accounts',
    'CurveState', 'PreciseCurveQuote', 'LinearApproxQuote',
    'decode_curve_state', 'quote_buy', 'quote_sell', 'price_per_token',
]
