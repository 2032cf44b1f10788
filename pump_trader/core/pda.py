"""
Program Derived Addresses
=========================

Deterministic, key-less addresses for pump.fun trades.

    derive_pda(seeds, program_id) -> (address, bump)

Scans bump 255 -> 0, hashing
    seed_0 || ... || seed_n || bump || program_id || "ProgramDerivedAddress"
and returns the first digest that is NOT a point on ed25519.

Everything here is a pure function of its inputs: no network, no cache.
"""

import hashlib
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from solders.pubkey import Pubkey

from ..exceptions import DerivationExhausted, InvalidSeeds
from .constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    BONDING_CURVE_SEED,
    CREATOR_VAULT_SEED,
    PDA_MARKER,
    PUMPFUN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    WRAPPED_SOL_MINT,
)

MAX_SEEDS = 16          # includes the bump seed
MAX_SEED_LEN = 32


def _validate_seeds(seeds: Sequence[bytes]) -> None:
    if len(seeds) >= MAX_SEEDS:
        raise InvalidSeeds(f"Too many seeds: {len(seeds)} (max {MAX_SEEDS - 1})")
    for i, seed in enumerate(seeds):
        if len(seed) > MAX_SEED_LEN:
            raise InvalidSeeds(f"Seed {i} is {len(seed)} bytes (max {MAX_SEED_LEN})")


def derive_pda(seeds: Sequence[bytes], program_id: Pubkey) -> Tuple[Pubkey, int]:
    """
    Derive Program Derived Address (PDA).

    Args:
        seeds: Ordered seed byte strings
        program_id: Owning program

    Returns:
        (pda_address, bump_seed)
    """
    seeds = [bytes(seed) for seed in seeds]
    _validate_seeds(seeds)

    seed_bytes = b"".join(seeds)
    program_id_bytes = bytes(program_id)

    for bump in range(255, -1, -1):
        hash_input = seed_bytes + bytes([bump]) + program_id_bytes + PDA_MARKER
        candidate = Pubkey.from_bytes(hashlib.sha256(hash_input).digest())

        # Valid PDAs have no private key, i.e. are off the ed25519 curve
        if not candidate.is_on_curve():
            return (candidate, bump)

    raise DerivationExhausted(f"No viable bump for program {program_id}")


def derive_bonding_curve(mint: Pubkey) -> Tuple[Pubkey, int]:
    """Bonding curve PDA for a token mint"""
    return derive_pda([BONDING_CURVE_SEED, bytes(mint)], PUMPFUN_PROGRAM_ID)


def derive_associated_token_account(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Associated token account of `owner` for `mint` (classic token program)"""
    pda, _ = derive_pda(
        [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return pda


def derive_associated_bonding_curve(mint: Pubkey, bonding_curve: Pubkey) -> Pubkey:
    """Token vault held by the bonding curve"""
    return derive_associated_token_account(bonding_curve, mint)


def derive_user_token_account(user: Pubkey, mint: Pubkey) -> Pubkey:
    return derive_associated_token_account(user, mint)


def derive_creator_vault_authority(creator: Pubkey) -> Tuple[Pubkey, int]:
    """Fee authority PDA owned by pump.fun for a token creator"""
    return derive_pda([CREATOR_VAULT_SEED, bytes(creator)], PUMPFUN_PROGRAM_ID)


def derive_creator_vault(creator: Pubkey) -> Pubkey:
    """Creator vault: the vault authority's wrapped-SOL holding account"""
    authority, _ = derive_creator_vault_authority(creator)
    return derive_associated_token_account(authority, WRAPPED_SOL_MINT)


@dataclass(frozen=True)
class TradeAccounts:
    """Every derived account a buy/sell instruction references"""
    user: Pubkey
    mint: Pubkey
    bonding_curve: Pubkey
    associated_bonding_curve: Pubkey
    user_token_account: Pubkey
    creator_vault: Pubkey


def derive_trade_accounts(
    user: Pubkey,
    mint: Pubkey,
    creator: Optional[Pubkey] = None,
    creator_vault: Optional[Pubkey] = None,
) -> TradeAccounts:
    """
    Derive the account set for a trade.

    An explicit `creator_vault` is used as-is; otherwise it is derived
    from `creator`. One of the two is required.
    """
    if creator_vault is None:
        if creator is None:
            raise ValueError("Either creator or creator_vault is required")
        creator_vault = derive_creator_vault(creator)

    bonding_curve, _ = derive_bonding_curve(mint)

    return TradeAccounts(
        user=user,
        mint=mint,
        bonding_curve=bonding_curve,
        associated_bonding_curve=derive_associated_bonding_curve(mint, bonding_curve),
        user_token_account=derive_user_token_account(user, mint),
        creator_vault=creator_vault,
    )
