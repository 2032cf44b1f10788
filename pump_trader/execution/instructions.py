"""
Pump.fun Instruction Encoding
=============================

Serializes buy/sell intents into the program's binary instruction format.

Instruction data (24 bytes):
    [0:8]   discriminator
    [8:16]  amount (u64 little-endian)
    [16:24] limit  (u64 little-endian)  buy: max SOL cost, sell: min SOL out

Account order mirrors the program ABI and is NOT interchangeable. The
program rejects a misordered list at submission time, never at encode time.
"""

import struct
from dataclasses import dataclass
from typing import List

from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.instruction import AccountMeta as SoldersAccountMeta
from solders.instruction import Instruction
from solders.pubkey import Pubkey
from spl.token.instructions import create_idempotent_associated_token_account

from ..core.constants import (
    EVENT_AUTHORITY,
    FEE_RECIPIENT,
    GLOBAL_STATE,
    PUMPFUN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from ..core.curve import check_u64
from ..core.pda import TradeAccounts

# Discriminators (first 8 bytes of instruction)
BUY_DISCRIMINATOR = bytes.fromhex("66063d1201daebea")
SELL_DISCRIMINATOR = bytes.fromhex("33e685a4017f83ad")

TRADE_DATA_LAYOUT = struct.Struct("<8sQQ")
TRADE_DATA_SIZE = TRADE_DATA_LAYOUT.size  # 24


@dataclass(frozen=True)
class AccountMeta:
    """Account metadata for Solana instructions"""
    pubkey: Pubkey
    is_signer: bool
    is_writable: bool

    def to_solders(self) -> SoldersAccountMeta:
        return SoldersAccountMeta(self.pubkey, is_signer=self.is_signer, is_writable=self.is_writable)


@dataclass(frozen=True)
class PumpInstruction:
    """Program id + ordered accounts + payload"""
    program_id: Pubkey
    accounts: List[AccountMeta]
    data: bytes

    def to_solders(self) -> Instruction:
        return Instruction(
            program_id=self.program_id,
            data=self.data,
            accounts=[acc.to_solders() for acc in self.accounts],
        )


def _encode_trade_data(discriminator: bytes, amount: int, limit: int) -> bytes:
    check_u64("amount", amount)
    check_u64("limit", limit)
    return TRADE_DATA_LAYOUT.pack(discriminator, amount, limit)


class PumpfunInstructionBuilder:
    """
    Build pump.fun buy/sell instructions.

    Account layout for BUY (12 accounts):
        0: global (read)
        1: feeRecipient (write)
        2: mint (read)
        3: bondingCurve (write)
        4: associatedBondingCurve (write)
        5: associatedUser (write)
        6: user (signer, write)
        7: systemProgram (read)
        8: tokenProgram (read)
        9: creatorVault (write)
        10: eventAuthority (write)
        11: program (read)

    Account layout for SELL (12 accounts): same as BUY except
        8: creatorVault (write)
        9: tokenProgram (read)
    """

    @staticmethod
    def build_buy_instruction(
        accounts: TradeAccounts,
        token_amount: int,
        max_sol_cost: int,
    ) -> PumpInstruction:
        """
        Build BUY instruction.

        Args:
            accounts: Derived trade accounts
            token_amount: Amount of tokens to buy
            max_sol_cost: Maximum lamports to spend (slippage protection)
        """
        data = _encode_trade_data(BUY_DISCRIMINATOR, token_amount, max_sol_cost)

        metas = [
            AccountMeta(GLOBAL_STATE, False, False),
            AccountMeta(FEE_RECIPIENT, False, True),
            AccountMeta(accounts.mint, False, False),
            AccountMeta(accounts.bonding_curve, False, True),
            AccountMeta(accounts.associated_bonding_curve, False, True),
            AccountMeta(accounts.user_token_account, False, True),
            AccountMeta(accounts.user, True, True),
            AccountMeta(SYSTEM_PROGRAM_ID, False, False),
            AccountMeta(TOKEN_PROGRAM_ID, False, False),
            AccountMeta(accounts.creator_vault, False, True),
            AccountMeta(EVENT_AUTHORITY, False, True),
            AccountMeta(PUMPFUN_PROGRAM_ID, False, False),
        ]

        return PumpInstruction(PUMPFUN_PROGRAM_ID, metas, data)

    @staticmethod
    def build_sell_instruction(
        accounts: TradeAccounts,
        token_amount: int,
        min_sol_output: int,
    ) -> PumpInstruction:
        """
        Build SELL instruction.

        Args:
            accounts: Derived trade accounts
            token_amount: Amount of tokens to sell
            min_sol_output: Minimum lamports to receive (slippage protection)
        """
        data = _encode_trade_data(SELL_DISCRIMINATOR, token_amount, min_sol_output)

        metas = [
            AccountMeta(GLOBAL_STATE, False, False),
            AccountMeta(FEE_RECIPIENT, False, True),
            AccountMeta(accounts.mint, False, False),
            AccountMeta(accounts.bonding_curve, False, True),
            AccountMeta(accounts.associated_bonding_curve, False, True),
            AccountMeta(accounts.user_token_account, False, True),
            AccountMeta(accounts.user, True, True),
            AccountMeta(SYSTEM_PROGRAM_ID, False, False),
            AccountMeta(accounts.creator_vault, False, True),
            AccountMeta(TOKEN_PROGRAM_ID, False, False),
            AccountMeta(EVENT_AUTHORITY, False, True),
            AccountMeta(PUMPFUN_PROGRAM_ID, False, False),
        ]

        return PumpInstruction(PUMPFUN_PROGRAM_ID, metas, data)


def encode_buy(accounts: TradeAccounts, token_amount: int, max_sol_cost: int) -> PumpInstruction:
    return PumpfunInstructionBuilder.build_buy_instruction(accounts, token_amount, max_sol_cost)


def encode_sell(accounts: TradeAccounts, token_amount: int, min_sol_output: int) -> PumpInstruction:
    return PumpfunInstructionBuilder.build_sell_instruction(accounts, token_amount, min_sol_output)


def compute_budget_instructions(compute_units: int, priority_fee: int) -> List[Instruction]:
    """Compute unit limit + price (micro-lamports per CU)"""
    return [
        set_compute_unit_limit(compute_units),
        set_compute_unit_price(priority_fee),
    ]


def build_trade_bundle(
    trade_ix: PumpInstruction,
    accounts: TradeAccounts,
    compute_units: int,
    priority_fee: int,
    create_token_account: bool = False,
) -> List[Instruction]:
    """
    Full instruction list for one transaction, in order:
    compute limit, compute price, [create user ATA], trade.
    """
    instructions = compute_budget_instructions(compute_units, priority_fee)

    if create_token_account:
        instructions.append(
            create_idempotent_associated_token_account(
                payer=accounts.user,
                owner=accounts.user,
                mint=accounts.mint,
            )
        )

    instructions.append(trade_ix.to_solders())
    return instructions


def decode_pumpfun_instruction(data: bytes) -> dict:
    """
    Decode pump.fun instruction data.

    Args:
        data: Raw instruction data bytes

    Returns:
        Decoded instruction details
    """
    if len(data) < 8:
        return {"type": "unknown", "error": "data too short"}

    discriminator = data[:8]

    if discriminator not in (BUY_DISCRIMINATOR, SELL_DISCRIMINATOR):
        return {"type": "unknown", "discriminator": discriminator.hex()}

    side = "buy" if discriminator == BUY_DISCRIMINATOR else "sell"
    if len(data) != TRADE_DATA_SIZE:
        return {"type": side, "error": f"expected {TRADE_DATA_SIZE} bytes, got {len(data)}"}

    _, amount, limit = TRADE_DATA_LAYOUT.unpack(data)
    limit_key = "max_sol_cost" if side == "buy" else "min_sol_output"
    return {
        "type": side,
        "token_amount": amount,
        limit_key: limit,
    }
