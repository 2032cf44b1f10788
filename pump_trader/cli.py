#!/usr/bin/env python3
"""
Pump.fun Trader - Command Line
==============================

Usage:
    # Buy with 0.0168 SOL (amount in lamports)
    pump-trader buy <MINT> <CREATOR> 16837852

    # Sell half of the balance
    pump-trader sell <MINT> <CREATOR> 50%

    # Sell 31,000 tokens with a custom priority fee
    pump-trader sell <MINT> <CREATOR> 31000 --priority-fee 3

Environment (.env supported):
    RPC_URL       Solana RPC endpoint
    PRIVATE_KEY   base58 wallet secret (or KEYPAIR_PATH to a JSON keypair)
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import TradingConfig, load_keypair
from .core.constants import LAMPORTS_PER_SOL, TOKEN_UNIT
from .exceptions import TradeError
from .execution.submitter import TradeSubmitter
from .models import TradeIntent, TradeResult, TradeSide
from .rpc import SolanaLedgerClient

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pump-trader",
        description="Buy and sell pump.fun tokens on the bonding curve",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pump-trader buy 8LbkTskkCx212Tm2LCuAeThZDVBQsxk8hKqkUxhspump <CREATOR> 16837852
  pump-trader sell 8LbkTskkCx212Tm2LCuAeThZDVBQsxk8hKqkUxhspump <CREATOR> 50%
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    buy = subparsers.add_parser("buy", help="Buy tokens with SOL")
    buy.add_argument("token_address", help="The pump.fun token address to buy")
    buy.add_argument("creator_address", help="The creator address of the token")
    buy.add_argument(
        "amount",
        type=int,
        help="Amount of SOL to spend in lamports (e.g., 16837852 for 0.016837852 SOL)",
    )

    sell = subparsers.add_parser("sell", help="Sell tokens for SOL")
    sell.add_argument("token_address", help="The pump.fun token address to sell")
    sell.add_argument("creator_address", help="The creator address of the token")
    sell.add_argument(
        "amount",
        help="Either a percentage of your balance (e.g., '50%%') or a number of tokens (e.g., '31000')",
    )

    for sub in (buy, sell):
        sub.add_argument(
            "--creator-vault",
            default=None,
            help="Creator vault address (derived from the creator when omitted)",
        )
        sub.add_argument(
            "--priority-fee", "-p",
            type=int,
            default=None,
            help="Priority fee in micro-lamports per compute unit",
        )

    return parser


def intent_from_args(args: argparse.Namespace) -> TradeIntent:
    if args.command == "buy":
        return TradeIntent.buy(
            args.token_address,
            sol_amount=args.amount,
            creator=args.creator_address,
            creator_vault=args.creator_vault,
            priority_fee=args.priority_fee,
        )
    return TradeIntent.sell(
        args.token_address,
        args.amount,
        creator=args.creator_address,
        creator_vault=args.creator_vault,
        priority_fee=args.priority_fee,
    )


def print_result(result: TradeResult):
    print(f"\n{'='*60}")
    if result.success:
        print(f"  TRANSACTION CONFIRMED ({result.latency_ms / 1000:.2f}s)")
        print(f"  Signature: {result.signature}")
        print(f"  https://solscan.io/tx/{result.signature}")
    else:
        print(f"  TRANSACTION {result.state.value} after {result.attempts} attempt(s)")
        if result.error:
            print(f"  Error: {result.error}")

    if result.side == TradeSide.BUY:
        print(f"  Spent:    {result.sol_amount / LAMPORTS_PER_SOL:.9f} SOL")
        print(f"  Expected: {result.token_amount / TOKEN_UNIT:,.6f} tokens")
    else:
        print(f"  Sold:     {result.token_amount / TOKEN_UNIT:,.6f} tokens")
        print(f"  Expected: {result.sol_amount / LAMPORTS_PER_SOL:.9f} SOL")

    if result.simulation_logs:
        print("\n  Simulation logs:")
        for line in result.simulation_logs:
            print(f"    {line}")
    print(f"{'='*60}\n")


async def run_trade(intent: TradeIntent, config: TradingConfig) -> TradeResult:
    keypair = load_keypair()
    logger.info(f"Wallet: {keypair.pubkey()}")

    async with SolanaLedgerClient(config.rpc_url, commitment=config.commitment) as ledger:
        submitter = TradeSubmitter(ledger, keypair, config)
        return await submitter.execute(intent)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        intent = intent_from_args(args)
        config = TradingConfig.from_env()
        result = asyncio.run(run_trade(intent, config))
    except TradeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    print_result(result)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
