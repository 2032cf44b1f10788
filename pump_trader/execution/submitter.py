"""
Trade Submitter
===============

Drives one trade through

    BUILDING -> SIGNING -> SUBMITTED -> CONFIRMED
                                    `-> FAILED
    (CANCELLED if the caller's cancel event fires between attempts)

Buy: up to 1 + max_retries attempts. Each attempt re-fetches the curve,
re-quotes with the current tolerance, signs with a fresh blockhash and
submits. A retryable failure shrinks tolerance by `tolerance_decay`
(0.98 -> 0.931 -> 0.8845 -> 0.840 with defaults).

Sell: the amount is fixed up front from the caller's request, one attempt,
no tolerance ladder.

On FAILED one best-effort simulation is run so the caller gets program
logs alongside the last error. It is never followed by another attempt.

Usage:
    async with SolanaLedgerClient(config.rpc_url) as ledger:
        submitter = TradeSubmitter(ledger, keypair, config)
        result = await submitter.execute(TradeIntent.buy(mint, 10_000_000, creator=creator))
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional, Tuple

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.transaction import Transaction

from ..config import DEFAULT_CONFIG, TradingConfig
from ..core.curve import LinearApproxQuote, PreciseCurveQuote, decode_curve_state
from ..core.pda import TradeAccounts, derive_trade_accounts
from ..exceptions import FatalRejection, RetryableRejection, TransportError
from ..models import (
    SubmissionAttempt,
    TradeIntent,
    TradeResult,
    TradeSide,
    TradeState,
)
from ..rpc import LedgerClient
from .instructions import build_trade_bundle, encode_buy, encode_sell

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
# Builds the instruction bundle for an attempt: tolerance -> (bundle, token_amount)
BundleBuilder = Callable[[float], Awaitable[Tuple[List[Instruction], int]]]
TradeRunner = Callable[[TradeIntent, float], Awaitable[TradeResult]]


class TradeSubmitter:
    """
    Sign, submit and retry one trade at a time.

    Tolerance and attempt counter live on the instance for the duration of
    a trade and are reset when the next one starts.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        keypair: Keypair,
        config: TradingConfig = DEFAULT_CONFIG,
        sleep: SleepFn = asyncio.sleep,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        self.ledger = ledger
        self.keypair = keypair
        self.config = config
        self._sleep = sleep
        self.cancel_event = cancel_event

        self.state = TradeState.BUILDING
        self.tolerance = config.initial_tolerance
        self.attempt = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute(self, intent: TradeIntent) -> TradeResult:
        if intent.side == TradeSide.BUY:
            return await self.buy(intent)
        return await self.sell(intent)

    async def buy(self, intent: TradeIntent) -> TradeResult:
        """
        Buy tokens for `intent.sol_amount` lamports.

        Raises:
            MalformedAccount, QuoteArithmeticError, NotFound: fatal, not retried
        """
        return await self._run_trade(intent, self._buy)

    async def sell(self, intent: TradeIntent) -> TradeResult:
        """
        Sell tokens per `intent.sell_amount` (exact or % of balance).

        Single attempt: the amount is fixed before submission.

        Raises:
            ZeroBalance, InsufficientBalance: bad amount for current balance
            MalformedAccount, QuoteArithmeticError, NotFound: fatal
        """
        return await self._run_trade(intent, self._sell)

    async def _run_trade(self, intent: TradeIntent, run: TradeRunner) -> TradeResult:
        start_time = time.time()
        self._reset()

        if self._cancelled():
            logger.warning(f"Trade on {intent.mint} cancelled before start")
            return self._finish(intent, TradeState.CANCELLED, None, start_time, error="Cancelled by caller")

        try:
            return await run(intent, start_time)
        except Exception:
            # Errors that end the trade early still leave a terminal state
            self._transition(TradeState.FAILED)
            raise

    async def _buy(self, intent: TradeIntent, start_time: float) -> TradeResult:
        accounts = self._derive_accounts(intent)
        priority_fee = self._priority_fee(intent)
        logger.info(f"BUY {intent.mint}: {intent.sol_amount} lamports (curve {accounts.bonding_curve})")

        async def build(tolerance: float) -> Tuple[List[Instruction], int]:
            raw = await self._call(self.ledger.get_account_bytes(accounts.bonding_curve), "fetch curve")
            curve = decode_curve_state(raw)
            token_amount = PreciseCurveQuote.quote_buy(curve, intent.sol_amount, tolerance)
            logger.info(f"Expected tokens: {token_amount} at tolerance {tolerance:.4f}")

            trade_ix = encode_buy(accounts, token_amount, intent.sol_amount)
            bundle = build_trade_bundle(
                trade_ix,
                accounts,
                compute_units=self.config.buy_compute_units,
                priority_fee=priority_fee,
                create_token_account=True,
            )
            return bundle, token_amount

        result = await self._run_attempts(intent, build, self.config.max_attempts, start_time)
        result.sol_amount = intent.sol_amount
        result.tolerance = self.tolerance
        return result

    async def _sell(self, intent: TradeIntent, start_time: float) -> TradeResult:
        accounts = self._derive_accounts(intent)
        priority_fee = self._priority_fee(intent)

        balance = await self._call(
            self.ledger.get_token_balance(accounts.user_token_account), "fetch token balance"
        )
        sell_amount = intent.sell_amount.resolve(balance)
        logger.info(f"SELL {intent.mint}: {sell_amount} of {balance} raw tokens ({intent.sell_amount})")

        raw = await self._call(self.ledger.get_account_bytes(accounts.bonding_curve), "fetch curve")
        curve = decode_curve_state(raw)
        expected_sol = LinearApproxQuote.quote_sell(curve, sell_amount)
        logger.info(f"Expected return: {expected_sol} lamports")

        trade_ix = encode_sell(accounts, sell_amount, self.config.min_sol_output)
        bundle = build_trade_bundle(
            trade_ix,
            accounts,
            compute_units=self.config.sell_compute_units,
            priority_fee=priority_fee,
        )

        async def build(tolerance: float) -> Tuple[List[Instruction], int]:
            return bundle, sell_amount

        result = await self._run_attempts(intent, build, 1, start_time)
        result.sol_amount = expected_sol
        return result

    # ------------------------------------------------------------------
    # Attempt loop
    # ------------------------------------------------------------------

    async def _run_attempts(
        self,
        intent: TradeIntent,
        build: BundleBuilder,
        max_attempts: int,
        start_time: float,
    ) -> TradeResult:
        last_error: Optional[Exception] = None
        last_bundle: Optional[List[Instruction]] = None
        attempt: Optional[SubmissionAttempt] = None

        for number in range(1, max_attempts + 1):
            if self._cancelled():
                logger.warning(f"Trade cancelled before attempt {number}")
                return self._finish(intent, TradeState.CANCELLED, attempt, start_time,
                                    error="Cancelled by caller")

            self.attempt = number
            self._transition(TradeState.BUILDING)
            attempt = SubmissionAttempt(number=number, tolerance=self.tolerance, token_amount=0)
            logger.info(f"Attempt {number} of {max_attempts}")

            try:
                bundle, attempt.token_amount = await build(self.tolerance)
                last_bundle = bundle

                tx = await self._sign(bundle, attempt)

                self._transition(TradeState.SUBMITTED)
                attempt.signature = await self._submit(tx)

            except (RetryableRejection, TransportError) as e:
                last_error = e
                attempt.error = str(e)
                attempt.retryable = True

                if number < max_attempts:
                    logger.warning(f"Attempt {number} failed, retrying... ({max_attempts - number} attempts left): {e}")
                    self.tolerance *= self.config.tolerance_decay
                    await self._sleep(self.config.retry_delay)
                    continue
                break

            except FatalRejection as e:
                last_error = e
                attempt.error = str(e)
                logger.error(f"Attempt {number} rejected, not retrying: {e}")
                break

            self._transition(TradeState.CONFIRMED)
            logger.info(f"Transaction successful! Signature: {attempt.signature}")
            return self._finish(intent, TradeState.CONFIRMED, attempt, start_time)

        # Exhausted or fatal
        self._transition(TradeState.FAILED)
        logger.error(f"Transaction failed after {self.attempt} attempt(s): {last_error}")

        logs: List[str] = []
        if self.config.simulate_on_failure and last_bundle is not None:
            logs = await self._simulate(last_bundle)

        return self._finish(intent, TradeState.FAILED, attempt, start_time,
                            error=str(last_error) if last_error else None, logs=logs)

    async def _sign(self, bundle: List[Instruction], attempt: SubmissionAttempt) -> Transaction:
        """Fresh blockhash + signature for every attempt"""
        self._transition(TradeState.SIGNING)
        blockhash = await self._call(self.ledger.get_latest_blockhash(), "fetch blockhash")
        attempt.blockhash = str(blockhash)

        return Transaction.new_signed_with_payer(
            bundle,
            payer=self.keypair.pubkey(),
            signing_keypairs=[self.keypair],
            recent_blockhash=blockhash,
        )

    async def _submit(self, tx: Transaction) -> str:
        try:
            return await asyncio.wait_for(self.ledger.submit_and_confirm(tx), self.config.rpc_timeout)
        except asyncio.TimeoutError as e:
            raise RetryableRejection(f"Confirmation timed out after {self.config.rpc_timeout}s") from e

    async def _simulate(self, bundle: List[Instruction]) -> List[str]:
        """Dry run for diagnostics; failures are logged and ignored"""
        try:
            blockhash = await self._call(self.ledger.get_latest_blockhash(), "fetch blockhash")
            tx = Transaction.new_signed_with_payer(
                bundle,
                payer=self.keypair.pubkey(),
                signing_keypairs=[self.keypair],
                recent_blockhash=blockhash,
            )
            logs = await asyncio.wait_for(self.ledger.simulate(tx), self.config.rpc_timeout)
        except Exception as e:
            logger.warning(f"Simulation unavailable: {e}")
            return []

        if logs:
            logger.info("Simulation logs:\n" + "\n".join(logs))
        return list(logs)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _call(self, coro: Awaitable, what: str):
        """Await an RPC call, bounded by rpc_timeout"""
        try:
            return await asyncio.wait_for(coro, self.config.rpc_timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(f"{what} timed out after {self.config.rpc_timeout}s") from e

    def _derive_accounts(self, intent: TradeIntent) -> TradeAccounts:
        return derive_trade_accounts(
            user=self.keypair.pubkey(),
            mint=intent.mint,
            creator=intent.creator,
            creator_vault=intent.creator_vault,
        )

    def _priority_fee(self, intent: TradeIntent) -> int:
        if intent.priority_fee is not None:
            return intent.priority_fee
        return self.config.priority_fee

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _reset(self):
        self.state = TradeState.BUILDING
        self.tolerance = self.config.initial_tolerance
        self.attempt = 0

    def _transition(self, state: TradeState):
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state

    def _finish(
        self,
        intent: TradeIntent,
        state: TradeState,
        attempt: Optional[SubmissionAttempt],
        start_time: float,
        error: Optional[str] = None,
        logs: Optional[List[str]] = None,
    ) -> TradeResult:
        self.state = state
        return TradeResult(
            state=state,
            side=intent.side,
            mint=str(intent.mint),
            signature=attempt.signature if attempt else None,
            attempts=self.attempt,
            token_amount=attempt.token_amount if attempt else 0,
            error=error,
            simulation_logs=logs or [],
            last_attempt=attempt,
            latency_ms=(time.time() - start_time) * 1000,
        )
