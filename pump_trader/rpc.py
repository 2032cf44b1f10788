"""
Ledger Client
=============

The five RPC operations the trade pipeline needs, behind one interface:

    get_account_bytes(address)   -> bytes
    get_token_balance(account)   -> int
    get_latest_blockhash()       -> Hash
    submit_and_confirm(tx)       -> signature str
    simulate(tx)                 -> log lines

SolanaLedgerClient implements it over solana-py's AsyncClient. Tests
swap in an in-memory fake.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException, UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from .config import DEFAULT_RPC_URL
from .exceptions import FatalRejection, NotFound, RetryableRejection, TransportError

logger = logging.getLogger(__name__)

# Rejections no amount of re-signing can fix
FATAL_MARKERS = (
    "insufficient funds",
    "insufficientfunds",
    "insufficient lamports",
)


class LedgerClient(ABC):
    """RPC capability consumed by the trade submitter"""

    @abstractmethod
    async def get_account_bytes(self, address: Pubkey) -> bytes:
        """Raw account data. Raises NotFound / TransportError."""

    @abstractmethod
    async def get_token_balance(self, account: Pubkey) -> int:
        """Raw token amount held by a token account. Raises NotFound."""

    @abstractmethod
    async def get_latest_blockhash(self) -> Hash:
        """Raises TransportError."""

    @abstractmethod
    async def submit_and_confirm(self, tx: Transaction) -> str:
        """Signature on confirmation. Raises RetryableRejection / FatalRejection."""

    @abstractmethod
    async def simulate(self, tx: Transaction) -> List[str]:
        """Simulation log lines (best effort)."""

    async def close(self):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()


def _classify_rejection(message: str) -> type:
    lowered = message.lower()
    if any(marker in lowered for marker in FATAL_MARKERS):
        return FatalRejection
    return RetryableRejection


class SolanaLedgerClient(LedgerClient):
    """
    LedgerClient over solana-py.

    Usage:
        async with SolanaLedgerClient(rpc_url) as ledger:
            data = await ledger.get_account_bytes(curve)
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        commitment: str = "confirmed",
        confirm_poll_seconds: float = 0.5,
    ):
        self.rpc_url = rpc_url
        self.commitment = Commitment(commitment)
        self.confirm_poll_seconds = confirm_poll_seconds
        self._client = AsyncClient(rpc_url, commitment=self.commitment)

    async def get_account_bytes(self, address: Pubkey) -> bytes:
        try:
            resp = await self._client.get_account_info(address, encoding="base64")
        except (SolanaRpcException, RPCException) as e:
            raise TransportError(f"get_account_info({address}) failed: {e}") from e

        if resp.value is None:
            raise NotFound(f"Account {address} not found")
        return bytes(resp.value.data)

    async def get_token_balance(self, account: Pubkey) -> int:
        try:
            resp = await self._client.get_token_account_balance(account)
        except RPCException as e:
            raise NotFound(f"Token account {account} not found: {e}") from e
        except SolanaRpcException as e:
            raise TransportError(f"get_token_account_balance({account}) failed: {e}") from e

        return int(resp.value.amount)

    async def get_latest_blockhash(self) -> Hash:
        try:
            resp = await self._client.get_latest_blockhash()
        except (SolanaRpcException, RPCException) as e:
            raise TransportError(f"get_latest_blockhash failed: {e}") from e
        return resp.value.blockhash

    async def submit_and_confirm(self, tx: Transaction) -> str:
        opts = TxOpts(
            skip_preflight=False,
            preflight_commitment=self.commitment,
            max_retries=1,  # retries are handled by the submitter
        )

        try:
            resp = await self._client.send_transaction(tx, opts=opts)
        except RPCException as e:
            raise _classify_rejection(str(e))(f"Transaction rejected: {e}") from e
        except SolanaRpcException as e:
            raise RetryableRejection(f"Transaction send failed: {e}") from e

        signature = resp.value
        logger.debug(f"Sent {signature}, awaiting {self.commitment} confirmation")

        try:
            confirmation = await self._client.confirm_transaction(
                signature,
                commitment=self.commitment,
                sleep_seconds=self.confirm_poll_seconds,
            )
        except UnconfirmedTxError as e:
            raise RetryableRejection(f"Transaction {signature} not confirmed: {e}") from e
        except (SolanaRpcException, RPCException) as e:
            raise RetryableRejection(f"Confirmation of {signature} failed: {e}") from e

        status = confirmation.value[0] if confirmation.value else None
        if status is not None and status.err is not None:
            raise _classify_rejection(str(status.err))(
                f"Transaction {signature} failed on-chain: {status.err}"
            )

        return str(signature)

    async def simulate(self, tx: Transaction) -> List[str]:
        try:
            resp = await self._client.simulate_transaction(tx)
        except (SolanaRpcException, RPCException) as e:
            raise TransportError(f"simulate_transaction failed: {e}") from e
        return list(resp.value.logs or [])

    async def close(self):
        await self._client.close()
