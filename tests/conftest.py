"""
Shared fixtures: a scripted in-memory ledger and curve account bytes.
"""
import struct
from collections import deque
from typing import Dict, List, Optional, Union

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from pump_trader.config import TradingConfig
from pump_trader.exceptions import NotFound
from pump_trader.rpc import LedgerClient


def curve_bytes(
    real_tokens: int = 793_100_000_000_000,
    virtual_tokens: int = 1_000_000_000_000,
    virtual_sol: int = 1_000_000_000,
    padding: int = 25,
) -> bytes:
    """Bonding curve account data: three u64 words + trailing fields"""
    return struct.pack("<QQQ", real_tokens, virtual_tokens, virtual_sol) + bytes(padding)


class FakeLedger(LedgerClient):
    """
    Scripted LedgerClient.

    `outcomes` is consumed one entry per submit: a str is returned as the
    signature, an exception instance is raised.
    """

    def __init__(
        self,
        accounts: Optional[Dict[Pubkey, bytes]] = None,
        balances: Optional[Dict[Pubkey, int]] = None,
        outcomes: Optional[List[Union[str, Exception]]] = None,
        simulation_logs: Optional[List[str]] = None,
    ):
        self.accounts = dict(accounts or {})
        self.balances = dict(balances or {})
        self.outcomes = deque(outcomes or [])
        self.simulation_logs = simulation_logs or []

        self.submitted: List[Transaction] = []
        self.simulated: List[Transaction] = []
        self.blockhashes: List[Hash] = []
        self.account_fetches = 0
        self.balance_fetches = 0
        self.closed = False

    async def get_account_bytes(self, address: Pubkey) -> bytes:
        self.account_fetches += 1
        if address not in self.accounts:
            raise NotFound(f"Account {address} not found")
        return self.accounts[address]

    async def get_token_balance(self, account: Pubkey) -> int:
        self.balance_fetches += 1
        if account not in self.balances:
            raise NotFound(f"Token account {account} not found")
        return self.balances[account]

    async def get_latest_blockhash(self) -> Hash:
        blockhash = Hash.new_unique()
        self.blockhashes.append(blockhash)
        return blockhash

    async def submit_and_confirm(self, tx: Transaction) -> str:
        self.submitted.append(tx)
        outcome = self.outcomes.popleft()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def simulate(self, tx: Transaction) -> List[str]:
        self.simulated.append(tx)
        return list(self.simulation_logs)

    async def close(self):
        self.closed = True


async def no_sleep(delay: float):
    pass


@pytest.fixture
def keypair():
    return Keypair()


@pytest.fixture
def mint():
    return Pubkey.new_unique()


@pytest.fixture
def creator():
    return Pubkey.new_unique()


@pytest.fixture
def fast_config():
    return TradingConfig(retry_delay=0.0, rpc_timeout=5.0)
