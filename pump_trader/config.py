"""
Trading Configuration
=====================

Single config for buy and sell execution.

Usage:
    from pump_trader.config import TradingConfig, load_keypair

    config = TradingConfig.from_env()     # reads .env / environment
    keypair = load_keypair()              # PRIVATE_KEY or KEYPAIR_PATH
"""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import base58
from dotenv import load_dotenv
from solders.keypair import Keypair

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"


@dataclass(frozen=True)
class TradingConfig:
    """
    Execution parameters for the trade submitter.

    Buy retries shrink tolerance geometrically:
        0.98 -> 0.931 -> 0.8845 -> 0.840
    """

    # === RPC ===
    rpc_url: str = DEFAULT_RPC_URL
    commitment: str = "confirmed"
    rpc_timeout: float = 30.0               # per network call, seconds

    # === Fees / compute ===
    priority_fee: int = 2                   # micro-lamports per compute unit
    buy_compute_units: int = 63_665
    sell_compute_units: int = 34_848

    # === Buy slippage ladder ===
    initial_tolerance: float = 0.98         # start with 2% slippage
    tolerance_decay: float = 0.95           # shrink 5% per failed attempt
    max_retries: int = 3                    # 1 initial + 3 retries
    retry_delay: float = 1.0                # seconds between attempts

    # === Sell ===
    min_sol_output: int = 0                 # sell limit in lamports

    # === Diagnostics ===
    simulate_on_failure: bool = True

    def __post_init__(self):
        if not 0 < self.initial_tolerance <= 1:
            raise ValueError(f"initial_tolerance must be in (0, 1], got {self.initial_tolerance}")
        if not 0 < self.tolerance_decay <= 1:
            raise ValueError(f"tolerance_decay must be in (0, 1], got {self.tolerance_decay}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {self.retry_delay}")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides) -> 'TradingConfig':
        """Build config from environment (after loading .env)"""
        load_dotenv(env_file)

        values = {}
        if os.getenv("RPC_URL"):
            values['rpc_url'] = os.environ["RPC_URL"]
        if os.getenv("PRIORITY_FEE"):
            values['priority_fee'] = int(os.environ["PRIORITY_FEE"])
        if os.getenv("MAX_RETRIES"):
            values['max_retries'] = int(os.environ["MAX_RETRIES"])
        if os.getenv("RPC_TIMEOUT"):
            values['rpc_timeout'] = float(os.environ["RPC_TIMEOUT"])

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_overrides(self, **overrides) -> 'TradingConfig':
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict:
        return {
            'rpc_url': self.rpc_url,
            'commitment': self.commitment,
            'rpc_timeout': self.rpc_timeout,
            'priority_fee': self.priority_fee,
            'buy_compute_units': self.buy_compute_units,
            'sell_compute_units': self.sell_compute_units,
            'initial_tolerance': self.initial_tolerance,
            'tolerance_decay': self.tolerance_decay,
            'max_retries': self.max_retries,
            'retry_delay': self.retry_delay,
            'min_sol_output': self.min_sol_output,
            'simulate_on_failure': self.simulate_on_failure,
        }


# Default configuration
DEFAULT_CONFIG = TradingConfig()


def keypair_from_base58(secret: str) -> Keypair:
    """
    Decode a base58 secret.

    Handles both formats:
    - 32 bytes: secret key only -> from_seed()
    - 64 bytes: full keypair (secret + public) -> from_bytes()
    """
    raw = base58.b58decode(secret.strip())
    if len(raw) == 32:
        return Keypair.from_seed(raw)
    if len(raw) == 64:
        return Keypair.from_bytes(raw)
    raise ValueError(f"Invalid key length: {len(raw)} bytes (expected 32 or 64)")


def keypair_from_file(path: str) -> Keypair:
    """Load a solana-keygen JSON keypair (list of 64 ints)"""
    with open(Path(path).expanduser()) as f:
        secret = json.load(f)
    return Keypair.from_bytes(bytes(secret))


def load_keypair(env_file: Optional[str] = None) -> Keypair:
    """Signing keypair from PRIVATE_KEY (base58) or KEYPAIR_PATH (JSON file)"""
    load_dotenv(env_file)

    private_key = os.getenv("PRIVATE_KEY")
    if private_key:
        return keypair_from_base58(private_key)

    keypair_path = os.getenv("KEYPAIR_PATH")
    if keypair_path:
        return keypair_from_file(keypair_path)

    raise ValueError("PRIVATE_KEY or KEYPAIR_PATH must be set")
