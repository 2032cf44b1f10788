import json
import os

import base58
import pytest
from solders.keypair import Keypair

from pump_trader.config import (
    DEFAULT_CONFIG,
    TradingConfig,
    keypair_from_base58,
    load_keypair,
)

ENV_VARS = ("RPC_URL", "PRIORITY_FEE", "MAX_RETRIES", "RPC_TIMEOUT", "PRIVATE_KEY", "KEYPAIR_PATH")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    for name in ENV_VARS:
        os.environ.pop(name, None)


def test_defaults():
    assert DEFAULT_CONFIG.priority_fee == 2
    assert DEFAULT_CONFIG.buy_compute_units == 63_665
    assert DEFAULT_CONFIG.sell_compute_units == 34_848
    assert DEFAULT_CONFIG.initial_tolerance == 0.98
    assert DEFAULT_CONFIG.tolerance_decay == 0.95
    assert DEFAULT_CONFIG.max_attempts == 4
    assert DEFAULT_CONFIG.min_sol_output == 0


def test_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("RPC_URL=http://localhost:8899\nPRIORITY_FEE=7\nMAX_RETRIES=1\nRPC_TIMEOUT=2.5\n")

    config = TradingConfig.from_env(str(env_file))

    assert config.rpc_url == "http://localhost:8899"
    assert config.priority_fee == 7
    assert config.max_retries == 1
    assert config.rpc_timeout == 2.5


def test_overrides_beat_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("PRIORITY_FEE", "7")
    config = TradingConfig.from_env(str(tmp_path / "missing.env"), priority_fee=9, max_retries=None)

    assert config.priority_fee == 9
    assert config.max_retries == 3


@pytest.mark.parametrize("field, value", [
    ("initial_tolerance", 0.0),
    ("initial_tolerance", 1.5),
    ("tolerance_decay", 0.0),
    ("max_retries", -1),
    ("retry_delay", -1.0),
])
def test_invalid_values(field, value):
    with pytest.raises(ValueError):
        TradingConfig(**{field: value})


def test_with_overrides_leaves_default_untouched():
    config = DEFAULT_CONFIG.with_overrides(priority_fee=5)
    assert config.priority_fee == 5
    assert DEFAULT_CONFIG.priority_fee == 2
    assert config.to_dict()['priority_fee'] == 5


def test_keypair_from_64_byte_secret():
    keypair = Keypair()
    assert keypair_from_base58(base58.b58encode(bytes(keypair)).decode()) == keypair


def test_keypair_from_32_byte_seed():
    seed = bytes(range(32))
    assert keypair_from_base58(base58.b58encode(seed).decode()) == Keypair.from_seed(seed)


def test_keypair_bad_length():
    with pytest.raises(ValueError):
        keypair_from_base58(base58.b58encode(bytes(16)).decode())


def test_load_keypair_from_env(monkeypatch, tmp_path):
    keypair = Keypair()
    monkeypatch.setenv("PRIVATE_KEY", base58.b58encode(bytes(keypair)).decode())
    assert load_keypair(str(tmp_path / "missing.env")) == keypair


def test_load_keypair_from_json_file(monkeypatch, tmp_path):
    keypair = Keypair()
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(keypair))))
    monkeypatch.setenv("KEYPAIR_PATH", str(path))

    assert load_keypair(str(tmp_path / "missing.env")) == keypair


def test_load_keypair_requires_a_source(tmp_path):
    with pytest.raises(ValueError):
        load_keypair(str(tmp_path / "missing.env"))
