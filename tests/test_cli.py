import pytest
from solders.pubkey import Pubkey

from pump_trader import cli
from pump_trader.models import SellAmount, TradeResult, TradeSide, TradeState

MINT = str(Pubkey.new_unique())
CREATOR = str(Pubkey.new_unique())


def test_buy_args():
    args = cli.build_parser().parse_args(["buy", MINT, CREATOR, "16837852", "--priority-fee", "3"])
    intent = cli.intent_from_args(args)

    assert intent.side == TradeSide.BUY
    assert intent.sol_amount == 16_837_852
    assert intent.priority_fee == 3
    assert str(intent.creator) == CREATOR


def test_sell_percentage_args():
    args = cli.build_parser().parse_args(["-v", "sell", MINT, CREATOR, "50%"])
    intent = cli.intent_from_args(args)

    assert args.verbose
    assert intent.side == TradeSide.SELL
    assert intent.sell_amount == SellAmount.percent(50)


def test_creator_vault_override():
    vault = str(Pubkey.new_unique())
    args = cli.build_parser().parse_args(["sell", MINT, CREATOR, "31000", "--creator-vault", vault])
    assert str(cli.intent_from_args(args).creator_vault) == vault


def test_priority_fee_must_be_integer():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["buy", MINT, CREATOR, "1000", "--priority-fee", "1.5"])


def test_bad_percentage_exits_1(capsys):
    assert cli.main(["sell", MINT, CREATOR, "150%"]) == 1
    assert "Percentage" in capsys.readouterr().err


def test_exit_code_follows_result(monkeypatch):
    async def fake_run(intent, config):
        return TradeResult(state=TradeState.CONFIRMED, side=intent.side, mint=str(intent.mint), signature="sig")

    monkeypatch.setattr(cli, "run_trade", fake_run)
    monkeypatch.setattr(cli.TradingConfig, "from_env", classmethod(lambda cls: cls()))

    assert cli.main(["buy", MINT, CREATOR, "1000"]) == 0


def test_failed_trade_exits_1(monkeypatch, capsys):
    async def fake_run(intent, config):
        return TradeResult(state=TradeState.FAILED, side=intent.side, mint=str(intent.mint),
                           attempts=4, error="dropped")

    monkeypatch.setattr(cli, "run_trade", fake_run)
    monkeypatch.setattr(cli.TradingConfig, "from_env", classmethod(lambda cls: cls()))

    assert cli.main(["buy", MINT, CREATOR, "1000"]) == 1
    assert "FAILED after 4 attempt(s)" in capsys.readouterr().out
