import pytest
from solders.pubkey import Pubkey

from pump_trader.core.constants import TOKEN_UNIT
from pump_trader.exceptions import (
    InputValidationError,
    InsufficientBalance,
    InvalidAddress,
    InvalidPercentage,
    ZeroBalance,
)
from pump_trader.models import (
    SellAmount,
    SubmissionAttempt,
    TradeIntent,
    TradeResult,
    TradeSide,
    TradeState,
    parse_address,
)

MINT = "8LbkTskkCx212Tm2LCuAeThZDVBQsxk8hKqkUxhspump"


class TestParseAddress:

    def test_valid_address(self):
        pubkey = Pubkey.new_unique()
        assert parse_address(str(pubkey)) == pubkey

    def test_pubkey_passes_through(self):
        pubkey = Pubkey.new_unique()
        assert parse_address(pubkey) is pubkey

    @pytest.mark.parametrize("value", ["", "abc", "0OIl", "1" * 60])
    def test_invalid_addresses(self, value):
        with pytest.raises(InvalidAddress):
            parse_address(value)


class TestSellAmount:

    def test_half_of_balance(self):
        assert SellAmount.parse("50%").resolve(200_000_000) == 100_000_000

    @pytest.mark.parametrize("text", ["0%", "150%", "-5%", "abc%"])
    def test_bad_percentages_rejected(self, text):
        with pytest.raises(InvalidPercentage):
            SellAmount.parse(text)

    def test_full_balance(self):
        assert SellAmount.percent(100).resolve(123_456_789) == 123_456_789

    def test_percentage_floors(self):
        assert SellAmount.percent(33.3).resolve(10) == 3

    def test_whole_tokens(self):
        amount = SellAmount.parse("31000")
        assert amount.raw_amount == 31_000 * TOKEN_UNIT
        assert not amount.is_percentage

    def test_exact_amount_over_balance(self):
        with pytest.raises(InsufficientBalance):
            SellAmount.exact(500).resolve(499)

    def test_exact_amount_must_be_int(self):
        with pytest.raises(InputValidationError):
            SellAmount.exact(1.5)

    def test_zero_balance(self):
        with pytest.raises(ZeroBalance):
            SellAmount.percent(50).resolve(0)

    def test_garbage_amount(self):
        with pytest.raises(InputValidationError):
            SellAmount.parse("lots")

    def test_needs_exactly_one_field(self):
        with pytest.raises(InputValidationError):
            SellAmount()
        with pytest.raises(InputValidationError):
            SellAmount(raw_amount=1, percentage=1)

    def test_str(self):
        assert str(SellAmount.parse("50%")) == "50%"
        assert str(SellAmount.parse("31000")) == "31000 tokens"


class TestTradeIntent:

    def test_buy(self):
        creator = Pubkey.new_unique()
        intent = TradeIntent.buy(MINT, 16_837_852, creator=str(creator), priority_fee=3)

        assert intent.side == TradeSide.BUY
        assert intent.mint == Pubkey.from_string(MINT)
        assert intent.creator == creator
        assert intent.to_dict()['priority_fee'] == 3

    def test_sell_parses_amount(self):
        intent = TradeIntent.sell(MINT, "25%", creator=Pubkey.new_unique())
        assert intent.sell_amount == SellAmount.percent(25)

    def test_requires_creator_or_vault(self):
        with pytest.raises(InputValidationError):
            TradeIntent.buy(MINT, 1_000)

    def test_vault_alone_is_enough(self):
        intent = TradeIntent.buy(MINT, 1_000, creator_vault=Pubkey.new_unique())
        assert intent.creator is None

    @pytest.mark.parametrize("lamports", [0, -1, 2**64])
    def test_buy_amount_range(self, lamports):
        with pytest.raises(InputValidationError):
            TradeIntent.buy(MINT, lamports, creator=Pubkey.new_unique())

    @pytest.mark.parametrize("lamports", [1e7, True, "10000000"])
    def test_buy_amount_must_be_int(self, lamports):
        with pytest.raises(InputValidationError):
            TradeIntent.buy(MINT, lamports, creator=Pubkey.new_unique())

    def test_fractional_priority_fee(self):
        with pytest.raises(InputValidationError):
            TradeIntent.buy(MINT, 1_000, creator=Pubkey.new_unique(), priority_fee=1.5)

    def test_negative_priority_fee(self):
        with pytest.raises(InputValidationError):
            TradeIntent.buy(MINT, 1_000, creator=Pubkey.new_unique(), priority_fee=-1)

    def test_bad_mint(self):
        with pytest.raises(InvalidAddress):
            TradeIntent.buy("not-a-mint", 1_000, creator=Pubkey.new_unique())


class TestResult:

    def test_terminal_states(self):
        assert TradeState.CONFIRMED.is_terminal
        assert TradeState.CANCELLED.is_terminal
        assert not TradeState.SUBMITTED.is_terminal

    def test_result_dict(self):
        attempt = SubmissionAttempt(number=1, tolerance=0.98, token_amount=5, signature="sig")
        result = TradeResult(
            state=TradeState.CONFIRMED,
            side=TradeSide.BUY,
            mint=MINT,
            signature="sig",
            attempts=1,
            last_attempt=attempt,
        )
        data = result.to_dict()

        assert result.success
        assert attempt.confirmed
        assert data['state'] == "CONFIRMED"
        assert data['success'] is True
