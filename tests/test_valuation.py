"""Tests for the valuation functions."""

import math

import pytest

from cryptofolio.valuation import compute_assets, compute_totals, ieee_divide
from tests.conftest import make_holding, make_price


class TestIeeeDivide:
    """Tests for ieee_divide."""

    def test_regular_division(self):
        assert ieee_divide(1.0, 4.0) == 0.25

    def test_positive_over_zero(self):
        assert ieee_divide(5.0, 0.0) == math.inf

    def test_negative_over_zero(self):
        assert ieee_divide(-5.0, 0.0) == -math.inf

    def test_positive_over_negative_zero(self):
        assert ieee_divide(5.0, -0.0) == -math.inf

    def test_zero_over_zero(self):
        assert math.isnan(ieee_divide(0.0, 0.0))


class TestComputeAssets:
    """Tests for compute_assets."""

    def test_missing_inputs_give_empty_list(self, holdings, prices):
        assert compute_assets(None, prices) == []
        assert compute_assets(holdings, None) == []
        assert compute_assets(None, None) == []

    def test_arithmetic(self):
        """0.5 BTC bought at 35000, now 43250 (42200 yesterday)."""
        holding = make_holding("1", "BTC", 0.5, 35000)
        [asset] = compute_assets([holding], {"BTC": make_price(43250, 42200)})

        assert asset.current_value == 21625
        assert asset.purchase_cost == 17500
        assert asset.profit_loss == 4125
        assert asset.percentage_change == pytest.approx(23.5714, abs=1e-3)
        assert asset.daily_change == pytest.approx(2.4882, abs=1e-3)
        assert asset.current_price == 43250
        assert asset.price_unavailable is False

    def test_copies_holding_fields(self):
        holding = make_holding("abc", "ETH", 2, 1500, name="Ethereum")
        [asset] = compute_assets([holding], {"ETH": make_price(2000, 2000)})

        assert asset.id == "abc"
        assert asset.name == "Ethereum"
        assert asset.ticker == "ETH"
        assert asset.quantity == 2
        assert asset.purchase_price == 1500
        assert asset.daily_change == 0

    def test_missing_price_degrades(self):
        holding = make_holding("1", "ADA", 1000, 0.5)
        [asset] = compute_assets([holding], {})

        assert asset.price_unavailable is True
        assert asset.current_price == 0
        assert asset.current_value == 0
        assert asset.profit_loss == 0
        assert asset.percentage_change == 0
        assert asset.daily_change == 0
        assert asset.purchase_cost == 1000 * 0.5

    def test_zero_price_is_not_unavailable(self):
        """A real price of zero is a valuation, not a missing price."""
        holding = make_holding("1", "DEAD", 10, 1)
        [asset] = compute_assets([holding], {"DEAD": make_price(0, 1)})

        assert asset.price_unavailable is False
        assert asset.current_value == 0
        assert asset.profit_loss == -10
        assert asset.percentage_change == -100
        assert asset.daily_change == -100

    def test_zero_purchase_cost_gives_infinity(self):
        holding = make_holding("1", "BTC", 1, 0)
        [asset] = compute_assets([holding], {"BTC": make_price(43250, 42200)})

        assert asset.purchase_cost == 0
        assert asset.profit_loss == 43250
        assert asset.percentage_change == math.inf

    def test_zero_cost_and_zero_value_gives_nan(self):
        holding = make_holding("1", "BTC", 0, 100)
        [asset] = compute_assets([holding], {"BTC": make_price(43250, 42200)})

        assert math.isnan(asset.percentage_change)

    def test_zero_previous_price_gives_infinity(self):
        holding = make_holding("1", "NEW", 1, 1)
        [asset] = compute_assets([holding], {"NEW": make_price(2, 0)})

        assert asset.daily_change == math.inf

    def test_length_and_order_preserved(self, holdings, prices):
        assets = compute_assets(holdings, prices)

        assert len(assets) == len(holdings)
        assert [a.id for a in assets] == [h.id for h in holdings]
        assert [a.price_unavailable for a in assets] == [False, False, True]

    def test_length_preserved_with_no_prices(self, holdings):
        assets = compute_assets(holdings, {})

        assert len(assets) == len(holdings)
        assert all(a.price_unavailable for a in assets)

    def test_duplicate_symbols_share_price(self):
        holdings = [
            make_holding("1", "BTC", 1, 30000),
            make_holding("2", "BTC", 2, 40000),
        ]
        assets = compute_assets(holdings, {"BTC": make_price(50000, 50000)})

        assert [a.current_value for a in assets] == [50000, 100000]

    def test_deterministic(self, holdings, prices):
        assert compute_assets(holdings, prices) == compute_assets(holdings, prices)


class TestComputeTotals:
    """Tests for compute_totals."""

    def test_empty(self):
        totals = compute_totals([])

        assert totals.total_value == 0
        assert totals.total_cost == 0
        assert totals.total_profit_loss == 0
        assert totals.total_percentage_change == 0

    def test_unpriced_assets_count_towards_cost_only(self, holdings, prices):
        totals = compute_totals(compute_assets(holdings, prices))

        # BTC 21625 + ETH 5000
        assert totals.total_value == pytest.approx(26625)
        # BTC 17500 + ETH 4000 + ADA 500
        assert totals.total_cost == pytest.approx(22000)
        # BTC 4125 + ETH 1000
        assert totals.total_profit_loss == pytest.approx(5125)
        assert totals.total_percentage_change == pytest.approx(5125 / 22000 * 100)

    def test_zero_cost_gives_zero_percentage(self):
        """Unlike the per-asset figure, the total never reports infinity."""
        holding = make_holding("1", "BTC", 1, 0)
        totals = compute_totals(compute_assets([holding], {"BTC": make_price(43250, 42200)}))

        assert totals.total_cost == 0
        assert totals.total_profit_loss == 43250
        assert totals.total_percentage_change == 0
