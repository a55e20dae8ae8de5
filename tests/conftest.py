"""
Shared pytest fixtures for the portfolio valuation engine.

Remote data comes from an in-memory FakeSource that records every call, so
tests can assert on call order without a network.
"""

from datetime import UTC, datetime

import pytest

from cryptofolio.client import FetchError
from cryptofolio.models import Holding, PricePoint
from cryptofolio.service import PortfolioDataService
from cryptofolio.store import PortfolioStore

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


def make_holding(id, symbol, quantity, purchase_price, name=None):
    return Holding(
        id=id,
        symbol=symbol,
        name=name or symbol.title(),
        quantity=quantity,
        purchase_price=purchase_price,
        purchase_date=datetime(2024, 1, 1, tzinfo=UTC),
    )


def make_price(current_price, price_24h_ago):
    return PricePoint(
        current_price=current_price,
        price_24h_ago=price_24h_ago,
        last_updated=datetime(2025, 1, 15, 11, 59, tzinfo=UTC),
    )


class FakeSource:
    """PortfolioSource double recording calls as (method, args) tuples."""

    def __init__(self, holdings=None, prices=None, holdings_error=None, prices_error=None):
        self.holdings = holdings or []
        self.prices = prices or {}
        self.holdings_error = holdings_error
        self.prices_error = prices_error
        self.calls = []

    async def get_holdings(self):
        self.calls.append(("get_holdings", ()))
        if self.holdings_error is not None:
            raise self.holdings_error
        return list(self.holdings)

    async def get_prices(self, symbols):
        self.calls.append(("get_prices", tuple(symbols)))
        if self.prices_error is not None:
            raise self.prices_error
        return {s: p for s, p in self.prices.items() if s in symbols}


@pytest.fixture
def holdings():
    """BTC, ETH and ADA positions."""
    return [
        make_holding("1", "BTC", 0.5, 35000, name="Bitcoin"),
        make_holding("2", "ETH", 2.0, 2000, name="Ethereum"),
        make_holding("3", "ADA", 1000, 0.5, name="Cardano"),
    ]


@pytest.fixture
def prices():
    """Prices for BTC and ETH only; ADA is missing."""
    return {
        "BTC": make_price(43250, 42200),
        "ETH": make_price(2500, 2600),
    }


@pytest.fixture
def source(holdings, prices):
    return FakeSource(holdings=holdings, prices=prices)


@pytest.fixture
def store(source):
    """A fresh store per test with a fixed clock."""
    return PortfolioStore(PortfolioDataService(source), clock=lambda: FIXED_NOW)


@pytest.fixture
def fetch_error():
    return FetchError("HTTP error! status: 500", status_code=500)
