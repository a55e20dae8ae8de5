"""Read-only views over a PortfolioStore.

Selectors recompute from the current snapshot on every call and never
mutate the store.
"""

from datetime import datetime

from cryptofolio.models import (
    ComputedAsset,
    HoldingsRecord,
    PortfolioData,
    PortfolioTotals,
    PriceRecord,
)
from cryptofolio.store import PortfolioStore
from cryptofolio.valuation import compute_assets, compute_totals


def select_holdings(store: PortfolioStore) -> HoldingsRecord | None:
    return store.state.holdings


def select_prices(store: PortfolioStore) -> PriceRecord | None:
    return store.state.prices


def select_loading(store: PortfolioStore) -> bool:
    return store.state.loading


def select_error(store: PortfolioStore) -> str | None:
    return store.state.error


def select_last_fetched(store: PortfolioStore) -> datetime | None:
    return store.state.last_fetched


def select_combined_data(store: PortfolioStore) -> PortfolioData | None:
    """Holdings and prices together, or None until both are present."""
    state = store.state
    if state.holdings is None or state.prices is None:
        return None
    return PortfolioData(holdings=state.holdings, prices=state.prices)


def select_computed_assets(store: PortfolioStore) -> list[ComputedAsset]:
    state = store.state
    return compute_assets(state.holdings, state.prices)


def select_portfolio_totals(store: PortfolioStore) -> PortfolioTotals:
    """Totals for the portfolio header."""
    return compute_totals(select_computed_assets(store))
