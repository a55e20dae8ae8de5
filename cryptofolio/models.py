"""Domain types for holdings, prices and computed valuations."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Holding:
    """A recorded position in one crypto asset."""

    id: str
    symbol: str
    name: str
    quantity: float
    purchase_price: float
    purchase_date: datetime


@dataclass(frozen=True)
class PricePoint:
    """Market price snapshot for one symbol."""

    current_price: float
    price_24h_ago: float
    last_updated: datetime


# Ordered; sequence order is display order.
HoldingsRecord = Sequence[Holding]

# Keyed by symbol.
PriceRecord = Mapping[str, PricePoint]


@dataclass(frozen=True)
class ComputedAsset:
    """A holding joined with its price point."""

    id: str
    name: str
    ticker: str
    current_price: float
    daily_change: float  # percent
    quantity: float
    purchase_price: float
    current_value: float
    purchase_cost: float
    profit_loss: float
    percentage_change: float  # percent
    price_unavailable: bool


@dataclass(frozen=True)
class PortfolioData:
    """Holdings and the prices fetched for them."""

    holdings: HoldingsRecord
    prices: PriceRecord


@dataclass(frozen=True)
class PortfolioTotals:
    """Portfolio-level sums over computed assets."""

    total_value: float
    total_cost: float
    total_profit_loss: float
    total_percentage_change: float


def find_duplicate_ids(holdings: Iterable[Holding]) -> list[str]:
    """Return holding ids that appear more than once, in first-seen order."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for holding in holdings:
        if holding.id in seen and holding.id not in duplicates:
            duplicates.append(holding.id)
        seen.add(holding.id)
    return duplicates
