"""Valuation - joins holdings with prices into per-asset P/L figures."""

import math

from cryptofolio.models import (
    ComputedAsset,
    Holding,
    HoldingsRecord,
    PortfolioTotals,
    PricePoint,
    PriceRecord,
)


def ieee_divide(numerator: float, denominator: float) -> float:
    """Divide using IEEE-754 float semantics.

    Python raises ZeroDivisionError on ``x / 0.0``; this returns ``±inf`` for a
    non-zero numerator and ``nan`` for ``0 / 0`` instead.
    """
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def _unpriced_asset(holding: Holding) -> ComputedAsset:
    return ComputedAsset(
        id=holding.id,
        name=holding.name,
        ticker=holding.symbol,
        current_price=0.0,
        daily_change=0.0,
        quantity=holding.quantity,
        purchase_price=holding.purchase_price,
        current_value=0.0,
        purchase_cost=holding.quantity * holding.purchase_price,
        profit_loss=0.0,
        percentage_change=0.0,
        price_unavailable=True,
    )


def _priced_asset(holding: Holding, price: PricePoint) -> ComputedAsset:
    current_value = holding.quantity * price.current_price
    purchase_cost = holding.quantity * holding.purchase_price
    profit_loss = current_value - purchase_cost

    # Zero cost basis or zero prior price propagate as inf/nan
    percentage_change = ieee_divide(profit_loss, purchase_cost) * 100
    daily_change = (
        ieee_divide(price.current_price - price.price_24h_ago, price.price_24h_ago)
        * 100
    )

    return ComputedAsset(
        id=holding.id,
        name=holding.name,
        ticker=holding.symbol,
        current_price=price.current_price,
        daily_change=daily_change,
        quantity=holding.quantity,
        purchase_price=holding.purchase_price,
        current_value=current_value,
        purchase_cost=purchase_cost,
        profit_loss=profit_loss,
        percentage_change=percentage_change,
        price_unavailable=False,
    )


def compute_assets(
    holdings: HoldingsRecord | None, prices: PriceRecord | None
) -> list[ComputedAsset]:
    """Value every holding against the given prices.

    Args:
        holdings: Holdings in display order
        prices: Price points keyed by symbol

    Returns:
        One ComputedAsset per holding, in the same order. Holdings without a
        price are flagged ``price_unavailable`` rather than dropped. Empty if
        either input is missing.
    """
    if holdings is None or prices is None:
        return []

    assets = []
    for holding in holdings:
        price = prices.get(holding.symbol)
        if price is None:
            assets.append(_unpriced_asset(holding))
        else:
            assets.append(_priced_asset(holding, price))
    return assets


def compute_totals(assets: list[ComputedAsset]) -> PortfolioTotals:
    """Sum computed assets into portfolio totals.

    Value and P/L only count priced assets; cost counts every asset. The
    percentage is 0 when there is no cost basis, unlike the per-asset figure.
    """
    total_value = 0.0
    total_cost = 0.0
    total_profit_loss = 0.0
    for asset in assets:
        if not asset.price_unavailable:
            total_value += asset.current_value
            total_profit_loss += asset.profit_loss
        total_cost += asset.purchase_cost

    if total_cost > 0:
        total_percentage_change = (total_profit_loss / total_cost) * 100
    else:
        total_percentage_change = 0.0

    return PortfolioTotals(
        total_value=total_value,
        total_cost=total_cost,
        total_profit_loss=total_profit_loss,
        total_percentage_change=total_percentage_change,
    )
