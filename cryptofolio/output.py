"""Output formatting for CLI."""

import json
import math
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

import click
import yaml

from cryptofolio.models import ComputedAsset, Holding, PortfolioTotals, PricePoint

ASSET_COLUMNS = [
    ("name", "Asset", 16),
    ("ticker", "Ticker", 8),
    ("price", "Price", 18),
    ("daily", "24h", 8),
    ("quantity", "Quantity", 12),
    ("value", "Value", 14),
    ("cost", "Cost", 14),
    ("pnl", "P/L", 14),
    ("change", "Change", 9),
]

HOLDING_COLUMNS = [
    ("id", "ID", 12),
    ("symbol", "Symbol", 8),
    ("name", "Name", 16),
    ("quantity", "Quantity", 12),
    ("purchase_price", "Purchase Price", 16),
    ("purchase_date", "Purchased", 26),
]

PRICE_COLUMNS = [
    ("symbol", "Symbol", 8),
    ("current_price", "Price", 16),
    ("price_24h_ago", "24h Ago", 16),
    ("last_updated", "Updated", 26),
]


def format_currency(amount: float) -> str:
    """Format as US dollars, e.g. ``-$1,234.56``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_percentage(value: float, digits: int = 2) -> str:
    """Format a percentage with an explicit sign, e.g. ``+23.57%``."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{digits}f}%"


def format_last_updated(last_fetched: datetime | None, now: datetime | None = None) -> str:
    """Describe how long ago data was fetched."""
    if last_fetched is None:
        return "Never"

    now = now or datetime.now(UTC)
    minutes = int((now - last_fetched).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    elif minutes == 1:
        return "1 minute ago"
    return f"{minutes} minutes ago"


def asset_rows(assets: list[ComputedAsset]) -> list[dict]:
    """Build display rows for a list of computed assets."""
    rows = []
    for asset in assets:
        if asset.price_unavailable:
            price, daily, change = "Price unavailable", "N/A", "N/A"
        else:
            price = format_currency(asset.current_price)
            daily = format_percentage(asset.daily_change, digits=1)
            change = format_percentage(asset.percentage_change, digits=1)
        rows.append({
            "name": asset.name,
            "ticker": asset.ticker,
            "price": price,
            "daily": daily,
            "quantity": f"{asset.quantity:g}",
            "value": format_currency(asset.current_value),
            "cost": format_currency(asset.purchase_cost),
            "pnl": format_currency(asset.profit_loss),
            "change": change,
        })
    return rows


def totals_summary(totals: PortfolioTotals) -> dict:
    """Header lines for portfolio totals."""
    return {
        "Total Value": format_currency(totals.total_value),
        "Total Cost": format_currency(totals.total_cost),
        "Total P&L": (
            f"{format_currency(totals.total_profit_loss)} "
            f"({format_percentage(totals.total_percentage_change)})"
        ),
    }


def holding_rows(holdings: Iterable[Holding]) -> list[dict]:
    """Build display rows for raw holdings."""
    return [
        {
            "id": h.id,
            "symbol": h.symbol,
            "name": h.name,
            "quantity": f"{h.quantity:g}",
            "purchase_price": format_currency(h.purchase_price),
            "purchase_date": h.purchase_date.isoformat(),
        }
        for h in holdings
    ]


def price_rows(prices: Mapping[str, PricePoint]) -> list[dict]:
    """Build display rows for a symbol to price mapping."""
    return [
        {
            "symbol": symbol,
            "current_price": format_currency(point.current_price),
            "price_24h_ago": format_currency(point.price_24h_ago),
            "last_updated": point.last_updated.isoformat(),
        }
        for symbol, point in prices.items()
    ]


def format_table(rows: list[dict], columns: list[tuple[str, str, int]]) -> str:
    """Lay out pre-formatted rows under fixed-width column headers.

    Args:
        rows: Dictionaries of display strings, as built by the ``*_rows`` helpers
        columns: List of (key, header, width) tuples
    """
    if not rows:
        return "No data found."

    header = "  ".join(h.ljust(w) for _, h, w in columns)
    lines = [header, "-" * len(header)]
    for row in rows:
        cells = []
        for key, _, width in columns:
            value = str(row.get(key, ""))
            if len(value) > width:
                value = value[: width - 3] + "..."
            cells.append(value.ljust(width))
        lines.append("  ".join(cells))
    return "\n".join(lines)


def _json_safe(value: Any) -> Any:
    """Replace infinities and NaN, which JSON cannot represent, with None."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def format_output(data: Any, fmt: str, columns: list[tuple[str, str, int]] | None = None) -> str:
    """Render data as json, yaml or a table.

    In json, non-finite numbers become ``null``. Tables expect display
    strings: a list of rows with ``columns``, or a dict shown as key/value
    lines.
    """
    if fmt == "json":
        return json.dumps(_json_safe(data), indent=2, default=str, allow_nan=False)
    elif fmt == "yaml":
        return yaml.dump(data, default_flow_style=False, allow_unicode=True)
    elif fmt == "table":
        if isinstance(data, list) and columns:
            return format_table(data, columns)
        elif isinstance(data, dict):
            width = max((len(str(k)) for k in data), default=0)
            return "\n".join(f"{str(k).ljust(width)}  {v}" for k, v in data.items())
    return str(data)


def output(data: Any, fmt: str, columns: list[tuple[str, str, int]] | None = None) -> None:
    click.echo(format_output(data, fmt, columns))


def _echo(message: str, prefix: str = "", fg: str | None = None, err: bool = False) -> None:
    text = f"{prefix}{message}"
    click.echo(click.style(text, fg=fg) if fg else text, err=err)


def success(message: str) -> None:
    _echo(message, fg="green")


def error(message: str) -> None:
    _echo(message, prefix="Error: ", fg="red", err=True)


def warning(message: str) -> None:
    _echo(message, prefix="Warning: ", fg="yellow", err=True)


def info(message: str) -> None:
    _echo(message)
