#!/usr/bin/env python3
"""
Command line interface for the crypto portfolio tracker.

Usage:
    python -m cryptofolio.cli <command> [args] [options]

Examples:
    python -m cryptofolio.cli portfolio
    python -m cryptofolio.cli holdings --output json
    python -m cryptofolio.cli prices BTC ETH
    python -m cryptofolio.cli config set api_url https://api.example.com
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict

import click

from cryptofolio import config as cfg
from cryptofolio import output as out
from cryptofolio import telemetry
from cryptofolio.client import PortfolioClient
from cryptofolio.selectors import (
    select_computed_assets,
    select_error,
    select_holdings,
    select_last_fetched,
    select_portfolio_totals,
    select_prices,
)
from cryptofolio.service import PortfolioDataService
from cryptofolio.store import PortfolioStore

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context
# =============================================================================


class Context:
    """CLI context holding configuration."""

    def __init__(self):
        defaults = cfg.get_default_config()
        self.api_url: str = defaults["api_url"]
        self.timeout: float = defaults["timeout"]
        self.retry_attempts: int = defaults["retry_attempts"]
        self.output_format: str = "table"

    def client(self) -> PortfolioClient:
        return PortfolioClient(self.api_url, timeout=self.timeout)


pass_context = click.make_pass_decorator(Context, ensure=True)


async def retry_fetch(
    store: PortfolioStore,
    fetch: Callable[[], Awaitable[None]],
    retry_attempts: int,
) -> None:
    """Run a store fetch action, re-running it while the store reports an error."""
    await fetch()
    for attempt in range(1, retry_attempts + 1):
        error = select_error(store)
        if error is None:
            return
        logger.info(f"Retrying ({attempt}/{retry_attempts}) after error: {error}")
        await fetch()


def run_fetch(ctx: Context, fetch: Callable[[PortfolioStore], Awaitable[None]]) -> PortfolioStore:
    """Build a store, run ``fetch`` against it and exit on a terminal error."""

    async def run() -> PortfolioStore:
        async with ctx.client() as client:
            store = PortfolioStore(PortfolioDataService(client))
            await retry_fetch(store, lambda: fetch(store), ctx.retry_attempts)
            return store

    store = asyncio.run(run())
    error = select_error(store)
    if error is not None:
        out.error(error)
        raise SystemExit(1)
    return store


# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.option(
    "--api-url", "-u",
    envvar="CRYPTOFOLIO_API_URL",
    default=None,
    help="Portfolio API URL (overrides config)",
)
@click.option(
    "--output", "-o",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
    help="Output format",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@pass_context
def cli(ctx: Context, api_url: str | None, output: str, verbose: bool):
    """Track crypto holdings and their live valuation."""
    config = cfg.resolve_config({"api_url": api_url})
    ctx.api_url = config["api_url"]
    ctx.timeout = float(config["timeout"])
    ctx.retry_attempts = int(config["retry_attempts"])
    ctx.output_format = output

    level = logging.DEBUG if verbose else str(config["log_level"]).upper()
    logging.basicConfig(level=level, format="%(message)s")
    if telemetry.setup_telemetry():
        handler = telemetry.get_log_handler()
        if handler:
            logging.getLogger().addHandler(handler)


# =============================================================================
# Config Commands
# =============================================================================


@cli.command("config")
@click.argument("action", required=False, type=click.Choice(["show", "set"]))
@click.argument("args", nargs=-1)
def config_cmd(action: str | None, args: tuple):
    """Manage CLI configuration.

    Without arguments: interactive setup.

    \b
    Examples:
        cryptofolio config              # Interactive setup
        cryptofolio config show         # Show current config
        cryptofolio config set api_url http://localhost:8000
    """
    if action is None:
        config_path = cfg.find_config()
        if config_path:
            out.info(f"Config file found: {config_path}")
            current = cfg.resolve_config()
        else:
            out.info("No config file found. Creating new config.")
            current = cfg.get_default_config()

        new_config = {
            "api_url": click.prompt("Portfolio API URL", default=current["api_url"]),
            "timeout": click.prompt(
                "Request timeout (seconds)", default=current["timeout"], type=float
            ),
            "retry_attempts": click.prompt(
                "Retry attempts", default=current["retry_attempts"], type=int
            ),
            "log_level": current["log_level"],
        }

        save_path = cfg.save_config(new_config)
        out.success(f"Configuration saved to {save_path}")

    elif action == "show":
        config_path = cfg.find_config()
        if config_path is None:
            out.info("No configuration file found.")
            out.info("Run 'python -m cryptofolio.cli config' to create one.")
            return

        out.info(f"Config file: {config_path}")
        out.info("")
        for key, value in cfg.load_config().items():
            out.info(f"  {key}: {value}")

    elif action == "set":
        if len(args) != 2:
            out.error("Usage: cryptofolio config set <key> <value>")
            raise SystemExit(1)

        key, value = args
        if key not in cfg.VALID_KEYS:
            out.error(f"Unknown config key: {key}")
            out.info(f"Valid keys: {', '.join(sorted(cfg.VALID_KEYS))}")
            raise SystemExit(1)

        config = cfg.load_config()
        config[key] = yaml_scalar(value)
        save_path = cfg.save_config(config)
        out.success(f"Set {key} = {value}")
        out.info(f"Saved to {save_path}")


def yaml_scalar(value: str):
    """Convert a command line value to int/float where it looks numeric."""
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


# =============================================================================
# Portfolio Commands
# =============================================================================


@cli.command("portfolio")
@pass_context
def portfolio(ctx: Context):
    """Fetch holdings and prices and show the valuation."""
    store = run_fetch(ctx, lambda store: store.fetch_portfolio_data())

    assets = select_computed_assets(store)
    totals = select_portfolio_totals(store)
    last_fetched = select_last_fetched(store)

    if ctx.output_format != "table":
        out.output(
            {
                "assets": [asdict(a) for a in assets],
                "totals": asdict(totals),
                "last_fetched": last_fetched,
            },
            ctx.output_format,
        )
        return

    out.info(click.style("My Crypto Portfolio", bold=True))
    out.info("")
    out.output(out.totals_summary(totals), "table")
    out.info("")
    out.output(out.asset_rows(assets), "table", out.ASSET_COLUMNS)
    out.info("")
    out.info(f"Last updated: {out.format_last_updated(last_fetched)}")

    unavailable = [a.ticker for a in assets if a.price_unavailable]
    if unavailable:
        out.warning(f"No price data for: {', '.join(unavailable)}")


@cli.command("holdings")
@pass_context
def holdings(ctx: Context):
    """Show holdings without prices."""
    store = run_fetch(ctx, lambda store: store.fetch_holdings())
    records = select_holdings(store) or ()

    if ctx.output_format == "table":
        out.output(out.holding_rows(records), "table", out.HOLDING_COLUMNS)
    else:
        out.output([asdict(h) for h in records], ctx.output_format)


@cli.command("prices")
@click.argument("symbols", nargs=-1, required=True)
@pass_context
def prices(ctx: Context, symbols: tuple[str, ...]):
    """Show current prices for SYMBOLS."""
    symbols = [s.upper() for s in symbols]
    store = run_fetch(ctx, lambda store: store.fetch_prices(symbols))
    points = select_prices(store) or {}

    if ctx.output_format == "table":
        out.output(out.price_rows(points), "table", out.PRICE_COLUMNS)
    else:
        out.output(
            [{"symbol": symbol, **asdict(point)} for symbol, point in points.items()],
            ctx.output_format,
        )


if __name__ == "__main__":
    cli()
