"""Portfolio data service - composes the holdings and prices fetches."""

import logging
from collections.abc import Sequence
from typing import Protocol

from cryptofolio.models import HoldingsRecord, PortfolioData, PriceRecord

logger = logging.getLogger(__name__)


class PortfolioSource(Protocol):
    """Remote source of holdings and prices."""

    async def get_holdings(self) -> HoldingsRecord: ...

    async def get_prices(self, symbols: Sequence[str]) -> PriceRecord: ...


def symbols_for(holdings: HoldingsRecord) -> list[str]:
    """Unique symbols of the holdings, in holding order."""
    return list(dict.fromkeys(h.symbol for h in holdings))


class PortfolioDataService:
    """Fetches holdings and prices from a PortfolioSource."""

    def __init__(self, source: PortfolioSource):
        self.source = source

    async def fetch_holdings(self) -> HoldingsRecord:
        try:
            return await self.source.get_holdings()
        except Exception as e:
            logger.error(f"Failed to fetch holdings: {e}")
            raise

    async def fetch_prices(self, symbols: Sequence[str]) -> PriceRecord:
        if not symbols:
            logger.debug("No symbols requested, skipping price fetch")
            return {}
        try:
            return await self.source.get_prices(list(symbols))
        except Exception as e:
            logger.error(f"Failed to fetch prices for {', '.join(symbols)}: {e}")
            raise

    async def fetch_portfolio_data(self) -> PortfolioData:
        """Fetch holdings, then prices for exactly the held symbols.

        Prices are not requested if the holdings fetch fails. A prices failure
        is raised as-is; the caller decides what to keep.
        """
        holdings = await self.fetch_holdings()
        prices = await self.fetch_prices(symbols_for(holdings))
        logger.debug(f"Fetched {len(holdings)} holdings and {len(prices)} prices")
        return PortfolioData(holdings=holdings, prices=prices)
