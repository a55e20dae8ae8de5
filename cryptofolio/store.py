"""Portfolio store - the single state container for fetched portfolio data.

All state lives in an immutable PortfolioSnapshot. Actions build a new
snapshot and swap it in with one assignment, then notify listeners, so a
listener never observes a partially applied update.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from types import MappingProxyType

from cryptofolio import telemetry
from cryptofolio.models import (
    Holding,
    HoldingsRecord,
    PricePoint,
    PriceRecord,
    find_duplicate_ids,
)
from cryptofolio.service import PortfolioDataService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Full store state at an instant.

    Holdings are kept as a tuple and prices behind a read-only mapping, so a
    snapshot handed to readers cannot be changed in place.
    """

    holdings: HoldingsRecord | None = None
    prices: PriceRecord | None = None
    loading: bool = False
    error: str | None = None
    last_fetched: datetime | None = None

    def __post_init__(self):
        if self.holdings is not None and not isinstance(self.holdings, tuple):
            object.__setattr__(self, "holdings", tuple(self.holdings))
        if self.prices is not None and not isinstance(self.prices, MappingProxyType):
            object.__setattr__(self, "prices", MappingProxyType(dict(self.prices)))


Listener = Callable[[PortfolioSnapshot, PortfolioSnapshot], None]


def utc_now() -> datetime:
    return datetime.now(UTC)


def _error_message(error: Exception, fallback: str) -> str:
    return str(error) or fallback


def _unique_holdings(holdings: Iterable[Holding]) -> tuple[Holding, ...]:
    holdings = tuple(holdings)
    duplicates = find_duplicate_ids(holdings)
    if duplicates:
        raise ValueError(f"Duplicate holding ids: {', '.join(duplicates)}")
    return holdings


class PortfolioStore:
    """Holds the portfolio snapshot and the actions that change it."""

    def __init__(
        self,
        service: PortfolioDataService,
        initial: PortfolioSnapshot | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.service = service
        self._initial = initial or PortfolioSnapshot()
        self._state = self._initial
        self._clock = clock
        self._listeners: list[Listener] = []
        # Overlapping fetches run one after another
        self._fetch_lock = asyncio.Lock()

    @property
    def state(self) -> PortfolioSnapshot:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with (new, old) after every change.

        Exceptions raised by a listener are logged and do not reach the
        action that made the change. Returns a function that removes the
        listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes) -> None:
        old = self._state
        self._state = replace(old, **changes)
        for listener in list(self._listeners):
            # A failing listener must not interrupt the action or other listeners
            try:
                listener(self._state, old)
            except Exception:
                logger.exception(f"Store listener {listener!r} failed")

    def reset(self) -> None:
        """Return to the initial snapshot."""
        self._set(**vars(self._initial))

    # --- Synchronous actions ---

    def set_holdings(self, holdings: Iterable[Holding]) -> None:
        self._set(holdings=_unique_holdings(holdings))

    def set_prices(self, prices: Mapping[str, PricePoint]) -> None:
        self._set(prices=dict(prices))

    def set_loading(self, loading: bool) -> None:
        self._set(loading=loading)

    def set_error(self, error: str | None) -> None:
        self._set(error=error)

    def set_last_fetched(self, last_fetched: datetime) -> None:
        self._set(last_fetched=last_fetched)

    # --- Async actions ---

    async def _run_fetch(
        self,
        action: str,
        fetch: Callable[[], Awaitable[dict]],
        fallback: str,
    ) -> None:
        """Run a fetch with loading/error bookkeeping.

        ``fetch`` returns the snapshot fields to apply on success. Failures are
        stored in ``error`` and never raised; ``loading`` is always released.
        """
        async with self._fetch_lock:
            self._set(loading=True, error=None)
            started = time.perf_counter()
            try:
                changes = await fetch()
            except Exception as e:
                message = _error_message(e, fallback)
                logger.error(f"{fallback}: {message}")
                self._set(error=message, loading=False)
                telemetry.record_fetch(action, "error", time.perf_counter() - started)
                return

            self._set(**changes, loading=False, last_fetched=self._clock())
            telemetry.record_fetch(action, "success", time.perf_counter() - started)

    async def fetch_holdings(self) -> None:
        async def fetch():
            return {"holdings": _unique_holdings(await self.service.fetch_holdings())}

        await self._run_fetch("fetch_holdings", fetch, "Failed to fetch holdings")

    async def fetch_prices(self, symbols: Sequence[str]) -> None:
        """Fetch prices for ``symbols``; does nothing for an empty list."""
        if not symbols:
            return

        async def fetch():
            return {"prices": await self.service.fetch_prices(symbols)}

        await self._run_fetch("fetch_prices", fetch, "Failed to fetch prices")

    async def fetch_portfolio_data(self) -> None:
        """Fetch holdings and their prices, committing both together.

        On failure from either step the previous holdings and prices are kept.
        """

        async def fetch():
            data = await self.service.fetch_portfolio_data()
            return {"holdings": _unique_holdings(data.holdings), "prices": data.prices}

        await self._run_fetch(
            "fetch_portfolio_data", fetch, "Failed to fetch portfolio data"
        )
