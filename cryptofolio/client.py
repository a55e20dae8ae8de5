"""Async HTTP client for the portfolio and market price API."""

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from cryptofolio.models import HoldingsRecord, PriceRecord
from cryptofolio.schemas import ApiEnvelope, ApiErrorBody, HoldingsData, PriceData

logger = logging.getLogger(__name__)

HOLDINGS_PATH = "/api/v1/portfolio/holdings"
PRICES_PATH = "/api/v1/market/prices"


class FetchError(Exception):
    """Remote fetch failed: transport error, non-success response or bad payload."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    """Pick the server's message out of an error body, if it sent one."""
    fallback = f"HTTP error! status: {response.status_code}"
    try:
        body = ApiErrorBody.model_validate(response.json())
    except ValueError:
        return fallback
    return body.message or fallback


class PortfolioClient:
    """Async client for the holdings and prices endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the portfolio API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "PortfolioClient":
        """Enter async context."""
        _ = self.client
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context."""
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating one if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, path: str, params: dict | None = None) -> Any:
        """GET an endpoint and unwrap the response envelope."""
        try:
            response = await self.client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error(f"API request failed: GET {path} - {e!r}")
            raise FetchError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            message = _error_message(response)
            logger.error(f"API request failed: GET {path} - {message}")
            raise FetchError(message, response.status_code)

        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except ValueError as e:
            raise FetchError(f"Invalid response payload: {e}", response.status_code) from e

        if not envelope.success:
            raise FetchError(
                envelope.message or "Request was not successful", response.status_code
            )
        return envelope.data

    async def get_holdings(self) -> HoldingsRecord:
        """Get the user's holdings."""
        data = await self._request(HOLDINGS_PATH)
        try:
            return HoldingsData.model_validate(data).to_record()
        except ValidationError as e:
            raise FetchError(f"Invalid response payload: {e}") from e

    async def get_prices(self, symbols: Sequence[str]) -> PriceRecord:
        """Get current prices for the given symbols.

        The ``symbols`` query parameter is always sent, empty if no symbols.
        """
        data = await self._request(PRICES_PATH, params={"symbols": ",".join(symbols)})
        try:
            return PriceData.model_validate(data).to_record()
        except ValidationError as e:
            raise FetchError(f"Invalid response payload: {e}") from e
