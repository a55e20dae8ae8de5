"""Pydantic schemas for the portfolio API wire format."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from cryptofolio.models import Holding, HoldingsRecord, PricePoint, PriceRecord


class ApiEnvelope(BaseModel):
    """Wrapper around every successful API response."""

    data: Any = Field(None, description="Endpoint payload")
    success: bool = Field(True, description="Whether the request succeeded")
    message: str | None = Field(None, description="Optional server message")


class ApiErrorBody(BaseModel):
    """Body of a non-success API response."""

    error: str | None = Field(None, description="Error code")
    message: str | None = Field(None, description="Human-readable error")
    status: int | None = Field(None, description="HTTP status code")


class HoldingSchema(BaseModel):
    """A single holding as returned by the holdings endpoint."""

    id: str = Field(..., description="Unique holding identifier")
    symbol: str = Field(..., description="Asset ticker symbol")
    name: str = Field(..., description="Asset display name")
    quantity: float = Field(..., ge=0, description="Units held")
    purchase_price: float = Field(
        ..., alias="purchasePrice", ge=0, description="Price paid per unit"
    )
    purchase_date: datetime = Field(
        ..., alias="purchaseDate", description="When the position was opened"
    )

    def to_model(self) -> Holding:
        return Holding(
            id=self.id,
            symbol=self.symbol,
            name=self.name,
            quantity=self.quantity,
            purchase_price=self.purchase_price,
            purchase_date=self.purchase_date,
        )


class HoldingsData(BaseModel):
    """Payload of the holdings endpoint."""

    holdings: list[HoldingSchema] = Field(default_factory=list)

    @field_validator("holdings")
    @classmethod
    def unique_ids(cls, v: list[HoldingSchema]) -> list[HoldingSchema]:
        seen = set()
        for holding in v:
            if holding.id in seen:
                raise ValueError(f"Duplicate holding id: {holding.id}")
            seen.add(holding.id)
        return v

    def to_record(self) -> HoldingsRecord:
        return [h.to_model() for h in self.holdings]


class PriceSchema(BaseModel):
    """Price point for one symbol."""

    current_price: float = Field(..., alias="currentPrice", description="Latest price")
    price_24h_ago: float = Field(
        ..., alias="price24hAgo", description="Price 24 hours earlier"
    )
    last_updated: datetime = Field(
        ..., alias="lastUpdated", description="When the price was sampled"
    )

    def to_model(self) -> PricePoint:
        return PricePoint(
            current_price=self.current_price,
            price_24h_ago=self.price_24h_ago,
            last_updated=self.last_updated,
        )


class PriceData(BaseModel):
    """Payload of the prices endpoint."""

    prices: dict[str, PriceSchema] = Field(default_factory=dict)

    def to_record(self) -> PriceRecord:
        return {symbol: p.to_model() for symbol, p in self.prices.items()}
