"""Crypto portfolio tracker - holdings, live prices and valuation."""

__version__ = "0.1.0"
