"""HTTP API layer -- FastAPI app exposing candles, prices and collector status."""

from pricefeed.api.app import create_app

__all__ = ["create_app"]
