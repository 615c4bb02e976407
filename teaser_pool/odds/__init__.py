"""Odds feed client."""

from .client import OddsAPIClient

__all__ = ["OddsAPIClient"]
