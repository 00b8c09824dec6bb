"""Route handlers for the API."""

from talent_portfolio.api.routes import health, portfolio

__all__ = [
    "health",
    "portfolio",
]
