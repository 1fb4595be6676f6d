"""Portfolio domain package."""

from finvest_server.portfolio.models import Asset, AssetType, PortfolioSummary
from finvest_server.portfolio.portfolio_service import PortfolioService
from finvest_server.portfolio.store import AssetStore

__all__ = ["Asset", "AssetStore", "AssetType", "PortfolioService", "PortfolioSummary"]
