"""
Portfolio session wiring.

Builds the market data provider, the holdings store and (optionally) the
auto refresh scheduler from Settings, and tears them down in order.

    async with PortfolioSession() as session:
        await session.store.add_holding("AAPL", 10, 150)
        print(session.store.summary.total_value)
"""

from typing import Optional

from portfolio_engine.config import Settings, settings as default_settings
from portfolio_engine.core.logging import get_logger, setup_logging
from portfolio_engine.infrastructure.market_data.provider_factory import get_market_data_provider
from portfolio_engine.infrastructure.market_data.types import MarketDataProvider
from portfolio_engine.scheduler.refresh_scheduler import RefreshScheduler
from portfolio_engine.services.holdings_store import HoldingsStore

logger = get_logger(__name__)


class PortfolioSession:
    def __init__(
        self,
        config: Optional[Settings] = None,
        provider: Optional[MarketDataProvider] = None,
        configure_logging: bool = True,
    ):
        self.config = config or default_settings
        self._provider = provider
        self._configure_logging = configure_logging
        self.store: Optional[HoldingsStore] = None
        self.scheduler: Optional[RefreshScheduler] = None

    async def start(self) -> HoldingsStore:
        if self._configure_logging:
            setup_logging(self.config.LOG_LEVEL)

        if self._provider is None:
            self._provider = get_market_data_provider(self.config)
        self.store = HoldingsStore.from_settings(self._provider, self.config)

        if self.config.AUTO_REFRESH_ENABLED:
            self.scheduler = RefreshScheduler(self.store)
            self.scheduler.start()

        logger.info(
            "✅ Portfolio session started | env=%s provider=%s auto_refresh=%s",
            self.config.APP_ENV,
            self.config.MARKET_DATA_PROVIDER,
            self.config.AUTO_REFRESH_ENABLED,
        )
        return self.store

    async def close(self) -> None:
        if self.scheduler is not None:
            await self.scheduler.stop()
            self.scheduler = None
        if self.store is not None:
            await self.store.aclose()
        if self._provider is not None:
            await self._provider.aclose()
        logger.info("🛑 Portfolio session closed")

    async def __aenter__(self) -> "PortfolioSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
