"""
Market data provider factory (config-driven).
"""

from __future__ import annotations

import logging
from typing import List, Optional

from portfolio_engine.config import Settings, settings as default_settings
from portfolio_engine.infrastructure.market_data.http_provider import HttpMarketDataProvider
from portfolio_engine.infrastructure.market_data.provider_chain import (
    ChainedMarketDataProvider,
    NamedProvider,
)
from portfolio_engine.infrastructure.market_data.types import MarketDataProvider

logger = logging.getLogger(__name__)


def _build_provider(name: str, config: Settings) -> MarketDataProvider:
    name = (name or "").lower()
    if name == "http":
        return HttpMarketDataProvider(
            base_url=config.QUOTE_API_BASE_URL,
            timeout_seconds=config.QUOTE_TIMEOUT_SECONDS,
        )
    if name == "yfinance":
        from portfolio_engine.infrastructure.market_data.yfinance_provider import YFinanceProvider

        return YFinanceProvider(timeout_seconds=config.QUOTE_TIMEOUT_SECONDS)
    raise ValueError(f"Unknown market data provider: {name}")


def get_market_data_provider(config: Optional[Settings] = None) -> ChainedMarketDataProvider:
    config = config or default_settings
    primary = config.MARKET_DATA_PROVIDER.lower()

    providers: List[NamedProvider] = [NamedProvider(primary, _build_provider(primary, config))]
    for fallback in config.fallback_providers:
        if fallback == primary:
            continue
        try:
            providers.append(NamedProvider(fallback, _build_provider(fallback, config)))
        except ValueError:
            logger.warning("Skipping unknown fallback provider %s", fallback)
            continue

    logger.info("Market data providers: %s", ", ".join(p.name for p in providers))
    return ChainedMarketDataProvider(providers)
