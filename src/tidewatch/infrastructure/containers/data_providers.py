"""Data provider container configuration."""

from dependency_injector import providers

from tidewatch.infrastructure.data_providers import (
    CoinGeckoSpotPriceProvider,
    FredMacroeconomicProvider,
)


def configure_data_providers(settings: providers.Provider) -> dict[str, providers.Provider]:
    """Configure upstream data providers from the settings provider.

    Args:
        settings: Provider yielding a ``Settings`` instance

    Returns:
        Dictionary of data provider providers
    """
    return {
        "macro_data_provider": providers.Singleton(
            FredMacroeconomicProvider,
            api_key=settings.provided.fred_api_key,
            base_url=settings.provided.fred_base_url,
            timeout_seconds=settings.provided.http_timeout_seconds,
        ),
        "spot_price_provider": providers.Singleton(
            CoinGeckoSpotPriceProvider,
            coin_id=settings.provided.coingecko_coin_id,
            base_url=settings.provided.coingecko_base_url,
            timeout_seconds=settings.provided.http_timeout_seconds,
        ),
    }
