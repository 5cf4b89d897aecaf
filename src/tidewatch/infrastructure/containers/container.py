"""Dependency injection container.

One container is created per client session. It holds the session's settings,
acquisition config, cache and providers, and the coordinator built from them.
"""

from dependency_injector import containers, providers

from tidewatch.application.acquisition import AcquisitionCoordinator
from tidewatch.infrastructure.cache import LocalFileCacheBackend, SeriesCacheStore
from tidewatch.infrastructure.config import Settings, get_settings
from tidewatch.infrastructure.containers.data_providers import configure_data_providers


class Container(containers.DeclarativeContainer):
    """Dependency injection container for Tidewatch.

    Override any provider for tests or library use:
        container = Container()
        container.settings.override(providers.Object(Settings(fred_api_key="...")))
        container.cache_backend.override(providers.Singleton(InMemoryCacheBackend))
    """

    settings = providers.Singleton(get_settings)

    acquisition_config = providers.Singleton(Settings.to_acquisition_config, settings)

    # Storage
    cache_backend = providers.Singleton(
        LocalFileCacheBackend,
        cache_dir=settings.provided.cache_dir,
    )
    cache_store = providers.Singleton(SeriesCacheStore, backend=cache_backend)

    # Data providers
    _data_providers_config = configure_data_providers(settings)
    macro_data_provider = _data_providers_config["macro_data_provider"]
    spot_price_provider = _data_providers_config["spot_price_provider"]

    acquisition_coordinator = providers.Singleton(
        AcquisitionCoordinator,
        config=acquisition_config,
        macro_data_provider=macro_data_provider,
        spot_price_provider=spot_price_provider,
        cache_store=cache_store,
    )


def get_container(settings: Settings | None = None) -> Container:
    """Create a container for one session.

    Args:
        settings: Optional settings. If None, settings are loaded from the
                  environment (``TIDEWATCH_*`` variables and ``.env``).

    Returns:
        Container instance
    """
    container = Container()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    return container
