"""Dependency-injection container.

Wires the engine's services together so editors and tools receive the
currency registry, resolver and persistence gateway from one place and tests
can override any of them.
"""

from dependency_injector import containers, providers

from pricing_engine.config import config as app_config
from pricing_engine.services.currency import CurrencyService
from pricing_engine.services.gateway import InMemoryOverrideGateway
from pricing_engine.services.resolver import OverrideResolver


class Container(containers.DeclarativeContainer):
    """DI container for the engine."""

    config = providers.Object(app_config)

    currency_service = providers.Singleton(CurrencyService, config=config)
    resolver = providers.Factory(
        OverrideResolver, minor_units=config.provided.engine.default_minor_units
    )
    gateway = providers.Singleton(InMemoryOverrideGateway)
