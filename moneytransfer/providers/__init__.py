"""Provider factory and exports."""

from moneytransfer.utils.errors import ConfigurationError

from .base import ConversionProvider
from .fixture import FixtureProvider
from .http import HttpConversionProvider


def get_provider(provider_name: str, **options) -> ConversionProvider:
    """Get provider by canonical name.

    Canonical names:
    - "fixture" (options: rates, delay_seconds)
    - "http" (options: endpoint, timeout)
    """
    if provider_name == FixtureProvider.NAME:
        return FixtureProvider(**options)
    if provider_name == HttpConversionProvider.NAME:
        return HttpConversionProvider(**options)
    raise ConfigurationError(f"Unknown provider: {provider_name}")


__all__ = [
    "ConversionProvider",
    "FixtureProvider",
    "HttpConversionProvider",
    "get_provider",
]
