"""
Geocoding Gateway - coordinate to place-name resolution.

DESIGN PRINCIPLES:
- Geocoding is cosmetic enrichment; it never blocks or fails a caller
- Providers are tried in a fixed order until one yields a name
- Every failure degrades to "try the next provider", ending in a
  synthetic name built from the coordinates
- Cache hits are the only fast path and never touch the network
"""

from typing import List, Optional, Sequence
import logging

from cityfix.utils.geocoding import is_valid_coordinate, synthetic_location_name
from .base import GeocodingProvider, GeocodingProviderError
from .cache import GeocodeCache

logger = logging.getLogger(__name__)


class GeocodingGateway:
    """
    Resolves (lat, lng) to a displayable place name through an ordered
    provider chain with a quantized-coordinate cache.
    """

    def __init__(
        self,
        providers: Sequence[GeocodingProvider],
        cache: Optional[GeocodeCache] = None,
    ):
        self.providers: List[GeocodingProvider] = list(providers)
        self.cache = cache if cache is not None else GeocodeCache()

    def resolve(self, latitude: float, longitude: float) -> str:
        """
        Resolve a coordinate to a place name.

        Returns:
            A non-empty string. Never raises.
        """
        if not is_valid_coordinate(latitude, longitude):
            return synthetic_location_name(latitude, longitude)

        latitude = float(latitude)
        longitude = float(longitude)

        cached = self.cache.get(latitude, longitude)
        if cached is not None:
            logger.debug(f"Geocode cache hit for ({latitude}, {longitude})")
            return cached

        for provider in self.providers:
            name = self._try_provider(provider, latitude, longitude)
            if name:
                self.cache.set(latitude, longitude, name)
                return name

        # Chain exhausted (or configured without an offline provider)
        logger.warning(f"All geocoding providers failed for ({latitude}, {longitude}); using synthetic name")
        return synthetic_location_name(latitude, longitude)

    def _try_provider(self, provider: GeocodingProvider, latitude: float, longitude: float) -> Optional[str]:
        provider_name = getattr(provider, "name", type(provider).__name__)
        try:
            name = provider.reverse_geocode(latitude, longitude)
        except GeocodingProviderError as e:
            logger.warning(f"Geocoding provider {provider_name} failed: {e}")
            return None
        except Exception as e:
            logger.warning(f"Geocoding provider {provider_name} raised unexpectedly: {e}", exc_info=True)
            return None

        if not isinstance(name, str) or not name.strip():
            logger.info(f"Geocoding provider {provider_name} had no data for ({latitude}, {longitude})")
            return None

        logger.debug(f"Geocoding provider {provider_name} resolved ({latitude}, {longitude}) -> {name}")
        return name.strip()
