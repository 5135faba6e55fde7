import logging
from typing import List, Optional

from cityfix.core.settings import Settings, settings
from .base import GeocodingProvider
from .bigdatacloud_provider import BigDataCloudProvider
from .cache import GeocodeCache
from .gateway import GeocodingGateway
from .google_provider import GoogleMapsProvider
from .nominatim_provider import NominatimProvider
from .offline_provider import OfflineRegionProvider
from .rate_limit import MinIntervalRateLimiter

logger = logging.getLogger(__name__)

_gateway_instance: Optional[GeocodingGateway] = None


def build_provider_chain(config: Settings) -> List[GeocodingProvider]:
    """
    Build the provider chain from settings.

    Order:
    1. Nominatim (free tier, 1 req/s)
    2. BigDataCloud (no key) unless BIGDATACLOUD_ENABLED=false
    3. Google Maps, only when GOOGLE_MAPS_API_KEY is set
    4. Offline region heuristic (always succeeds)
    """
    timeout = config.GEOCODING_TIMEOUT_SECONDS
    providers: List[GeocodingProvider] = [
        NominatimProvider(
            user_agent=config.NOMINATIM_USER_AGENT,
            timeout=timeout,
            rate_limiter=MinIntervalRateLimiter(config.NOMINATIM_MIN_INTERVAL_SECONDS),
        )
    ]

    if config.BIGDATACLOUD_ENABLED:
        providers.append(BigDataCloudProvider(timeout=timeout))

    if config.GOOGLE_MAPS_API_KEY:
        providers.append(GoogleMapsProvider(api_key=config.GOOGLE_MAPS_API_KEY, timeout=timeout))

    providers.append(OfflineRegionProvider())

    logger.info(f"Geocoding provider chain: {[p.name for p in providers]}")
    return providers


def get_geocoding_gateway() -> GeocodingGateway:
    """Get or create the process-wide GeocodingGateway."""
    global _gateway_instance
    if _gateway_instance is None:
        _gateway_instance = GeocodingGateway(
            providers=build_provider_chain(settings),
            cache=GeocodeCache(precision=settings.GEOCODE_CACHE_PRECISION),
        )
    return _gateway_instance
