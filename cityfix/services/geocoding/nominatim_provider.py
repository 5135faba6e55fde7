import logging
from typing import Optional

from .base import GeocodingProvider, fetch_json, join_parts
from .rate_limit import MinIntervalRateLimiter

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    """
    OpenStreetMap Nominatim reverse-geocoding provider.

    - No API key required.
    - Usage policy allows one request per second; the limiter waits
      BEFORE each call.
    - Includes a User-Agent header as required by Nominatim usage policy.
    """

    name = "nominatim"
    BASE_URL = "https://nominatim.openstreetmap.org/reverse"

    def __init__(
        self,
        user_agent: str = "cityfix-insights/1.0",
        timeout: float = 15.0,
        rate_limiter: Optional[MinIntervalRateLimiter] = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.rate_limiter = rate_limiter or MinIntervalRateLimiter(1.0)

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        waited = self.rate_limiter.acquire()
        if waited > 0:
            logger.debug(f"Nominatim rate limit: waited {waited:.2f}s")

        data = fetch_json(
            self.name,
            self.BASE_URL,
            params={
                "lat": latitude,
                "lon": longitude,
                "format": "json",
                "zoom": 18,
                "addressdetails": 1,
            },
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )

        address = data.get("address") or {}
        if not isinstance(address, dict):
            address = {}

        road = address.get("road")
        if road and address.get("house_number"):
            road = f"{address['house_number']} {road}"

        name = join_parts(
            road,
            address.get("neighbourhood") or address.get("suburb") or address.get("quarter"),
            address.get("city") or address.get("town") or address.get("village"),
            address.get("state"),
        )
        return name or data.get("display_name") or None
