import logging
from typing import Optional

from .base import GeocodingProvider, fetch_json, join_parts

logger = logging.getLogger(__name__)


class BigDataCloudProvider(GeocodingProvider):
    """
    BigDataCloud client-side reverse geocoding.

    - No API key required; used as the secondary provider.
    - A response with only a country is treated as "no data".
    """

    name = "bigdatacloud"
    BASE_URL = "https://api.bigdatacloud.net/data/reverse-geocode-client"

    def __init__(self, timeout: float = 15.0):
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        data = fetch_json(
            self.name,
            self.BASE_URL,
            params={
                "latitude": latitude,
                "longitude": longitude,
                "localityLanguage": "en",
            },
            timeout=self.timeout,
        )
        return join_parts(
            data.get("locality"),
            data.get("city"),
            data.get("principalSubdivision"),
        )
