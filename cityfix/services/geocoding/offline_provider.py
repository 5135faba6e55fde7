from typing import Optional

from cityfix.utils.geocoding import synthetic_location_name
from .base import GeocodingProvider


class OfflineRegionProvider(GeocodingProvider):
    """
    Last link of the chain: names the point from a coarse region table
    plus the raw coordinates. No network, never returns None.
    """

    name = "offline"

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        return synthetic_location_name(latitude, longitude)
