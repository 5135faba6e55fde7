import logging
from typing import Optional

from .base import GeocodingProvider, GeocodingProviderError, fetch_json, join_parts

logger = logging.getLogger(__name__)


class GoogleMapsProvider(GeocodingProvider):
    """
    Google Maps reverse-geocoding provider.

    - Optional keyed provider: only joins the chain when GOOGLE_MAPS_API_KEY is set.
    - ZERO_RESULTS is "no data"; quota and auth errors are recoverable failures.
    """

    name = "google"
    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key: str, timeout: float = 15.0):
        self.api_key = api_key
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        data = fetch_json(
            self.name,
            self.BASE_URL,
            params={
                "latlng": f"{latitude},{longitude}",
                "key": self.api_key,
            },
            timeout=self.timeout,
        )

        api_status = data.get("status", "OK")
        if api_status == "ZERO_RESULTS":
            return None
        if api_status != "OK":
            raise GeocodingProviderError(self.name, f"API status {api_status}")

        results = data.get("results") or []
        if not results:
            return None

        first = results[0]
        components = first.get("address_components") or []

        def _get_component(types):
            for c in components:
                if any(t in c.get("types", []) for t in types):
                    return c.get("long_name")
            return None

        name = join_parts(
            _get_component(["route"]),
            _get_component(["sublocality", "neighborhood"]),
            _get_component(["locality", "postal_town"]),
            _get_component(["administrative_area_level_1"]),
        )
        return name or first.get("formatted_address") or None
