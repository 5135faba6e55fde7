"""
Reverse geocoding: provider chain, cache and gateway.
"""

from cityfix.services.geocoding.gateway import GeocodingGateway
from cityfix.services.geocoding.resolver import get_geocoding_gateway

__all__ = ["GeocodingGateway", "get_geocoding_gateway"]
