from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import logging

import requests

logger = logging.getLogger(__name__)


class GeocodingProviderError(Exception):
    """Recoverable provider failure: network error, bad status, malformed body, rate limit."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class GeocodingProvider(ABC):
    """
    Abstract reverse-geocoding provider.

    Contract:
    - Input: latitude, longitude (finite floats)
    - Output: a displayable place name, or None when the provider has no
      usable data for the point
    - Recoverable failures raise GeocodingProviderError; the gateway moves
      on to the next provider
    """

    name = "base"

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        raise NotImplementedError


def fetch_json(
    provider: str,
    url: str,
    params: Dict[str, Any],
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    GET a JSON document for a provider.

    Raises:
        GeocodingProviderError: on transport errors, timeouts, non-200
            responses (429 included) and bodies that are not a JSON object
    """
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise GeocodingProviderError(provider, f"request failed: {e}") from e

    if resp.status_code == 429:
        raise GeocodingProviderError(provider, "rate limited (429)")
    if resp.status_code != 200:
        raise GeocodingProviderError(provider, f"unexpected status {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as e:
        raise GeocodingProviderError(provider, "malformed JSON response") from e

    if not isinstance(data, dict):
        raise GeocodingProviderError(provider, "response is not a JSON object")
    return data


def join_parts(*parts: Optional[str]) -> Optional[str]:
    """Join non-empty, de-duplicated name parts with ", "."""
    seen = []
    for part in parts:
        if isinstance(part, str) and part.strip() and part.strip() not in seen:
            seen.append(part.strip())
    return ", ".join(seen) if seen else None
