"""
Coordinate utilities: quantization, cache keys and the offline
coordinate-bucket place name used when no geocoding provider answers.
"""

import math
from typing import Optional, Tuple


# Coarse region boxes (south, north, west, east), checked in order.
# Tuned for the Indian deployment; anything outside falls back to a
# hemisphere label.
REGION_BOXES = [
    ("Tamil Nadu", 8.0, 13.6, 76.9, 80.4),
    ("Kerala", 8.2, 12.8, 74.8, 77.4),
    ("Karnataka", 11.5, 18.5, 74.0, 78.6),
    ("Andhra Pradesh & Telangana", 12.6, 19.9, 76.7, 84.8),
    ("Maharashtra", 15.6, 22.1, 72.6, 80.9),
    ("Gujarat", 20.1, 24.7, 68.1, 74.5),
    ("Central India", 21.0, 26.9, 74.0, 84.4),
    ("East India", 19.0, 27.5, 84.4, 89.9),
    ("North India", 26.9, 32.5, 73.8, 84.0),
    ("Northeast India", 22.0, 29.5, 89.7, 97.4),
    ("Himalayan Region", 32.5, 37.1, 72.5, 80.3),
]


def round_half_up(value: float, digits: int) -> float:
    """
    Round like JavaScript's Math.round (ties toward +infinity).

    Python's round() uses banker's rounding, which would split points
    sitting exactly on a bucket edge differently from stored client keys.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def is_finite_coordinate(lat: Optional[float], lng: Optional[float]) -> bool:
    if lat is None or lng is None:
        return False
    try:
        return math.isfinite(float(lat)) and math.isfinite(float(lng))
    except (TypeError, ValueError):
        return False


def is_valid_coordinate(lat: Optional[float], lng: Optional[float]) -> bool:
    """Finite and inside [-90, 90] x [-180, 180]."""
    if not is_finite_coordinate(lat, lng):
        return False
    return -90.0 <= float(lat) <= 90.0 and -180.0 <= float(lng) <= 180.0


def quantize(lat: float, lng: float, digits: int) -> Tuple[float, float]:
    """Snap a coordinate onto a grid of `digits` decimal places."""
    return round_half_up(lat, digits), round_half_up(lng, digits)


def coordinate_key(lat: float, lng: float, digits: int) -> str:
    """
    Stable string key for a quantized coordinate.

    Example: coordinate_key(10.84999, 78.69001, 4) -> "10.8500,78.6900"
    """
    q_lat, q_lng = quantize(lat, lng, digits)
    # +0.0 folds -0.0 into 0.0 so both spellings share a key
    return f"{q_lat + 0.0:.{digits}f},{q_lng + 0.0:.{digits}f}"


def region_label(lat: float, lng: float) -> str:
    for name, south, north, west, east in REGION_BOXES:
        if south <= lat <= north and west <= lng <= east:
            return name
    ns = "Northern" if lat >= 0 else "Southern"
    ew = "Eastern" if lng >= 0 else "Western"
    return f"{ns}-{ew} Hemisphere"


def synthetic_location_name(lat: float, lng: float) -> str:
    """
    Offline place name built from the raw coordinates.

    Never fails for finite input, e.g. "Tamil Nadu (10.8500, 78.6900)".
    """
    if not is_valid_coordinate(lat, lng):
        return "Unknown location"
    return f"{region_label(lat, lng)} ({lat:.4f}, {lng:.4f})"
