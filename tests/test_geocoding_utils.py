"""Tests for coordinate utilities, the geocode cache and the rate limiter."""

import math

from cityfix.services.geocoding.cache import GeocodeCache
from cityfix.services.geocoding.rate_limit import MinIntervalRateLimiter
from cityfix.utils.geocoding import (
    coordinate_key,
    is_valid_coordinate,
    quantize,
    round_half_up,
    synthetic_location_name,
)


def test_round_half_up_rounds_ties_upward():
    assert round_half_up(0.25, 1) == 0.3
    assert round_half_up(-0.25, 1) == -0.2
    assert round_half_up(10.84, 1) == 10.8


def test_coordinate_key_is_stable_within_precision():
    assert coordinate_key(10.84999, 78.69001, 4) == "10.8500,78.6900"
    assert coordinate_key(10.85001, 78.68999, 4) == "10.8500,78.6900"
    assert coordinate_key(-0.00001, 0.0, 4) == "0.0000,0.0000"


def test_quantize_grid():
    assert quantize(10.81, 78.71, 1) == (10.8, 78.7)


def test_synthetic_name_uses_region_and_coordinates():
    assert synthetic_location_name(10.85, 78.69) == "Tamil Nadu (10.8500, 78.6900)"
    assert synthetic_location_name(9.97, 76.28).startswith("Kerala")
    assert synthetic_location_name(48.85, 2.35) == "Northern-Eastern Hemisphere (48.8500, 2.3500)"


def test_synthetic_name_never_fails():
    assert synthetic_location_name(math.nan, 78.0) == "Unknown location"
    assert synthetic_location_name(None, None) == "Unknown location"
    assert synthetic_location_name(1e305, 1.0) == "Unknown location"


def test_valid_coordinate_requires_globe_range():
    assert is_valid_coordinate(90, -180)
    assert is_valid_coordinate("10.8", "78.7")
    assert not is_valid_coordinate(90.5, 78.7)
    assert not is_valid_coordinate(10.8, 180.01)
    assert not is_valid_coordinate(1e308, 1.0)
    assert not is_valid_coordinate(math.inf, 1.0)


def test_cache_shares_entries_across_quantized_neighbours():
    cache = GeocodeCache(precision=4)
    cache.set(10.85001, 78.69001, "Srirangam, Tiruchirappalli")

    assert cache.get(10.85004, 78.68996) == "Srirangam, Tiruchirappalli"
    assert cache.get(10.8506, 78.6900) is None
    assert len(cache) == 1

    cache.delete(10.85, 78.69)
    assert len(cache) == 0


def test_rate_limiter_spaces_calls_one_interval_apart():
    now = [100.0]
    slept = []

    limiter = MinIntervalRateLimiter(1.0, clock=lambda: now[0], sleep=slept.append)

    assert limiter.acquire() == 0
    assert limiter.acquire() == 1.0
    assert limiter.acquire() == 2.0
    assert slept == [1.0, 2.0]


def test_rate_limiter_does_not_wait_after_interval_elapsed():
    now = [100.0]
    slept = []
    limiter = MinIntervalRateLimiter(1.0, clock=lambda: now[0], sleep=slept.append)

    limiter.acquire()
    now[0] = 105.0
    assert limiter.acquire() == 0
    assert slept == []
