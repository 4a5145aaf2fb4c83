import random

import pytest

from app.services.trips.seed_service import (
    DURATION_RANGES,
    PRICE_RANGES,
    build_overpass_query,
    describe,
    price_and_duration,
)


def test_query_covers_all_element_kinds():
    query = build_overpass_query("1,2,3,4")
    assert query.startswith("[out:json]")
    for element in ("node", "way", "relation"):
        assert f'{element}["tourism"~' in query
    assert "(1,2,3,4)" in query
    assert query.endswith("out center meta;")


@pytest.mark.parametrize("tourism_type", sorted(PRICE_RANGES))
def test_price_and_duration_stay_in_range(tourism_type):
    rng = random.Random(7)
    low, high = PRICE_RANGES[tourism_type]
    min_minutes, max_minutes = DURATION_RANGES[tourism_type]
    for _ in range(20):
        price, duration = price_and_duration(tourism_type, rng)
        assert low <= price <= high
        assert max(1, min_minutes) <= duration <= max_minutes


def test_unknown_type_uses_attraction_ranges():
    price, duration = price_and_duration("lighthouse", random.Random(1))
    assert 0 <= price <= PRICE_RANGES["attraction"][1]
    assert DURATION_RANGES["attraction"][0] <= duration <= DURATION_RANGES["attraction"][1]


def test_describe_mentions_known_tags():
    text = describe({"addr:full": "Jl. Medan Merdeka", "phone": "+62 21 000"})
    assert "Located at Jl. Medan Merdeka." in text
    assert "Contact: +62 21 000." in text
    assert "website" not in text
