"""
Pytest configuration and fixtures for slotting analysis tests.

Provides a small, fully valid upload: four locations in three bays and four
picks (100 picks in total).
"""

import pytest

from core.data_ingest import LocationRow, PickRow


def _location(code, bay, layout="0.5-0.5"):
    return LocationRow(
        location=code,
        storage_type="Shelf",
        location_length=1.0,
        location_width=0.5,
        location_height=0.4,
        capacity_layout=layout,
        location_category="A",
        bay=bay,
    )


def _pick(article, location, pick_frequency, family="Kitchen", quantity=10):
    return PickRow(
        article=article,
        article_description=f"Description of {article}",
        family=family,
        pick_frequency=pick_frequency,
        location=location,
        quantity=quantity,
        unique_articles=1,
    )


@pytest.fixture
def sample_locations():
    """Four locations; bays follow the first three code segments."""
    return [
        _location("D11-021-11-01", "D11-021-11"),
        _location("D11-021-11-02", "D11-021-11"),
        _location("D11-021-12-01", "D11-021-12"),
        _location("D12-001-01-01", "D12-001-01"),
    ]


@pytest.fixture
def sample_picks():
    """Four picks referencing sample_locations, 100 picks in total."""
    return [
        _pick("ART-1", "D11-021-11-01", 50, quantity=200),
        _pick("ART-2", "D11-021-11-02", 30, quantity=100),
        _pick("ART-3", "D11-021-12-01", 10, family="Bath", quantity=40),
        _pick("ART-4", "D12-001-01-01", 10, family="Bath", quantity=60),
    ]


@pytest.fixture
def make_pick():
    """Factory for pick rows with sensible defaults."""
    return _pick


@pytest.fixture
def make_location():
    """Factory for location rows with sensible defaults."""
    return _location


@pytest.fixture
def concentrated_picks():
    """
    100 single-pick rows across 10 articles: A000 holds 80 picks, the
    other nine share the remaining 20.
    """
    rows = [_pick("A000", "LOC-000", 1) for _ in range(80)]
    spread = [2, 2, 2, 2, 2, 2, 2, 3, 3]
    for i, count in enumerate(spread, start=1):
        rows.extend(_pick(f"A{i:03d}", f"LOC-{i:03d}", 1) for _ in range(count))
    return rows
