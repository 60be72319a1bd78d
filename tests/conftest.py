"""Pytest configuration and shared fixtures for card scanner tests."""

from datetime import datetime, timedelta, timezone

import pytest

from cardscan.core.types import CatalogEntry, IdentificationResult, NormalizedReading, ScanCandidate
from cardscan.match.index import InMemoryCatalogIndex

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def ts(seconds: float) -> datetime:
    """Timestamp a number of seconds after a fixed origin."""
    return T0 + timedelta(seconds=seconds)


@pytest.fixture(scope="function")
def catalog_entries():
    """Small catalog with two printings sharing a name."""
    return [
        CatalogEntry(entry_id="lea-161", name="Lightning Bolt", set_code="LEA", collector_number="161"),
        CatalogEntry(entry_id="m10-146", name="Lightning Bolt", set_code="M10", collector_number="146"),
        CatalogEntry(entry_id="xln-149", name="Lightning Strike", set_code="XLN", collector_number="149"),
        CatalogEntry(entry_id="m21-159", name="Shock", set_code="M21", collector_number="159"),
        CatalogEntry(entry_id="lea-232", name="Black Lotus", set_code="LEA", collector_number="232"),
    ]


@pytest.fixture(scope="function")
def catalog_index(catalog_entries):
    return InMemoryCatalogIndex(catalog_entries)


@pytest.fixture(scope="function")
def catalog_records():
    """Catalog records in the camelCase wire format."""
    return [
        {"variantId": "lea-161", "name": "Lightning Bolt", "setId": "lea", "collectorNumber": "161"},
        {"variantId": "m10-146", "name": "Lightning Bolt", "setId": "m10", "collectorNumber": "146"},
        {"variantId": "m21-159", "name": "Shock", "setId": "m21", "collectorNumber": "159",
         "imageUri": "https://img.example/m21-159.jpg"},
    ]


def make_result(name: str, *scores: int) -> IdentificationResult:
    """IdentificationResult whose candidates carry the given scores."""
    candidates = tuple(
        ScanCandidate(
            entry=CatalogEntry(entry_id=f"{name.lower()}-{i}", name=name, set_code="SET",
                               collector_number=str(i)),
            score=score,
        )
        for i, score in enumerate(scores)
    )
    return IdentificationResult(
        normalized=NormalizedReading(name=name, confidence=50),
        candidates=candidates,
        auto_confirmed=False,
    )


# Configure pytest options
def pytest_configure(config):
    """Configure pytest with custom options."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        if "integration" in item.name.lower() or "cli" in item.nodeid.lower():
            item.add_marker(pytest.mark.integration)

        if any(slow_indicator in item.name.lower() for slow_indicator in ['property', 'random']):
            item.add_marker(pytest.mark.slow)

        if not item.get_closest_marker('integration') and not item.get_closest_marker('slow'):
            item.add_marker(pytest.mark.unit)
