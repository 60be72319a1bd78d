"""
Tests for the match module: scoring policy and in-memory ranking.
"""

import json
import math

import pytest

from cardscan.core.types import CatalogEntry
from cardscan.match import InMemoryCatalogIndex, bounded_edit_distance, name_score, score_entry
from cardscan.match.index import entry_from_dict
from cardscan.utils.error_handler import CatalogLookupError


class TestBoundedEditDistance:
    """Test the capped Levenshtein distance."""

    def test_plain_distance(self):
        assert bounded_edit_distance("kitten", "sitting") == 3
        assert bounded_edit_distance("bolt", "bolt") == 0

    def test_long_inputs_are_infinite(self):
        assert bounded_edit_distance("a" * 41, "a") == math.inf
        assert bounded_edit_distance("a", "b" * 41) == math.inf
        assert bounded_edit_distance("a" * 40, "a" * 40) == 0

    def test_cutoff_caps_result(self):
        assert bounded_edit_distance("abcdefgh", "zzzzzzzz", cutoff=4) == 5


class TestNameScore:
    """Test the name component of the scoring policy."""

    def test_exact_prefix_substring(self):
        assert name_score("lightning bolt", "Lightning Bolt") == 60
        assert name_score("lightning", "Lightning Bolt") == 40
        assert name_score("bolt", "Lightning Bolt") == 25

    def test_fuzzy_tiers(self):
        assert name_score("lightnin bolt", "Lightning Bolt") == 25
        assert name_score("lightnng bot", "Lightning Bolt") == 15
        assert name_score("lihtnng bot", "Lightning Bolt") == 10
        assert name_score("shock", "Lightning Bolt") == 0

    def test_overlong_query_scores_nothing_fuzzy(self):
        query = "lightning bolt " * 3
        assert name_score(query.strip(), "Lightning Bolt") == 0


class TestScoreEntry:
    """Test the additive per-entry score."""

    def test_perfect_match_is_100(self):
        entry = CatalogEntry(entry_id="lea-161", name="Lightning Bolt", set_code="lea",
                             collector_number="161")
        assert score_entry(entry, "lightning bolt", "161", "LEA") == 100

    def test_fields_are_independent(self):
        entry = CatalogEntry(entry_id="lea-161", name="Lightning Bolt", set_code="LEA",
                             collector_number="161a")
        assert score_entry(entry, collector_number="161A") == 25
        assert score_entry(entry, set_code="LEA") == 15
        assert score_entry(entry, collector_number="162") == 0
        assert score_entry(entry) == 0


class TestInMemoryCatalogIndex:
    """Test ranking over an in-memory catalog."""

    def test_exact_name_outranks_fuzzy_neighbour(self, catalog_index):
        results = catalog_index.search(name="lightning bolt")
        assert results[0].name == "Lightning Bolt"
        assert results[0].score == 60
        strikes = [c for c in results if c.name == "Lightning Strike"]
        assert all(c.score < 60 for c in strikes)

    def test_full_match_scores_maximum(self, catalog_index):
        results = catalog_index.search(name="Lightning Bolt", collector_number="161", set_code="lea")
        assert results[0].entry_id == "lea-161"
        assert results[0].score == 100
        assert all(c.score < 100 for c in results[1:])

    def test_descending_and_truncated(self, catalog_index):
        results = catalog_index.search(name="lightning", limit=2)
        assert len(results) == 2
        assert [c.score for c in results] == sorted((c.score for c in results), reverse=True)

    def test_default_limit_is_three(self, catalog_index):
        results = catalog_index.search(set_code="LEA", name="l")
        assert len(results) <= 3

    def test_zero_scores_excluded(self, catalog_index):
        assert catalog_index.search(name="Qqqqqqqqqqq") == []
        assert catalog_index.search() == []

    def test_ties_keep_input_order(self):
        a = CatalogEntry(entry_id="a", name="Shock", set_code="M21", collector_number="159")
        b = CatalogEntry(entry_id="b", name="Shock", set_code="M20", collector_number="160")

        forward = InMemoryCatalogIndex([a, b]).search(name="shock")
        backward = InMemoryCatalogIndex([b, a]).search(name="shock")

        assert [c.entry_id for c in forward] == ["a", "b"]
        assert [c.entry_id for c in backward] == ["b", "a"]

    def test_query_fields_are_normalized(self, catalog_index):
        results = catalog_index.search(name="  Lightning   Bolt ", collector_number="I46", set_code="m-10")
        assert results[0].entry_id == "m10-146"
        assert results[0].score == 100

    def test_empty_name_is_not_a_wildcard(self, catalog_index):
        """A name that normalizes to nothing must not prefix-match every entry."""
        assert catalog_index.search(name="é") == []

    def test_from_json(self, tmp_path, catalog_records):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"data": catalog_records}))

        index = InMemoryCatalogIndex.from_json(path)

        assert len(index) == 3
        results = index.search(name="shock", set_code="M21")
        assert results[0].entry.image_uri == "https://img.example/m21-159.jpg"
        assert results[0].score == 75

    def test_from_json_missing_file(self, tmp_path):
        with pytest.raises(CatalogLookupError):
            InMemoryCatalogIndex.from_json(tmp_path / "missing.json")


class TestEntryFromDict:
    """Test catalog record parsing."""

    def test_snake_case_record(self):
        entry = entry_from_dict({"entry_id": "x1", "name": "Shock", "set_code": "M21",
                                 "collector_number": "159", "card_id": "c1"})
        assert entry.entry_id == "x1"
        assert entry.card_id == "c1"

    def test_missing_name(self):
        with pytest.raises(CatalogLookupError):
            entry_from_dict({"variantId": "x1"})
