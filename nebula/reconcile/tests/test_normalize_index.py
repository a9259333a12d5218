"""
Tests for normalization, match keys and the key index.

Run with: pytest nebula/reconcile/tests/test_normalize_index.py -v
"""

import pytest

from nebula.reconcile.index import build_key_index, merge_key_order
from nebula.reconcile.normalize import (
    KEY_SEPARATOR,
    build_key,
    display_key,
    normalize_value,
    position_key,
)


class TestNormalizeValue:
    def test_none(self):
        assert normalize_value(None) is None

    def test_empty_string_is_absent(self):
        assert normalize_value("") is None

    def test_whitespace_only_is_absent(self):
        assert normalize_value("   \t ") is None

    def test_trims(self):
        assert normalize_value("  INV-001 ") == "INV-001"

    def test_number_to_text(self):
        assert normalize_value(42) == "42"
        assert normalize_value(10.5) == "10.5"

    def test_zero_is_not_absent(self):
        assert normalize_value(0) == "0"

    @pytest.mark.parametrize("value", [None, "", " x ", "x", 7, "  a b  "])
    def test_idempotent(self, value):
        once = normalize_value(value)
        assert normalize_value(once) == once


class TestBuildKey:
    def test_single_column(self):
        assert build_key({"ID": " 1 "}, ["ID"]) == "1"

    def test_composite_uses_separator(self):
        key = build_key({"GSTIN": "27AAA", "INVOICE NUMBER": "INV-9"}, ["GSTIN", "INVOICE NUMBER"])
        assert key == f"27AAA{KEY_SEPARATOR}INV-9"

    def test_missing_column_becomes_empty_part(self):
        assert build_key({"A": "x"}, ["A", "B"]) == f"x{KEY_SEPARATOR}"

    def test_all_absent_is_valid_key(self):
        assert build_key({"ID": None}, ["ID"]) == ""
        assert build_key({}, ["ID"]) == ""

    def test_parts_do_not_collide(self):
        left = build_key({"A": "1 2", "B": "3"}, ["A", "B"])
        right = build_key({"A": "1", "B": "2 3"}, ["A", "B"])
        assert left != right

    def test_same_values_same_key(self):
        assert build_key({"ID": "5 "}, ["ID"]) == build_key({"ID": " 5"}, ["ID"])

    def test_position_key_is_one_based(self):
        assert position_key(0) == "1"
        assert position_key(9) == "10"

    def test_display_key(self):
        assert display_key(f"a{KEY_SEPARATOR}b") == "a | b"


class TestKeyIndex:
    def test_groups_in_row_order(self):
        rows = [
            {"ID": "1", "n": "first"},
            {"ID": "2", "n": "x"},
            {"ID": "1", "n": "second"},
        ]
        index = build_key_index(rows, ["ID"])

        assert index.row_count == 3
        assert index.keys() == ["1", "2"]
        assert [r["n"] for r in index.lookup("1")] == ["first", "second"]

    def test_lookup_missing_key(self):
        index = build_key_index([{"ID": "1"}], ["ID"])
        assert index.lookup("nope") == []

    def test_duplicate_keys(self):
        index = build_key_index([{"ID": "1"}, {"ID": "1"}, {"ID": "2"}], ["ID"])
        assert index.duplicate_keys() == ["1"]

    def test_blank_keys_share_a_bucket(self):
        index = build_key_index([{"ID": None}, {"ID": "  "}, {}], ["ID"])
        assert len(index.lookup("")) == 3

    def test_empty_rows(self):
        index = build_key_index([], ["ID"])
        assert index.row_count == 0
        assert index.keys() == []

    def test_merge_key_order_first_seen(self):
        a = build_key_index([{"ID": "2"}, {"ID": "1"}], ["ID"])
        b = build_key_index([{"ID": "3"}, {"ID": "1"}], ["ID"])
        c = build_key_index([{"ID": "4"}, {"ID": "2"}], ["ID"])
        assert merge_key_order(a, b, c) == ["2", "1", "3", "4"]
