"""Tests for timeline.py - Chronological ordering."""

from datetime import datetime, timezone

import pytest

from iocgraph.timeline import build_time_timeline, parse_timestamp, sort_chronologically
from tests.core.graph_test_helpers import make_record, make_records


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc).timestamp()


class TestParseTimestamp:
    """Tests for parse_timestamp()."""

    @pytest.mark.parametrize(
        "text",
        [
            "2026-02-16 14:30:00",
            "2026-02-16T14:30:00",
            "2026-02-16T14:30:00Z",
            "2026-02-16T16:30:00+02:00",
            "  2026-02-16 14:30:00  ",
        ],
    )
    def test_iso_variants(self, text):
        assert parse_timestamp(text) == utc(2026, 2, 16, 14, 30)

    def test_date_only(self):
        assert parse_timestamp("2026-02-16") == utc(2026, 2, 16)

    @pytest.mark.parametrize("text", [None, "", "   ", "yesterday", "16/02/2026"])
    def test_unparsable(self, text):
        assert parse_timestamp(text) is None

    def test_extra_formats(self):
        formats = ["%d/%m/%Y %H:%M", "%b %d %Y"]

        assert parse_timestamp("16/02/2026 14:30", formats) == utc(2026, 2, 16, 14, 30)
        assert parse_timestamp("Feb 16 2026", formats) == utc(2026, 2, 16)

    def test_iso_wins_over_formats(self):
        assert parse_timestamp("2026-02-16", ["%Y-%d-%m"]) == utc(2026, 2, 16)


class TestSortChronologically:
    """Tests for sort_chronologically()."""

    def test_oldest_first_undated_last(self):
        items = [
            ("late", "2026-02-16 18:00"),
            ("bad", "garbage"),
            ("early", "2026-02-16 08:00"),
            ("none", ""),
        ]
        ordered = sort_chronologically(items, lambda item: item[1])

        assert [name for name, _ in ordered] == ["early", "late", "bad", "none"]

    def test_ties_keep_input_order(self):
        items = [("b", "2026-02-16 08:00"), ("a", "2026-02-16T08:00:00Z"), ("c", "2026-02-16 08:00")]
        ordered = sort_chronologically(items, lambda item: item[1])

        assert [name for name, _ in ordered] == ["b", "a", "c"]

    def test_returns_new_list(self):
        items = [("a", "2026-02-16 09:00"), ("b", "2026-02-16 08:00")]
        ordered = sort_chronologically(items, lambda item: item[1])

        assert [name for name, _ in items] == ["a", "b"]
        assert [name for name, _ in ordered] == ["b", "a"]


class TestBuildTimeTimeline:
    """Tests for build_time_timeline()."""

    def test_splits_dated_and_undated(self):
        records = make_records(
            "a b c d",
            times={"a": "2026-02-16 10:00", "b": "soon", "c": "2026-02-16 09:00"},
        )
        timeline = build_time_timeline(records)

        assert [r.id for r in timeline.entries] == ["c", "a"]
        assert [r.id for r in timeline.undated] == ["b", "d"]
        assert timeline.start == utc(2026, 2, 16, 9)
        assert timeline.end == utc(2026, 2, 16, 10)
        assert timeline.span == 3600

    def test_empty(self):
        timeline = build_time_timeline([])

        assert timeline.entries == []
        assert timeline.start is None
        assert timeline.span == 0.0

    def test_single_entry_has_zero_span(self):
        timeline = build_time_timeline([make_record("a", time="2026-02-16 10:00")])
        assert timeline.span == 0.0

    def test_contract(self):
        with pytest.raises(TypeError):
            build_time_timeline(None)
