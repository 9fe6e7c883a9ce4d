"""
Tests for ats_grid.core.filtering — filter state, per-kind predicates and
the quick filter.
"""

from datetime import date, datetime, timezone

import pytest

from ats_grid.core.columns import Column
from ats_grid.core.filtering import (
    FilterEngine,
    FilterState,
    active_filters,
    describe_filter_value,
    filter_options,
)
from ats_grid.utils.constants import FieldType, FilterKind


@pytest.fixture
def engine():
    return FilterEngine()


def ids(rows):
    return [row["id"] for row in rows]


# ── FilterState ─────────────────────────────────────────────────────────────


class TestFilterState:
    def test_with_filter_does_not_mutate(self):
        state = FilterState()
        new_state = state.with_filter("name", "ada")
        assert state.column_filters == {}
        assert new_state.column_filters == {"name": "ada"}

    @pytest.mark.parametrize("blank", [None, "", "   ", [], {}])
    def test_blank_value_removes_filter(self, blank):
        state = FilterState().with_filter("name", "ada").with_filter("name", blank)
        assert "name" not in state.column_filters

    def test_is_empty(self):
        assert FilterState().is_empty
        assert FilterState(quick_filter="  ").is_empty
        assert not FilterState(quick_filter="x").is_empty

    def test_without_missing_filter_is_same_state(self):
        state = FilterState()
        assert state.without_filter("name") is state


# ── Column filters ──────────────────────────────────────────────────────────


class TestTextFilter:
    def test_case_insensitive_substring(self, engine, columns, rows):
        result = engine.apply(rows, FilterState({"name": "candidate 000"}), columns)
        assert ids(result) == list(range(10))

    def test_no_match(self, engine, columns, rows):
        assert engine.apply(rows, FilterState({"name": "nobody"}), columns) == []

    def test_none_cell_fails(self, engine, columns):
        rows = [{"id": 1, "name": None}, {"id": 2, "name": "Ada"}]
        assert ids(engine.apply(rows, FilterState({"name": "a"}), columns)) == [2]


class TestSelectFilters:
    def test_select_exact_match(self, engine, columns, rows):
        result = engine.apply(rows, FilterState({"status": "hired"}), columns)
        assert ids(result) == [2, 5, 8]

    def test_multi_select_any_of(self, engine):
        columns = [Column(id="tags", field_type=FieldType.MULTI_SELECT)]
        rows = [
            {"id": 1, "tags": ["solar", "wind"]},
            {"id": 2, "tags": ["hydro"]},
            {"id": 3, "tags": "wind"},
        ]
        result = engine.apply(rows, FilterState({"tags": ["wind", "geo"]}), columns)
        assert ids(result) == [1, 3]


class TestNumberFilter:
    def test_range(self, engine, columns, rows):
        # scores: 0, 7, 14, 21, 28, 35, 42, 49, 56, 63
        result = engine.apply(rows, FilterState({"score": {"min": 20, "max": 49}}), columns)
        assert ids(result) == [3, 4, 5, 6, 7]

    def test_open_ended(self, engine, columns, rows):
        result = engine.apply(rows, FilterState({"score": {"min": 56}}), columns)
        assert ids(result) == [8, 9]

    def test_bare_number_is_equality(self, engine, columns, rows):
        result = engine.apply(rows, FilterState({"score": 14}), columns)
        assert ids(result) == [2]

    def test_pair_list(self, engine, columns, rows):
        result = engine.apply(rows, FilterState({"score": [0, 7]}), columns)
        assert ids(result) == [0, 1]

    def test_invalid_value_is_no_constraint(self, engine, columns, rows):
        result = engine.apply(rows, FilterState({"score": "lots"}), columns)
        assert len(result) == len(rows)


class TestDateFilters:
    @pytest.fixture
    def date_rows(self):
        return [
            {"id": 1, "applied_at": datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)},
            {"id": 2, "applied_at": datetime(2024, 1, 2, 23, 59, tzinfo=timezone.utc)},
            {"id": 3, "applied_at": "2024-01-03T08:00:00Z"},
            {"id": 4, "applied_at": None},
        ]

    def test_range_end_date_includes_whole_day(self, engine, columns, date_rows):
        state = FilterState({"applied_at": {"start": date(2024, 1, 1), "end": date(2024, 1, 2)}})
        assert ids(engine.apply(date_rows, state, columns)) == [1, 2]

    def test_iso_strings_accepted(self, engine, columns, date_rows):
        state = FilterState({"applied_at": {"start": "2024-01-02"}})
        assert ids(engine.apply(date_rows, state, columns)) == [2, 3]

    def test_single_day_filter(self, engine, date_rows):
        columns = [Column(id="applied_at", field_type=FieldType.DATE, filter_kind=FilterKind.DATE)]
        state = FilterState({"applied_at": "2024-01-03"})
        assert ids(engine.apply(date_rows, state, columns)) == [3]

    def test_unparseable_is_no_constraint(self, engine, columns, date_rows):
        state = FilterState({"applied_at": {"start": "someday"}})
        assert len(engine.apply(date_rows, state, columns)) == 4


# ── Quick filter ────────────────────────────────────────────────────────────


class TestQuickFilter:
    def test_searches_filterable_columns_only(self, engine, make_columns, rows):
        columns = make_columns(filterable={"name"})
        assert engine.apply(rows, FilterState(quick_filter="hired"), columns) == []

    def test_any_filterable_column_matches(self, engine, columns, rows):
        result = engine.apply(rows, FilterState(quick_filter="HIRED"), columns)
        assert ids(result) == [2, 5, 8]

    def test_combined_with_column_filters(self, engine, columns, rows):
        state = FilterState({"score": {"min": 30}}, quick_filter="hired")
        assert ids(engine.apply(rows, state, columns)) == [5, 8]


# ── Error recovery ──────────────────────────────────────────────────────────


class TestFailingAccessors:
    @pytest.fixture
    def fragile_columns(self):
        return [
            Column(id="name"),
            Column(id="city", accessor=lambda row: row["address"]["city"]),
        ]

    def test_failing_row_excluded_from_that_filter(self, engine, fragile_columns):
        rows = [{"id": 1, "name": "a", "address": {"city": "Oslo"}}, {"id": 2, "name": "b"}]
        result = engine.apply(rows, FilterState({"city": "os"}), fragile_columns)
        assert ids(result) == [1]

    def test_failing_cell_does_not_abort_quick_filter(self, engine, fragile_columns):
        rows = [{"id": 1, "name": "oslo fan"}, {"id": 2, "name": "b", "address": {"city": "Oslo"}}]
        result = engine.apply(rows, FilterState(quick_filter="oslo"), fragile_columns)
        assert ids(result) == [1, 2]

    def test_unknown_column_ignored(self, engine, columns, rows):
        result = engine.apply(rows, FilterState({"ghost": "x"}), columns)
        assert len(result) == len(rows)


# ── Properties ──────────────────────────────────────────────────────────────


class TestFilterProperties:
    @pytest.mark.parametrize(
        "state",
        [
            FilterState(),
            FilterState({"status": "new"}),
            FilterState({"score": {"min": 10, "max": 60}}, quick_filter="candidate"),
            FilterState(quick_filter="0007"),
        ],
    )
    def test_idempotent(self, engine, columns, make_rows, state):
        rows = make_rows(30)
        once = engine.apply(rows, state, columns)
        assert engine.apply(once, state, columns) == once

    def test_preserves_input_order(self, engine, columns, make_rows):
        rows = list(reversed(make_rows(9)))
        result = engine.apply(rows, FilterState({"status": "new"}), columns)
        assert ids(result) == [6, 3, 0]

    def test_input_not_modified(self, engine, columns, rows):
        before = list(rows)
        engine.apply(rows, FilterState({"status": "new"}), columns)
        assert rows == before


# ── Display helpers ─────────────────────────────────────────────────────────


class TestDisplayHelpers:
    def test_describe_range(self):
        assert describe_filter_value({"min": 1, "max": 5}) == "1 – 5"
        assert describe_filter_value({"min": 1}) == "≥ 1"
        assert describe_filter_value({"max": 5}) == "≤ 5"

    def test_active_filters_skip_invalid_and_unknown(self, columns):
        state = FilterState({"status": "hired", "score": "lots", "ghost": "x"})
        active = active_filters(state, columns)
        assert [(f.column_id, f.label, f.display) for f in active] == [("status", "Status", "hired")]

    def test_filter_options_distinct_sorted(self, rows):
        assert filter_options(rows, Column(id="status")) == ["hired", "interview", "new"]

    def test_declared_options_win(self, rows):
        column = Column(id="status", filter_options=("new", "hired"))
        assert filter_options(rows, column) == ["new", "hired"]
