"""
Tests for ats_grid.core.sorting — sort state transitions and the stable,
null-aware comparator chain.
"""

from datetime import date, datetime, timezone

import pytest

from ats_grid.core.columns import Column
from ats_grid.core.sorting import SortEngine, SortEntry, SortState, next_sort_state
from ats_grid.utils.constants import FieldType, NullsPosition, SortDirection


@pytest.fixture
def engine():
    return SortEngine()


def ids(rows):
    return [row["id"] for row in rows]


# ── SortState ───────────────────────────────────────────────────────────────


class TestSortState:
    def test_duplicates_discarded(self):
        state = SortState.of(("name", "asc"), ("score", "desc"), ("name", "desc"))
        assert [(e.column_id, e.direction) for e in state] == [
            ("name", SortDirection.ASC),
            ("score", SortDirection.DESC),
        ]

    def test_accepts_pairs_and_dicts(self):
        state = SortState((("name", "desc"), {"column_id": "score"}))
        assert state.direction_of("name") is SortDirection.DESC
        assert state.direction_of("score") is SortDirection.ASC

    def test_primary(self):
        assert SortState().primary is None
        assert SortState.of(("a", "asc")).primary.column_id == "a"


class TestNextSortState:
    def test_cycle_asc_desc_removed(self):
        state = next_sort_state(SortState(), "name")
        assert state.direction_of("name") is SortDirection.ASC
        state = next_sort_state(state, "name")
        assert state.direction_of("name") is SortDirection.DESC
        state = next_sort_state(state, "name")
        assert len(state) == 0

    def test_plain_click_replaces_chain(self):
        state = SortState.of(("score", "asc"))
        state = next_sort_state(state, "name")
        assert [e.column_id for e in state] == ["name"]

    def test_additive_click_appends_and_keeps_position(self):
        state = SortState.of(("score", "asc"))
        state = next_sort_state(state, "name", additive=True)
        state = next_sort_state(state, "score", additive=True)
        assert [(e.column_id, e.direction.value) for e in state] == [("score", "desc"), ("name", "asc")]

    def test_additive_third_click_removes_only_that_column(self):
        state = SortState.of(("score", "desc"), ("name", "asc"))
        state = next_sort_state(state, "score", additive=True)
        assert [e.column_id for e in state] == ["name"]


# ── SortEngine ──────────────────────────────────────────────────────────────


class TestSortEngine:
    def test_numbers_numeric_not_lexicographic(self, engine):
        columns = [Column(id="n", field_type=FieldType.NUMBER)]
        rows = [{"id": 1, "n": 10}, {"id": 2, "n": 9}, {"id": 3, "n": 100}]
        assert ids(engine.apply(rows, SortState.of(("n", "asc")), columns)) == [2, 1, 3]

    def test_descending(self, engine, columns, rows):
        result = engine.apply(rows, SortState.of(("score", "desc")), columns)
        assert ids(result) == list(range(9, -1, -1))

    def test_strings_ignore_case_and_accents(self, engine):
        columns = [Column(id="name")]
        rows = [{"id": 1, "name": "zoe"}, {"id": 2, "name": "Émile"}, {"id": 3, "name": "adam"}]
        assert ids(engine.apply(rows, SortState.of(("name", "asc")), columns)) == [3, 2, 1]

    def test_dates_chronological(self, engine):
        columns = [Column(id="d", field_type=FieldType.DATE)]
        rows = [
            {"id": 1, "d": "2024-03-01"},
            {"id": 2, "d": date(2023, 12, 31)},
            {"id": 3, "d": datetime(2024, 1, 15, tzinfo=timezone.utc)},
        ]
        assert ids(engine.apply(rows, SortState.of(("d", "asc")), columns)) == [2, 3, 1]

    def test_multi_key_chain(self, engine, columns, make_rows):
        rows = make_rows(6)
        sort = SortState.of(("status", "asc"), ("score", "desc"))
        # hired: 2, 5; interview: 1, 4; new: 0, 3
        assert ids(engine.apply(rows, sort, columns)) == [5, 2, 4, 1, 3, 0]

    def test_unknown_and_non_sortable_columns_dropped(self, engine, rows):
        columns = [Column(id="name", sortable=False), Column(id="score", field_type=FieldType.NUMBER)]
        sort = SortState.of(("ghost", "asc"), ("name", "desc"), ("score", "desc"))
        active = engine.active_entries(sort, columns)
        assert [column.id for column, _ in active] == ["score"]
        assert ids(engine.apply(rows, sort, columns))[0] == 9

    def test_empty_chain_keeps_order(self, engine, columns, rows):
        assert engine.apply(rows, SortState(), columns) == rows

    def test_input_not_modified(self, engine, columns, rows):
        before = list(rows)
        engine.apply(rows, SortState.of(("score", "desc")), columns)
        assert rows == before

    def test_mixed_types_do_not_raise(self, engine):
        columns = [Column(id="v")]
        rows = [{"id": 1, "v": "b"}, {"id": 2, "v": 3}, {"id": 3, "v": "a"}, {"id": 4, "v": 1}]
        assert ids(engine.apply(rows, SortState.of(("v", "asc")), columns)) == [4, 2, 3, 1]


# ── Properties ──────────────────────────────────────────────────────────────


class TestSortProperties:
    @pytest.mark.parametrize("direction", ["asc", "desc"])
    def test_stable_for_equal_values(self, engine, columns, make_rows, direction):
        rows = make_rows(50, score=42)
        result = engine.apply(rows, SortState.of(("score", direction)), columns)
        assert ids(result) == list(range(50))

    @pytest.mark.parametrize("direction", ["asc", "desc"])
    @pytest.mark.parametrize("nulls", [NullsPosition.LAST, NullsPosition.FIRST])
    def test_nulls_contiguous_at_configured_end(self, columns, make_rows, direction, nulls):
        rows = make_rows(20)
        for row in rows[::3]:
            row["score"] = None
        rows[4]["score"] = float("nan")
        missing = {row["id"] for row in rows if row["score"] is None} | {4}

        result = SortEngine(nulls).apply(rows, SortState.of(("score", direction)), columns)
        result_ids = ids(result)
        count = len(missing)
        block = result_ids[-count:] if nulls is NullsPosition.LAST else result_ids[:count]
        assert set(block) == missing

    def test_failing_accessor_sorts_as_missing(self, engine):
        columns = [Column(id="v", accessor=lambda row: row["v"] * 1, field_type=FieldType.NUMBER)]
        rows = [{"id": 1, "v": 2}, {"id": 2}, {"id": 3, "v": 1}]
        assert ids(engine.apply(rows, SortState.of(("v", "desc")), columns)) == [1, 3, 2]

    def test_sort_entry_coerces_direction(self):
        assert SortEntry("a", "desc").direction is SortDirection.DESC
