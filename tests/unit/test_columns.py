"""
Tests for ats_grid.core.columns and ats_grid.core.row_store.
"""

from dataclasses import dataclass
from datetime import date

import pytest

from ats_grid.core.columns import ACCESSOR_FAILED, Column, ColumnModel, cell_text, safe_value
from ats_grid.core.exceptions import DuplicateRowIdError, UnknownColumnError
from ats_grid.core.row_store import DerivedRows, RowStore
from ats_grid.utils.constants import FieldType, FilterKind, PinSide


@dataclass
class Person:
    id: int
    name: str


# ── Column ──────────────────────────────────────────────────────────────────


class TestColumn:
    def test_label_defaults_to_id(self):
        assert Column(id="name").label == "name"

    def test_accessor_key_defaults_to_id(self):
        column = Column(id="name")
        assert column.value({"name": "Ada"}) == "Ada"

    def test_missing_mapping_key_reads_none(self):
        assert Column(id="name").value({}) is None

    def test_reads_attributes(self):
        assert Column(id="name").value(Person(1, "Ada")) == "Ada"

    def test_accessor_function_wins(self):
        column = Column(id="upper", accessor=lambda row: row["name"].upper())
        assert column.value({"name": "ada"}) == "ADA"

    def test_width_clamped_to_min_width(self):
        column = Column(id="a", width=10, min_width=40)
        assert column.width == 40

    def test_string_enums_are_coerced(self):
        column = Column(id="a", pinned="start", field_type="number")
        assert column.pinned is PinSide.START
        assert column.field_type is FieldType.NUMBER

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            Column(id="")

    @pytest.mark.parametrize(
        "field_type, expected",
        [
            (FieldType.TEXT, FilterKind.TEXT),
            (FieldType.CURRENCY, FilterKind.NUMBER),
            (FieldType.DATE, FilterKind.DATE_RANGE),
            (FieldType.SELECT, FilterKind.SELECT),
            (FieldType.MULTI_SELECT, FilterKind.MULTI_SELECT),
        ],
    )
    def test_filter_kind_inferred_from_field_type(self, field_type, expected):
        assert Column(id="a", field_type=field_type).effective_filter_kind is expected

    def test_declared_filter_kind_wins(self):
        column = Column(id="a", field_type=FieldType.DATE, filter_kind=FilterKind.DATE)
        assert column.effective_filter_kind is FilterKind.DATE


class TestSafeValue:
    def test_returns_sentinel_when_accessor_raises(self):
        column = Column(id="bad", accessor=lambda row: row["missing"]["deeper"])
        assert safe_value(column, {}) is ACCESSOR_FAILED

    def test_sentinel_is_falsy(self):
        assert not ACCESSOR_FAILED


class TestCellText:
    def test_none_is_empty(self):
        assert cell_text(None) == ""

    def test_date_is_iso(self):
        assert cell_text(date(2024, 3, 5)) == "2024-03-05"

    def test_lists_are_joined(self):
        assert cell_text(["a", "b"]) == "a, b"

    def test_enum_uses_value(self):
        assert cell_text(FieldType.TEXT) == "text"


# ── ColumnModel ─────────────────────────────────────────────────────────────


class TestColumnModel:
    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate column id"):
            ColumnModel([Column(id="a"), Column(id="a")])

    def test_unknown_column_raises_key_error(self):
        model = ColumnModel([Column(id="a")])
        with pytest.raises(KeyError):
            model["b"]
        with pytest.raises(UnknownColumnError):
            model["b"]

    def test_ids_keep_declared_order(self):
        model = ColumnModel([Column(id="b"), Column(id="a")])
        assert model.ids == ("b", "a")

    def test_filterable(self):
        model = ColumnModel([Column(id="a"), Column(id="b", filterable=False)])
        assert [c.id for c in model.filterable] == ["a"]


# ── RowStore ────────────────────────────────────────────────────────────────


class TestRowStore:
    def test_lookup_by_id(self):
        store = RowStore([{"id": "x"}, {"id": "y"}], lambda r: r["id"])
        assert store.get("y") == {"id": "y"}
        assert store.position_of("y") == 1
        assert "x" in store
        assert store.get("z") is None

    def test_duplicate_ids_raise(self):
        with pytest.raises(DuplicateRowIdError) as exc_info:
            RowStore([{"id": 1}, {"id": 2}, {"id": 1}], lambda r: r["id"])
        assert exc_info.value.row_id == 1
        assert exc_info.value.first_index == 0
        assert exc_info.value.second_index == 2

    def test_snapshot_is_immutable(self):
        rows = [{"id": 1}]
        store = RowStore(rows, lambda r: r["id"])
        rows.append({"id": 2})
        assert len(store) == 1


class TestDerivedRows:
    def test_build_tracks_ids(self):
        derived = DerivedRows.build([{"id": 3}, {"id": 1}], lambda r: r["id"])
        assert derived.ids == (3, 1)
        assert 1 in derived
        assert 2 not in derived
        assert len(derived) == 2
