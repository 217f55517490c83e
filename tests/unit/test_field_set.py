"""Unit tests for cell validation against table fields."""

from types import SimpleNamespace

import pytest

from flowtables_core.database.models import to_cell_value
from flowtables_core.tables.record_service import FieldSet
from flowtables_core.tables.schemas import CellData


def make_fields():
    return [
        SimpleNamespace(id="fld_name", name="name"),
        SimpleNamespace(id="fld_age", name="age"),
    ]


class TestFieldSet:
    """Tests for FieldSet."""

    def test_membership(self):
        fields = FieldSet(make_fields())

        assert "name" in fields
        assert "email" not in fields
        assert len(fields) == 2

    def test_resolve_maps_names_to_field_ids(self):
        fields = FieldSet(make_fields())

        resolved = fields.resolve([
            CellData(key="name", value="Ada"),
            CellData(key="age", value=36),
        ])

        assert resolved == {"fld_name": "Ada", "fld_age": "36"}

    def test_unknown_fields_are_dropped(self):
        fields = FieldSet(make_fields())

        resolved = fields.resolve([
            CellData(key="name", value="Ada"),
            CellData(key="nickname", value="Countess"),
        ])

        assert resolved == {"fld_name": "Ada"}

    def test_only_unknown_fields_gives_empty_mapping(self):
        fields = FieldSet(make_fields())
        assert fields.resolve([CellData(key="ghost", value="boo")]) == {}

    def test_last_value_wins_for_repeated_field(self):
        fields = FieldSet(make_fields())

        resolved = fields.resolve([
            CellData(key="age", value="30"),
            CellData(key="age", value="31"),
        ])

        assert resolved == {"fld_age": "31"}

    def test_field_names_are_case_sensitive(self):
        fields = FieldSet(make_fields())
        assert fields.resolve([CellData(key="Name", value="Ada")]) == {}


class TestToCellValue:
    """Tests for cell value conversion."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("text", "text"),
            (None, None),
            (42, "42"),
            (2.5, "2.5"),
            (True, "true"),
            (False, "false"),
            ({"a": 1}, '{"a": 1}'),
            ([1, 2], "[1, 2]"),
        ],
    )
    def test_conversion(self, value, expected):
        assert to_cell_value(value) == expected
