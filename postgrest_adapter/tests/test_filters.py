"""Tests for the filter grammar."""

from datetime import datetime

import pytest

from postgrest_adapter.exceptions import FilterSyntaxError
from postgrest_adapter.filters import (
    and_,
    eq,
    in_,
    is_null,
    parse_filters,
    parse_order,
)


class TestParseFilters:
    """Test parsing of filter strings."""

    def test_eq_and_in(self) -> None:
        filters = parse_filters("ward_address=eq.0xabc&status=in.(pending_ward_sig,pending_guardian)")

        assert [(f.column, f.operator, f.value) for f in filters] == [
            ("ward_address", "eq", "0xabc"),
            ("status", "in", ["pending_ward_sig", "pending_guardian"]),
        ]

    def test_value_may_contain_dots_and_equals(self) -> None:
        """Only the first '=' and first '.' are structural."""
        (f,) = parse_filters("updated_at=gte.2024-01-01T00:00:00.123")

        assert f.operator == "gte"
        assert f.value == "2024-01-01T00:00:00.123"

    def test_is_values(self) -> None:
        filters = parse_filters("revoked_at=is.null&is_active=is.true")

        assert filters[0].value is None
        assert filters[1].value is True

    def test_empty(self) -> None:
        assert parse_filters(None) == []
        assert parse_filters("") == []

    @pytest.mark.parametrize(
        "bad",
        ["status", "status=like.pend*", "status=in.pending", "x=is.maybe", "=eq.1"],
    )
    def test_rejects_malformed(self, bad: str) -> None:
        with pytest.raises(FilterSyntaxError):
            parse_filters(bad)


class TestBuilders:
    """Test filter string builders."""

    def test_builders_round_trip_through_parser(self) -> None:
        built = and_(
            eq("id", "abc"),
            eq("event_version", 3),
            in_("wallet_address", ["0x1", "0x2"]),
            None,
            is_null("responded_at"),
        )

        assert built == "id=eq.abc&event_version=eq.3&wallet_address=in.(0x1,0x2)&responded_at=is.null"
        assert len(parse_filters(built)) == 4

    def test_datetime_and_bool_formatting(self) -> None:
        assert eq("created_at", datetime(2024, 5, 1, 12, 0)) == "created_at=eq.2024-05-01T12:00:00"
        assert eq("needs_guardian", True) == "needs_guardian=eq.true"


class TestParseOrder:
    """Test ordering clauses."""

    def test_parse_order(self) -> None:
        orders = parse_order("updated_at.desc,id")

        assert orders[0].column == "updated_at" and orders[0].descending
        assert orders[1].column == "id" and not orders[1].descending

    def test_rejects_bad_direction(self) -> None:
        with pytest.raises(FilterSyntaxError):
            parse_order("created_at.sideways")
