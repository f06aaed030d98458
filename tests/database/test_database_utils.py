"""Tests for SQL clause helpers."""

from tablewright.database.utils import (
    build_limit_clause,
    build_order_by_clause,
    build_where_clause,
)


def test_build_where_clause_empty() -> None:
    """Test no conditions produce no clause."""
    assert build_where_clause({}) == ("", {})


def test_build_where_clause_equality() -> None:
    """Test conjunctive equality conditions."""
    clause, params = build_where_clause({"title": "First Post", "views": 3})

    assert clause == "WHERE title = :param_title AND views = :param_views"
    assert params == {"param_title": "First Post", "param_views": 3}


def test_build_where_clause_null_and_in() -> None:
    """Test None matches NULL and lists become IN predicates."""
    clause, params = build_where_clause({"body": None, "id": (4, 5)})

    assert clause == "WHERE body IS NULL AND id IN (:param_id_0, :param_id_1)"
    assert params == {"param_id_0": 4, "param_id_1": 5}


def test_build_where_clause_empty_list_matches_nothing() -> None:
    """Test an empty member list can never match."""
    clause, params = build_where_clause({"id": []})

    assert clause == "WHERE 0 = 1"
    assert params == {}


def test_build_order_by_clause() -> None:
    """Test ORDER BY rendering."""
    assert build_order_by_clause(None) == ""
    assert build_order_by_clause(["title", "id DESC"]) == "ORDER BY title, id DESC"


def test_build_limit_clause() -> None:
    """Test LIMIT / OFFSET rendering."""
    assert build_limit_clause(None) == ""
    assert build_limit_clause(10) == "LIMIT 10"
    assert build_limit_clause(10, 20) == "LIMIT 10 OFFSET 20"
