"""SQL clause helpers shared by query builders."""

from typing import Any


def build_where_clause(conditions: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    """Build WHERE clause from conditions dictionary.

    Scalar values match by equality, ``None`` matches NULL and list or tuple
    values match any of their members. An empty list matches nothing.

    Args:
        conditions: Dictionary of field-value pairs for WHERE conditions

    Returns:
        Tuple of (where_clause, parameters_dict)

    Example:
        >>> build_where_clause({"title": "First Post", "id": [1, 2]})
        ("WHERE title = :param_title AND id IN (:param_id_0, :param_id_1)",
         {"param_title": "First Post", "param_id_0": 1, "param_id_1": 2})
    """
    if not conditions:
        return "", {}

    clauses: list[str] = []
    params: dict[str, Any] = {}

    for field, value in conditions.items():
        param_name = f"param_{field}"
        if value is None:
            clauses.append(f"{field} IS NULL")
        elif isinstance(value, (list, tuple, set, frozenset)):
            members = list(value)
            if not members:
                clauses.append("0 = 1")
                continue
            placeholders: list[str] = []
            for position, member in enumerate(members):
                member_param = f"{param_name}_{position}"
                placeholders.append(f":{member_param}")
                params[member_param] = member
            clauses.append(f"{field} IN ({', '.join(placeholders)})")
        else:
            clauses.append(f"{field} = :{param_name}")
            params[param_name] = value

    return f"WHERE {' AND '.join(clauses)}", params


def build_order_by_clause(order_by: list[str] | None) -> str:
    """Build ORDER BY clause from field list.

    Example:
        >>> build_order_by_clause(["title", "id DESC"])
        "ORDER BY title, id DESC"
    """
    if not order_by:
        return ""

    return f"ORDER BY {', '.join(order_by)}"


def build_limit_clause(limit: int | None, offset: int | None = None) -> str:
    """Build LIMIT clause with optional OFFSET.

    Example:
        >>> build_limit_clause(10, 20)
        "LIMIT 10 OFFSET 20"
    """
    if limit is None:
        return ""

    clause = f"LIMIT {int(limit)}"
    if offset is not None:
        clause += f" OFFSET {int(offset)}"

    return clause
