import json
from typing import Any, Dict, List, Tuple

from mysql_viewer.app.core.errors import ValidationError


def quote_ident(name: str) -> str:
    if not isinstance(name, str) or not name or "`" in name:
        raise ValidationError("Invalid identifier")
    return f"`{name}`"


def parse_filters(raw: str) -> Dict[str, Any]:
    try:
        filters = json.loads(raw or "{}")
    except ValueError:
        raise ValidationError("Invalid filters: expected a JSON object")
    if not isinstance(filters, dict):
        raise ValidationError("Invalid filters: expected a JSON object")
    return filters


def build_where(filters: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Strings match with LIKE '%value%', null with IS NULL, any other scalar
    by equality. Clauses are AND-joined; values are always bound.
    """
    clauses: List[str] = []
    params: Dict[str, Any] = {}
    for i, (column, value) in enumerate(filters.items()):
        col = quote_ident(column)
        key = f"f{i}"
        if value is None:
            clauses.append(f"{col} IS NULL")
        elif isinstance(value, str):
            clauses.append(f"{col} LIKE :{key}")
            params[key] = f"%{value}%"
        elif isinstance(value, (bool, int, float)):
            clauses.append(f"{col} = :{key}")
            params[key] = value
        else:
            raise ValidationError(f"Unsupported filter value for column {column}")
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def build_page_query(table: str, page: int, limit: int, filters: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    where, params = build_where(filters)
    sql = f"SELECT * FROM {quote_ident(table)}{where} LIMIT {int(limit)} OFFSET {page_offset(page, limit)}"
    return sql, params


def build_count_query(table: str) -> str:
    return f"SELECT COUNT(*) AS total FROM {quote_ident(table)}"
