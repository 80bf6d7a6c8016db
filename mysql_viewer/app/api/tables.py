from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, List

from mysql_viewer.app.api.deps import get_executor, get_registry, get_store
from mysql_viewer.app.services.config_store import ConfigStore
from mysql_viewer.app.services.executor import QueryExecutor
from mysql_viewer.app.services.registry import ConnectionRegistry
from mysql_viewer.app.services.relationships import resolve_related
from mysql_viewer.app.services.table_query import (
    build_count_query,
    build_page_query,
    parse_filters,
    quote_ident,
)

router = APIRouter(prefix="/tables", tags=["tables"])

@router.get("", response_model=List[str])
def list_tables(
    dataSource: str = "default",
    registry: ConnectionRegistry = Depends(get_registry),
    executor: QueryExecutor = Depends(get_executor),
):
    pool = registry.get(dataSource)
    rows = executor.execute(pool, "SHOW TABLES")
    # SHOW TABLES names its single column after the database
    return [next(iter(row.values())) for row in rows if row]

@router.get("/{table_name}/structure")
def get_table_structure(
    table_name: str,
    dataSource: str = "default",
    registry: ConnectionRegistry = Depends(get_registry),
    executor: QueryExecutor = Depends(get_executor),
):
    pool = registry.get(dataSource)
    return executor.execute(pool, f"DESCRIBE {quote_ident(table_name)}")

@router.get("/{table_name}/data", response_model=Dict[str, Any])
def get_table_data(
    table_name: str,
    dataSource: str = "default",
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1),
    filters: str = "{}",
    registry: ConnectionRegistry = Depends(get_registry),
    executor: QueryExecutor = Depends(get_executor),
):
    pool = registry.get(dataSource)
    filter_obj = parse_filters(filters)

    sql, params = build_page_query(table_name, page, limit, filter_obj)
    data = executor.execute(pool, sql, params)

    # Total is the unfiltered row count of the table
    count_rows = executor.execute(pool, build_count_query(table_name))
    total = count_rows[0]["total"] if count_rows else 0

    return {
        "data": data,
        "total": total,
        "page": page,
        "limit": limit,
    }

@router.get("/{table_name}/{row_id}/related")
def get_related_data(
    table_name: str,
    row_id: str,
    dataSource: str = "default",
    registry: ConnectionRegistry = Depends(get_registry),
    store: ConfigStore = Depends(get_store),
    executor: QueryExecutor = Depends(get_executor),
):
    pool = registry.get(dataSource)
    return resolve_related(store, executor, pool, table_name, row_id)
