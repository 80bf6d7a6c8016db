import logging
from typing import Any, Dict, List

from sqlalchemy.engine import Engine

from mysql_viewer.app.core.errors import ViewerError
from mysql_viewer.app.services.config_store import ConfigStore
from mysql_viewer.app.services.executor import QueryExecutor
from mysql_viewer.app.services.table_query import quote_ident

logger = logging.getLogger(__name__)


def resolve_related(
    store: ConfigStore,
    executor: QueryExecutor,
    engine: Engine,
    table: str,
    row_id: Any,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Look up rows in every foreign table declared for `table` whose foreign
    key equals `row_id`. A relationship may point at a table that has since
    been dropped or renamed, so a failing lookup yields an empty list for
    that table and resolution carries on with the rest.
    """
    related: Dict[str, List[Dict[str, Any]]] = {}

    for entry in store.load_relationships().get(table) or []:
        # Only the lookup keys matter here; relationshipType and extra keys are not checked on read
        foreign_table = entry.get("foreignTable") if isinstance(entry, dict) else None
        foreign_key = entry.get("foreignKey") if isinstance(entry, dict) else None
        if not isinstance(foreign_table, str) or not isinstance(foreign_key, str):
            logger.warning(f"Skipping malformed relationship on {table}: {entry!r}")
            continue

        try:
            sql = f"SELECT * FROM {quote_ident(foreign_table)} WHERE {quote_ident(foreign_key)} = :id"
            related[foreign_table] = executor.execute(engine, sql, {"id": row_id})
        except ViewerError as e:
            logger.warning(f"Table {foreign_table} not found or query failed: {e.message}")
            related[foreign_table] = []

    return related
