import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import text

from mysql_viewer.app.core.errors import DatabaseError
from mysql_viewer.app.core.sql_logging import log_sql, normalize_sql

logger = logging.getLogger(__name__)


def driver_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def json_safe(value: Any) -> Any:
    # BLOB/BINARY columns: readable text stays text, anything else becomes a 0x hex literal
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return "0x" + raw.hex()
    return value


class QueryExecutor:
    """The only path by which SQL reaches a data source."""

    def __init__(self, log_format: str = "formatted"):
        self.log_format = log_format

    def execute(self, engine: Engine, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        clean_sql = normalize_sql(sql)
        timestamp = log_sql(self.log_format, clean_sql, params)

        try:
            with engine.connect() as conn:
                if params:
                    result = conn.execute(text(clean_sql), dict(params))
                else:
                    # Sent verbatim so '%' and ':' in ad-hoc SQL are not taken as binds
                    result = conn.execution_options(no_parameters=True).exec_driver_sql(clean_sql)
                if not result.returns_rows:
                    return []
                return [
                    {column: json_safe(value) for column, value in row.items()}
                    for row in result.mappings().all()
                ]
        except SQLAlchemyError as e:
            message = driver_message(e)
            logger.error(f"[{timestamp}] SQL Error: {message}")
            raise DatabaseError(message) from e
