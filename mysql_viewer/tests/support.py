from typing import Any, Dict, List, Optional, Tuple
from unittest import mock

from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, text

from mysql_viewer.app.core.config import Settings
from mysql_viewer.app.services.executor import QueryExecutor

UNREACHABLE_HOST = "unreachable.invalid"


def memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


def spy_dispose(engine):
    """Wrap Engine.dispose in a Mock so tests can see when a pool was closed."""
    engine.dispose = mock.Mock(wraps=engine.dispose)
    return engine


def seed(engine, *statements: str) -> None:
    with engine.connect() as conn:
        for statement in statements:
            conn.execute(text(statement))
        conn.commit()


def make_settings(config_dir: str, **overrides) -> Settings:
    values = dict(
        CONFIG_DIR=config_dir,
        SQL_LOG_FORMAT="compact",
        DB_HOST="localhost",
        DB_USER="root",
        DB_PASSWORD="",
        DB_NAME="test",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class SqliteEngineFactory:
    """
    Stands in for the MySQL engine factory. The default source maps onto a
    shared in-memory database; the unreachable host maps onto a path SQLite
    cannot open, so connecting to it fails like a dead MySQL server would.
    """

    def __init__(self, default_engine=None):
        self.default_engine = spy_dispose(default_engine or memory_engine())
        self.engines: Dict[str, Any] = {}
        self.check_engines: List[Any] = []
        self.calls: List[Tuple[Optional[str], dict]] = []

    def __call__(self, source, **pool_kwargs):
        self.calls.append((source.name, pool_kwargs))
        if source.host == UNREACHABLE_HOST:
            engine = spy_dispose(create_engine("sqlite:////nonexistent-dir/unreachable.db"))
        elif pool_kwargs.get("pool_size") == 1:
            # single-connection pool used by a connection test
            engine = spy_dispose(memory_engine())
        else:
            return self._pool_engine(source)
        if pool_kwargs.get("pool_size") == 1:
            self.check_engines.append(engine)
        return engine

    def _pool_engine(self, source):
        if source.name == "default":
            return self.default_engine
        engine = spy_dispose(memory_engine())
        self.engines[source.name] = engine
        return engine


class RecordingExecutor(QueryExecutor):
    """Records every statement; canned results answer MySQL-only statements."""

    def __init__(self, canned: Optional[Dict[str, list]] = None):
        super().__init__("compact")
        self.canned = canned or {}
        self.statements: List[Tuple[str, Optional[dict]]] = []

    def execute(self, engine, sql, params=None):
        self.statements.append((sql, dict(params) if params else None))
        for prefix, rows in self.canned.items():
            if sql.startswith(prefix):
                return rows
        return super().execute(engine, sql, params)
