import logging
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import text

from mysql_viewer.app.core.config import Settings
from mysql_viewer.app.core.db import create_source_engine
from mysql_viewer.app.core.errors import ConnectionTestError, NotFoundError, ValidationError
from mysql_viewer.app.models.datasource import DEFAULT_SOURCE_NAME, ConnectionTestResult, DataSource, DataSourceFields
from mysql_viewer.app.services.config_store import ConfigStore
from mysql_viewer.app.services.executor import driver_message

logger = logging.getLogger(__name__)

EngineFactory = Callable[..., Engine]


def _entry_name(entry) -> Optional[str]:
    return entry.get("name") if isinstance(entry, dict) else None


class ConnectionRegistry:
    """
    Owns one pooled engine per data source name. "default" is built from
    settings at startup and can never be added, replaced or removed; every
    other mutation goes through a live connection test and is written to
    the config store before the pool map changes.
    """

    def __init__(self, store: ConfigStore, settings: Settings, engine_factory: Optional[EngineFactory] = None):
        self.store = store
        self.settings = settings
        self.engine_factory = engine_factory or create_source_engine
        self._pools: Dict[str, Engine] = {}

    def default_source(self) -> DataSource:
        return DataSource(**self.settings.default_source_fields())

    def _create_pool(self, source: DataSource) -> Engine:
        return self.engine_factory(source, pool_size=self.settings.POOL_SIZE)

    def startup(self) -> None:
        self._pools[DEFAULT_SOURCE_NAME] = self._create_pool(self.default_source())
        for source in self._stored_sources():
            self._pools[source.name] = self._create_pool(source)
        logger.info(f"Database connections established: {len(self._pools)} sources")

    def get(self, name: str = DEFAULT_SOURCE_NAME) -> Engine:
        pool = self._pools.get(name)
        if pool is None:
            raise NotFoundError("Data source not found")
        return pool

    def names(self) -> List[str]:
        return list(self._pools)

    def list_sources(self) -> List[DataSource]:
        return [self.default_source()] + self._stored_sources()

    def _stored_sources(self) -> List[DataSource]:
        """Valid configured sources; a bad entry is logged and skipped, never fatal."""
        sources = []
        for entry in self.store.load_datasources():
            if not isinstance(entry, dict):
                logger.error(f"Skipping data source entry that is not an object: {entry!r}")
                continue
            try:
                source = DataSource.model_validate(entry)
            except SchemaError as e:
                logger.error(f"Skipping invalid data source {_entry_name(entry)!r}: {e}")
                continue
            if not source.name or source.name == DEFAULT_SOURCE_NAME:
                continue
            sources.append(source)
        return sources

    def test(self, source: DataSource) -> ConnectionTestResult:
        logger.info(f"Testing database connection to {source.host}:{source.port}")
        engine = None
        try:
            engine = self.engine_factory(source, pool_size=1, max_overflow=0)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            message = driver_message(e)
            logger.warning(f"Connection test to {source.host}:{source.port} failed: {message}")
            return ConnectionTestResult(success=False, message=message)
        finally:
            if engine is not None:
                engine.dispose()
        logger.info("Connection test successful")
        return ConnectionTestResult(success=True, message="Connection successful")

    def _require_live(self, source: DataSource) -> None:
        result = self.test(source)
        if not result.success:
            raise ConnectionTestError(f"Connection test failed: {result.message}")

    def add(self, source: DataSource) -> DataSource:
        if not source.name or source.missing_fields():
            raise ValidationError("Missing required fields")

        sources = self.store.load_datasources()
        if source.name == DEFAULT_SOURCE_NAME or any(_entry_name(s) == source.name for s in sources):
            raise ValidationError("Data source name already exists")

        source = source.model_copy(update={"isDefault": False})
        self._require_live(source)

        sources.append(source.stored())
        self.store.save_datasources(sources)
        self._pools[source.name] = self._create_pool(source)
        logger.info(f"Data source added: {source.name}")
        return source

    def replace(self, name: str, fields: DataSourceFields) -> DataSource:
        if name == DEFAULT_SOURCE_NAME:
            raise ValidationError("Cannot modify default data source")

        sources = self.store.load_datasources()
        index = next((i for i, s in enumerate(sources) if _entry_name(s) == name), None)
        if index is None:
            raise NotFoundError("Data source not found")

        updates = fields.model_dump(include={"host", "port", "user", "password", "database"}, exclude_unset=True)
        try:
            source = DataSource.model_validate({**sources[index], **updates, "name": name, "isDefault": False})
        except SchemaError:
            raise ValidationError("Invalid data source fields")
        if source.missing_fields():
            raise ValidationError("Missing required fields")
        self._require_live(source)

        sources[index] = source.stored()
        self.store.save_datasources(sources)

        old_pool = self._pools.pop(name, None)
        if old_pool is not None:
            old_pool.dispose()
        self._pools[name] = self._create_pool(source)
        logger.info(f"Data source updated: {name}")
        return source

    def remove(self, name: str) -> None:
        if name == DEFAULT_SOURCE_NAME:
            raise ValidationError("Cannot delete default data source")

        sources = self.store.load_datasources()
        remaining = [s for s in sources if _entry_name(s) != name]
        if len(remaining) == len(sources):
            raise NotFoundError("Data source not found")
        self.store.save_datasources(remaining)

        pool = self._pools.pop(name, None)
        if pool is not None:
            pool.dispose()
        logger.info(f"Data source deleted: {name}")

    def close_all(self) -> None:
        for pool in self._pools.values():
            pool.dispose()
        self._pools.clear()
