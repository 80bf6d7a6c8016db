from sqlalchemy.engine import URL, Engine
from sqlmodel import create_engine

from mysql_viewer.app.models.datasource import DataSource


def mysql_url(source: DataSource) -> URL:
    # URL.create escapes special characters in the password
    return URL.create(
        "mysql+pymysql",
        username=source.user,
        password=source.password or None,
        host=source.host,
        port=source.port,
        database=source.database,
    )


def create_source_engine(source: DataSource, pool_size: int = 10, max_overflow: int = 0) -> Engine:
    """One engine per data source; its QueuePool is the source's connection pool."""
    return create_engine(
        mysql_url(source),
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,
    )
