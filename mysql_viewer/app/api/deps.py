from fastapi import Request

from mysql_viewer.app.services.config_store import ConfigStore
from mysql_viewer.app.services.executor import QueryExecutor
from mysql_viewer.app.services.registry import ConnectionRegistry


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_store(request: Request) -> ConfigStore:
    return request.app.state.store


def get_executor(request: Request) -> QueryExecutor:
    return request.app.state.executor
