from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional

from mysql_viewer.app.api.deps import get_executor, get_registry
from mysql_viewer.app.core.errors import ValidationError
from mysql_viewer.app.services.executor import QueryExecutor
from mysql_viewer.app.services.registry import ConnectionRegistry

router = APIRouter(prefix="/query", tags=["query"])

class QueryRequest(BaseModel):
    query: Optional[str] = None
    dataSource: str = "default"

def is_select(query: Optional[str]) -> bool:
    return bool(query) and query.strip().lower().startswith("select")

@router.post("")
def execute_query(
    request: QueryRequest,
    registry: ConnectionRegistry = Depends(get_registry),
    executor: QueryExecutor = Depends(get_executor),
):
    if not is_select(request.query):
        raise ValidationError("Only SELECT queries are allowed")

    pool = registry.get(request.dataSource)
    return executor.execute(pool, request.query)
