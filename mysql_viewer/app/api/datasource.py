from fastapi import APIRouter, Depends
from typing import List

from mysql_viewer.app.api.deps import get_registry
from mysql_viewer.app.core.errors import ValidationError
from mysql_viewer.app.models.datasource import ConnectionTestResult, DataSource, DataSourceFields
from mysql_viewer.app.services.registry import ConnectionRegistry

router = APIRouter(prefix="/datasources", tags=["datasources"])

@router.get("", response_model=List[DataSource])
def read_datasources(registry: ConnectionRegistry = Depends(get_registry)):
    return registry.list_sources()

@router.post("")
def create_datasource(datasource: DataSource, registry: ConnectionRegistry = Depends(get_registry)):
    source = registry.add(datasource)
    return {"message": "Data source added successfully", "source": source}

@router.post("/test", response_model=ConnectionTestResult)
def test_connection(connection_info: DataSourceFields, registry: ConnectionRegistry = Depends(get_registry)):
    """
    Try a connection with a throwaway single-connection pool.
    Nothing is persisted or registered.
    """
    if connection_info.missing_fields():
        raise ValidationError("Missing required fields")
    return registry.test(DataSource(**connection_info.model_dump()))

@router.put("/{name}")
def update_datasource(name: str, datasource: DataSourceFields, registry: ConnectionRegistry = Depends(get_registry)):
    source = registry.replace(name, datasource)
    return {"message": "Data source updated successfully", "source": source}

@router.delete("/{name}")
def delete_datasource(name: str, registry: ConnectionRegistry = Depends(get_registry)):
    registry.remove(name)
    return {"message": "Data source deleted successfully"}
