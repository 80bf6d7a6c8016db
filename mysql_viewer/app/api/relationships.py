from fastapi import APIRouter, Depends
from typing import Any, Dict, List

from mysql_viewer.app.api.deps import get_store
from mysql_viewer.app.models.relationship import Relationship, relationships_document
from mysql_viewer.app.services.config_store import ConfigStore

router = APIRouter(prefix="/relationships", tags=["relationships"])

@router.get("", response_model=Dict[str, Any])
def read_relationships(store: ConfigStore = Depends(get_store)):
    return store.load_relationships()

@router.post("")
def save_relationships(relationships: Dict[str, List[Relationship]], store: ConfigStore = Depends(get_store)):
    # Full replace of the stored document
    store.save_relationships(relationships_document(relationships))
    return {"message": "Relationships saved successfully"}
