from typing import Dict, List, Literal
from pydantic import BaseModel, ConfigDict

RelationshipType = Literal["one-to-one", "one-to-many", "many-to-one"]

class Relationship(BaseModel):
    # Free-form: not checked against the schema, unknown keys kept as-is
    model_config = ConfigDict(extra="allow")

    foreignTable: str
    foreignKey: str
    localKey: str = "id"
    relationshipType: RelationshipType = "one-to-many"

    def as_entry(self) -> dict:
        entry = {name: getattr(self, name) for name in type(self).model_fields if name in self.model_fields_set}
        entry.update(self.model_extra or {})
        return entry

def relationships_document(relationships: Dict[str, List[Relationship]]) -> dict:
    """Local table name -> entries, holding only the keys the caller sent."""
    return {
        table: [relation.as_entry() for relation in relations]
        for table, relations in relationships.items()
    }
