from typing import Optional
from sqlmodel import Field, SQLModel

DEFAULT_SOURCE_NAME = "default"

class DataSourceFields(SQLModel):
    host: Optional[str] = None
    port: int = Field(default=3306)
    user: Optional[str] = None
    password: Optional[str] = Field(default="")
    database: Optional[str] = None

    def missing_fields(self) -> list:
        return [f for f in ("host", "user", "database") if not getattr(self, f)]

class DataSource(DataSourceFields):
    name: Optional[str] = None
    isDefault: bool = Field(default=False)

    def stored(self) -> dict:
        # isDefault is synthesized, never written to datasources.json
        return self.model_dump(exclude={"isDefault"})

class ConnectionTestResult(SQLModel):
    success: bool
    message: str
