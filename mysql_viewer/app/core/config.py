from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "MySQL Viewer"
    API_PREFIX: str = "/api"

    # HTTP server
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"

    # Default data source, always registered under the name "default"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: str = "test"
    POOL_SIZE: int = 10

    # compact, formatted or pretty
    SQL_LOG_FORMAT: str = "formatted"

    # Holds datasources.json and relationships.json
    CONFIG_DIR: str = "config"

    def default_source_fields(self) -> dict:
        return {
            "name": "default",
            "host": self.DB_HOST,
            "port": self.DB_PORT,
            "user": self.DB_USER,
            "password": self.DB_PASSWORD,
            "database": self.DB_NAME,
            "isDefault": True,
        }

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
