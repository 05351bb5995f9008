from typing import Any, Dict, Optional
from urllib.parse import quote_plus
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoConnectionSettings(BaseModel):
    """Settings for one logical Mongo connection (database.mongo.<name>.*)."""
    username: str = ""
    password: str = ""
    host: str = "localhost"  # comma separated for replica sets
    port: int = 27017
    database: str = ""
    charset: str = "utf8"
    options: Dict[str, Any] = Field(default_factory=dict)

    @property
    def dsn(self) -> str:
        # Build mongodb:// URI, every host shares the same port
        hosts = ",".join(f"{host.strip()}:{self.port}" for host in self.host.split(","))
        query = f"charset={self.charset}"
        for key, value in self.options.items():
            query += f"&{key}={value}"
        if self.username and self.password:
            safe_password = quote_plus(self.password)
            return f"mongodb://{self.username}:{safe_password}@{hosts}/{self.database}?{query}"
        return f"mongodb://{hosts}/{self.database}?{query}"


class DatabaseSettings(BaseModel):
    mongo: Dict[str, MongoConnectionSettings] = Field(
        default_factory=lambda: {"default": MongoConnectionSettings(database="app_db")}
    )


class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "docstore"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True

    # --- Database (MongoDB) ---
    # Nested env vars: DATABASE__MONGO__DEFAULT__HOST=db1,db2
    DATABASE: DatabaseSettings = Field(default_factory=DatabaseSettings)
    MONGO_DEFAULT_CONNECTION: str = "default"
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    # --- Logging ---
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    def get_mongo(self, connection: str) -> Optional[MongoConnectionSettings]:
        """Settings of a logical Mongo connection, None if not configured."""
        return self.DATABASE.mongo.get(connection)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key, e.g. "database.mongo.default.host".

        Top-level names are matched case-insensitively; returns default
        when any segment is missing.
        """
        value: Any = self
        for index, part in enumerate(key.split(".")):
            if index == 0:
                part = part.upper()
            if isinstance(value, dict):
                if part not in value:
                    return default
                value = value[part]
            elif hasattr(value, part):
                value = getattr(value, part)
            else:
                return default
        return value


# Singleton settings instance
settings = Settings()
