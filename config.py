from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://postgres:postgres@db:5432/bookshelf"
    REDIS_URL: Optional[str] = None
    CACHE_TTL_SECONDS: int = 300
    FRONTEND_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # Bulk import
    IMPORT_DELIMITER: str = ";"

    @field_validator("IMPORT_DELIMITER")
    @classmethod
    def _single_character_delimiter(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("IMPORT_DELIMITER must be exactly one character")
        return value

    @property
    def allow_origins(self) -> List[str]:
        return [origin.strip() for origin in self.FRONTEND_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
