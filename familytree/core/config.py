from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    APP_NAME: str = "FamilyTreeRecordsAPI"
    APP_ENV: str = "dev"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "info"

    APP_CORS_ORIGINS: str = "http://localhost:3000"
    @property
    def CORS_ORIGINS(self) -> List[str]:
        return [o.strip() for o in self.APP_CORS_ORIGINS.split(",") if o.strip()]

    # Mongo
    MONGODB_URI: str
    MONGODB_DB: str

    # Neo4j
    NEO4J_URI: str
    NEO4J_USER: str
    NEO4J_PASSWORD: str

    # Genealogy
    # Two creation paths historically disagreed on the root generation (0 vs 1)
    ROOT_GENERATION_BASELINE: int = Field(default=0, ge=0, le=1)
    STRICT_ROOT_CHECK: bool = False
    LAYOUT_PRESET: Literal["workspace", "viewer"] = "workspace"
    TREND_WINDOW_DAYS: int = Field(default=30, gt=0)

settings = Settings()
