from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "WeekPlanner"
    debug: bool = True
    database_url: str = Field("sqlite:///./weekplanner.db", validation_alias="DATABASE_URL")
    redis_url: str = Field("redis://localhost:6379/0", validation_alias="REDIS_URL")
    cache_ttl_seconds: int = 3600
    chunk_minutes: int = 30
    default_work_start_minutes: int = 9 * 60
    default_work_end_minutes: int = 17 * 60 + 30


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
