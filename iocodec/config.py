from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="IOCODEC_", env_file=".env", extra="ignore")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    # Request pipeline defaults
    COERCE_QUERY_STRINGS: bool = False
    ALLOW_PASSTHROUGH: bool = False

    # Error responses
    INCLUDE_ERROR_VALUES: bool = True  # False keeps offending input out of HTTP responses


@lru_cache
def get_settings() -> Settings:
    return Settings()
