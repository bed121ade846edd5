from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="TRACEWIRE_")

    # Trace store
    tracking_uri: str = "http://127.0.0.1:5000"
    token: str | None = None
    request_timeout: float = 30.0

    # Trace assembly
    experiment_id: str = "0"
    strict_decoding: bool = False
    validate_trace_tree: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
