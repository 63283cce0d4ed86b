# marketflow/config.py
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class Settings(BaseSettings):
    """Runtime configuration sourced from MARKETFLOW_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MARKETFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # multiplier applied to every simulated service delay; 0 disables latency
    latency_scale: float = 1.0
    fixtures_dir: Path = FIXTURES_DIR
    cart_path: Path = Path.home() / ".marketflow" / "cart.json"
    api_base_url: str = "http://127.0.0.1:8085"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
