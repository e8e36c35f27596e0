from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file explicitly
ENV_FILE_NAME = ".env"
env_path = Path(__file__).parent.parent.parent / ENV_FILE_NAME
load_dotenv(env_path, override=False)

HF_ROUTER_URL = "https://router.huggingface.co/v1"
DEFAULT_VLM_MODEL = "Qwen/Qwen2.5-VL-7B-Instruct"


class Settings(BaseSettings):
    # Required; the process refuses to start without them
    BOT_TOKEN: str
    WEBHOOK_URL: str
    REDIS_URL: str
    HF_TOKEN: str

    VLM_BASE_URL: str = HF_ROUTER_URL
    VLM_MODEL: str = DEFAULT_VLM_MODEL
    VLM_MAX_TOKENS: int = 150
    VLM_TIMEOUT: float = 10.0

    STORE_TIMEOUT: float = 5.0
    TELEGRAM_TIMEOUT: float = 10.0

    DEFAULT_LANG: str = "en"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RUN_MODE: str = "webhook"
    DEBUG: bool = False
    LOG_DIR: str = "logs"

    @field_validator("BOT_TOKEN", "WEBHOOK_URL", "REDIS_URL", "HF_TOKEN")
    @classmethod
    def require_non_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("RUN_MODE")
    @classmethod
    def parse_run_mode(cls, v: str) -> str:
        mode = (v or "webhook").strip().lower()
        if mode not in ("webhook", "polling"):
            raise ValueError("RUN_MODE must be 'webhook' or 'polling'")
        return mode

    model_config = SettingsConfigDict(
        env_file=ENV_FILE_NAME,
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from the environment once; raises ValidationError if a required value is missing."""
    return Settings()  # type: ignore[call-arg]
