from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """إعدادات التطبيق العامة مع تحميل القيم من ملف .env عند توفره."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "StampFlow PDF API"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # المعاينة
    render_scale: float = 1.5

    # حدود الختم والقيم الافتراضية
    min_font_size: float = 8
    max_font_size: float = 72
    default_font_size: float = 16
    default_color: str = "#FF0000"
    default_x_percent: float = 85
    default_y_percent: float = 5

    # اقتراح الرمز عبر Mistral
    mistral_api_key: Optional[str] = None
    mistral_model: str = "mistral-small-latest"
    suggestion_max_chars: int = 3000
    suggestion_min_chars: int = 5

    session_ttl_minutes: int = 120

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])


@lru_cache()
def get_settings() -> Settings:
    return Settings()
