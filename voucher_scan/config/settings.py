# voucher_scan/config/settings.py
"""
Runtime settings loaded from environment variables (VOUCHER_SCAN_*) or .env.
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from voucher_scan.extraction.config import DEFAULT_CONFIG, ExtractionConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VOUCHER_SCAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash-lite"
    ai_max_tokens: int = 1000
    ai_timeout: float = 30.0
    ai_max_retries: int = 3
    ai_backoff: float = 1.0

    # OCR
    ocr_languages: str = "eng+ara+deu+por"
    ocr_timeout: float = 30.0

    # Engine tables/thresholds override (JSON file)
    extraction_config_path: Optional[str] = None

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    download_timeout: float = 15.0

    log_level: str = "INFO"

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key)

    def extraction_config(self) -> ExtractionConfig:
        if self.extraction_config_path:
            return ExtractionConfig.from_json_file(self.extraction_config_path)
        return DEFAULT_CONFIG


@lru_cache
def get_settings() -> Settings:
    return Settings()
