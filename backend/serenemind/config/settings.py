"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "SereneMind"
    app_version: str = "1.0.0"
    debug: bool = True

    # Storage
    local_storage_path: str = "./data"
    sessions_dir: str = "sessions"  # relative to local_storage_path

    # Conversation
    evaluation_interval: int = 5  # evaluate every N stored messages

    # LLM Provider settings
    llm_provider: str = "gemini"  # "gemini" or "openai"
    llm_api_key: Optional[str] = None
    llm_model: Optional[str] = None  # uses provider default if not set
    llm_base_url: Optional[str] = None  # uses provider default if not set
    llm_timeout: float = 120.0
    llm_temperature: float = 0.7

    # Legacy key (still accepted)
    gemini_api_key: Optional[str] = None

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/serenemind.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all API requests/responses

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def resolved_llm_api_key(self) -> Optional[str]:
        """API key for the configured provider, falling back to the legacy Gemini key."""
        return self.llm_api_key or self.gemini_api_key


settings = Settings()
