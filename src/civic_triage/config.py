"""
Configuration settings for Civic Triage.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # === Application ===
    APP_NAME: str = "Civic Triage"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    
    # === Supabase (taxonomy + report storage) ===
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    STORE_TIMEOUT: float = 10.0  # seconds
    
    # === Gemini Configuration ===
    GEMINI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"
    GEMINI_MODEL: str = "gemini-3-flash-preview"
    GEMINI_TIMEOUT: float = 60.0  # seconds
    
    # === LLM Generation Parameters ===
    LLM_TEMPERATURE: float = 0.1  # Low for determinism
    LLM_TOP_P: float = 0.95
    LLM_MAX_TOKENS: int = 8192
    
    # === Retry ===
    INFERENCE_MAX_ATTEMPTS: int = 4
    RETRY_DELAYS_MS: list[int] = [0, 2000, 4000, 8000]  # Delay before attempt N
    
    # === Image Fetch ===
    IMAGE_FETCH_TIMEOUT: float = 20.0  # seconds
    DEFAULT_IMAGE_MIME_TYPE: str = "image/jpeg"
    
    # === Prompt ===
    PROMPT_TEMPLATES_DIR: Optional[str] = None  # None = templates shipped with the package
    
    # === HTTP ===
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    
    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
