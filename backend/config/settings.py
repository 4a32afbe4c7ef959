from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List

class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "PicShine API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # External APIs
    # Optional at load time so a missing key is reported at startup instead of crashing the import
    GOOGLE_API_KEY: Optional[str] = None
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_IMAGE_MODEL: str = "gemini-2.0-flash-preview-image-generation"
    GEMINI_TEXT_MODEL: str = "gemini-2.0-flash"

    # Processing Configuration
    # None means wait for the provider indefinitely
    GENERATION_TIMEOUT_SECONDS: Optional[float] = None
    IMAGE_FETCH_TIMEOUT_SECONDS: Optional[float] = None

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:9002",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:9002"
    ]

# Global settings instance
settings = Settings()
