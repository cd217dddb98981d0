from functools import lru_cache
from typing import List, Optional
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings configuration.

    Loads configuration from environment variables or .env file.
    """
    # Application settings
    app_name: str = "Adapty Global - Biomechanical Analysis API"
    version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="development")

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Prefix for API routes
    api_prefix: str = "/api"

    # CORS settings
    cors_origins: List[str] = ["*"]

    # Gemini settings
    gemini_api_key: Optional[SecretStr] = None
    gemini_model: str = "gemini-2.0-flash-exp"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_temperature: float = 0.4
    gemini_top_k: int = 32
    gemini_top_p: float = 1.0
    gemini_max_output_tokens: int = 2048
    default_image_mime_type: str = "image/jpeg"
    http_timeout_seconds: float = 60.0

    # Validación de valores (rango de puntuación, niveles de riesgo) además de claves
    strict_validation: bool = True

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_max_bytes: int = 10485760  # 10 MB
    log_backup_count: int = 5
    json_logging: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def api_key_configured(self) -> bool:
        return bool(self.gemini_api_key and self.gemini_api_key.get_secret_value().strip())

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Create a global settings instance
settings = get_settings()
