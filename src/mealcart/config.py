"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Instacart partner API
    instacart_api_key: str = ""
    instacart_base_url: str = ""  # Empty selects the dev or prod host below
    instacart_dev_url: str = "https://connect.dev.instacart.tools"
    instacart_prod_url: str = "https://connect.instacart.com"
    partner_linkback_url: str = "http://localhost:5173/meal-plan"
    partner_timeout: float = 15.0  # seconds, single attempt

    # Pantry matching
    pantry_match_threshold: float = 90.0  # rapidfuzz score 0-100

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:5173,http://localhost:8000"

    @property
    def instacart_url(self) -> str:
        """Get the Instacart API host for the current environment."""
        if self.instacart_base_url:
            return self.instacart_base_url.rstrip("/")
        if self.is_production:
            return self.instacart_prod_url
        return self.instacart_dev_url

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    @property
    def origins(self) -> list[str]:
        """CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
