"""
Configuration management for the Grant Proposal Assistant backend.
Reads environment variables and provides typed configuration objects.
"""

from typing import List, Optional
from pathlib import Path
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

BACKEND_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Model Configuration
    llm_config_path: str = Field(str(BACKEND_DIR / "llm_config.yaml"))
    llm_config: Optional[dict] = None

    # API Keys
    google_api_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("GOOGLE_API_KEY", "GOOGLE_AI_API_KEY")
    )
    openai_api_key: Optional[str] = Field(None)

    # Database Configuration
    database_url: Optional[str] = Field(None)
    postgres_user: str = Field("postgres")
    postgres_password: str = Field("")
    postgres_host: str = Field("localhost")
    postgres_port: int = Field(5432)
    postgres_db: str = Field("grant_proposals")

    # Application Configuration
    debug: bool = Field(False)
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost", "http://localhost:3000"]
    )

    environment: str = Field("development")

    def model_post_init(self, __context):
        self.llm_config = self._load_config(Path(self.llm_config_path))

    def get_database_url(self) -> str:
        """Get the database URL based on environment and configuration."""
        # If DATABASE_URL is explicitly set, use it
        if self.database_url:
            return self.database_url

        # Use PostgreSQL for production environments, SQLite for development/testing
        if self.environment.lower() in ["production", "prod", "staging", "stage"]:
            return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        else:
            return "sqlite:///./grant_proposals.db"

    def _load_config(self, path: Path) -> dict:
        """Load configuration from a YAML file."""
        with open(path, "r") as file:
            return yaml.safe_load(file) or {}


# Global settings instance
settings = Settings()
