from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "Practice Records API"
    database_url: str = (
        "postgresql+psycopg2://practice:practice@db:5432/practice"  # pragma: allowlist secret
    )
    api_prefix: str = "api"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    docs_dir: Path = PACKAGE_DIR / "apidocs"
    create_schema: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def api_root(self) -> str:
        """Return the normalized path prefix every resource is mounted under."""

        prefix = self.api_prefix.strip("/")
        return f"/{prefix}" if prefix else ""


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


settings = get_settings()
