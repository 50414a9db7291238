from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "HostCert API"
    app_env: str = "development"
    frontend_url: str = "http://localhost:3000"

    # Database (PostgreSQL in deployment or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./hostcert_dev.db",
        alias="DATABASE_URL",
    )

    # Object storage key layout: {prefix}/{application_id}/documents/{document_id}{ext}
    storage_key_prefix: str = Field(default="applications", alias="STORAGE_KEY_PREFIX")

    # Reviewers/administrators may create or delete documents on behalf of hosts
    privileged_document_writes: bool = Field(
        default=False, alias="PRIVILEGED_DOCUMENT_WRITES",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()
