"""Application configuration using pydantic-settings."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App Info
    app_name: str = "Subscription Registry"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8400
    workers: int = 1

    # Database
    data_save_folder: str = "./data"
    db_file: str = "subscriptions.db"
    database_url_override: str | None = None

    @property
    def database_url(self) -> str:
        """SQLite database URL unless overridden."""
        if self.database_url_override:
            return self.database_url_override
        db_path = Path(self.data_save_folder) / self.db_file
        return f"sqlite+aiosqlite:///{db_path}"

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Resource types that have a storage handler registered
    stored_resource_types: Annotated[list[str], NoDecode] = [
        "Patient",
        "Practitioner",
        "Organization",
        "Encounter",
        "Observation",
        "Condition",
        "Procedure",
        "MedicationRequest",
        "DiagnosticReport",
        "AllergyIntolerance",
        "Immunization",
        "Appointment",
        "Subscription",
    ]

    # Optional YAML file listing recognized resource types
    resource_types_file: str | None = Field(
        default=None,
        alias="RESOURCE_TYPES_FILE",
        description="YAML file with a 'resource_types' list",
    )

    @field_validator("stored_resource_types", mode="before")
    @classmethod
    def split_resource_types(cls, v: Any) -> Any:
        """Accept a JSON list or a comma separated string from the environment."""
        if not isinstance(v, str):
            return v
        if v.strip().startswith("["):
            return json.loads(v)
        return [item.strip() for item in v.split(",") if item.strip()]


class ResourceTypesConfig:
    """Resource type list loaded from a YAML file."""

    def __init__(self, config_path: str | None = None):
        self._config: dict[str, Any] = {}
        if config_path:
            self.load(config_path)

    def load(self, config_path: str) -> None:
        """Load configuration from YAML file."""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                self._config = yaml.safe_load(f) or {}

    @property
    def resource_types(self) -> list[str] | None:
        """Configured resource type names, or None when not configured."""
        types = self._config.get("resource_types")
        if not types:
            return None
        return [str(t) for t in types]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_resource_types_config() -> ResourceTypesConfig:
    """Get cached resource types config instance."""
    settings = get_settings()
    return ResourceTypesConfig(settings.resource_types_file)
