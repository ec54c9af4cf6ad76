"""Configuration settings for the curation pipeline."""

import os
from functools import lru_cache
import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# CURATION CONFIGURATION
# ----------------------------------------------------------------------

class CurationConfig(BaseSettings):
    """Endpoints, caching and limits used by the curation services."""
    model_config = SettingsConfigDict(env_prefix="CURATION_", extra="ignore")

    api_base_url: str = "http://localhost:8000"
    resource_types_path: str = "/api/v1/resource-types/ernie"
    validate_doi_path: str = "/api/validate-doi"

    request_timeout_seconds: float = 5.0
    resource_type_cache_ttl: int = 300  # seconds (5 min)

    # XML upload limits
    max_upload_bytes: int = 4 * 1024 * 1024
    allowed_upload_extensions: tuple = (".xml",)
    allowed_upload_content_types: tuple = ("application/xml", "text/xml")

    default_publisher: str = "GFZ Data Services"
    doi_resolver_base: str = "https://doi.org/"

    @property
    def resource_types_url(self) -> str:
        return self.api_base_url.rstrip("/") + self.resource_types_path

    @property
    def validate_doi_url(self) -> str:
        return self.api_base_url.rstrip("/") + self.validate_doi_path


# ----------------------------------------------------------------------
# LOGGING CONFIGURATION
# ----------------------------------------------------------------------

class LoggingConfig(BaseSettings):
    """Logging configuration."""
    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")

    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s [%(levelname)s] %(message)s"


# ----------------------------------------------------------------------
# APP SETTINGS
# ----------------------------------------------------------------------

class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    curation: CurationConfig = Field(default_factory=CurationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# ----------------------------------------------------------------------
# Lazy accessors (cached singletons)
# ----------------------------------------------------------------------

@lru_cache()
def get_config() -> Settings:
    """Return global app configuration."""
    return Settings()


@lru_cache()
def get_curation_config() -> CurationConfig:
    """Return curation service configuration."""
    return get_config().curation


@lru_cache()
def get_logging_config() -> LoggingConfig:
    """Return logging configuration."""
    return get_config().logging
