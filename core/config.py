# WORKFLOW: Core configuration management for the dank-extract pipeline.
# Used by: CLI entry point, pipeline orchestration, database session factory
# Configuration includes:
# - Socrata API access (app token, page size, request timeout)
# - Data root, cache age and output locations
# - Relational store connection URL
# - Dataset selection and output compression
# - Measurement cleaning patterns (extra known-bad values from the feed)
# - Logging level
#
# Loaded at startup from DANK_* environment variables or a .env file.
# CLI flags override these values for a single run.

import json
from pathlib import Path
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


DANK_DIRNAME = ".dank"
DEFAULT_DB_FILENAME = "dank-extract.duckdb"

AVAILABLE_DATASETS = ["brands", "credentials", "applications", "sales", "tax"]


class Settings(BaseSettings):
    # Socrata
    app_token: str = ""
    batch_size: int = 5000
    request_timeout: float = 60.0

    # Storage
    root_dir: str = "."
    output_dir: str = "."
    database_url: str = ""
    max_cache_age_hours: float = 24.0

    # Run selection
    datasets: Annotated[List[str], NoDecode] = list(AVAILABLE_DATASETS)
    compress: bool = False

    # Measurement cleaning
    extra_bad_literals: Annotated[List[str], NoDecode] = []
    extra_bad_prefixes: Annotated[List[str], NoDecode] = []

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "DANK_"
        env_file = ".env"
        case_sensitive = False

    @field_validator("datasets", "extra_bad_literals", "extra_bad_prefixes", mode="before")
    @classmethod
    def split_list(cls, value):
        """Accept a JSON array or a comma-separated string from the environment."""
        if not isinstance(value, str):
            return value
        value = value.strip()
        if value.startswith("["):
            return json.loads(value)
        return [part.strip() for part in value.split(",") if part.strip()]

    @property
    def dank_dir(self) -> Path:
        return Path(self.root_dir) / DANK_DIRNAME

    @property
    def db_file(self) -> Path:
        return self.dank_dir / DEFAULT_DB_FILENAME

    def resolved_database_url(self) -> str:
        """Database URL to use, defaulting to a DuckDB file under the data root."""
        if self.database_url:
            return self.database_url
        return f"duckdb:///{self.db_file}"


settings = Settings()
