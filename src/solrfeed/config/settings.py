"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (SOLRFEED_ prefix)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from solrfeed.core.mapping import MappingProfile


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=1, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class SolrSettings(BaseModel):
    """Connection settings for the Solr collection acting as Query Executor."""

    base_url: str = Field(default="http://localhost:8983/solr", description="Solr base URL")
    collection: str = Field(default="emails", description="Solr collection/core name")
    username: str | None = Field(default=None, description="Basic-auth username")
    password: str | None = Field(default=None, description="Basic-auth password")
    timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds")
    default_operator: str = Field(default="AND", description="edismax q.op for free-text queries")
    query_fields: str = Field(default="subject^2 body sender", description="edismax qf parameter")


class RecordTypeSpec(BaseModel):
    """A record type advertised in the description document."""

    name: str = Field(description="Record type name, matches the feed recordType")
    label: str | None = Field(default=None, description="Human-readable label (defaults to name)")
    sortable_fields: list[str] = Field(default_factory=list, description="Fields the endpoint can sort on")


class DescriptionSettings(BaseModel):
    """Content of the published OpenSearch description document."""

    public_url: str = Field(
        default="http://localhost:8080",
        description="Externally reachable base URL used in the query template",
    )
    short_name: str = Field(default="Solr", max_length=16, description="OpenSearch ShortName")
    description: str = Field(
        default="Federated search over an Apache Solr collection",
        description="OpenSearch Description",
    )
    contact: str | None = Field(default=None, description="Maintainer email address")
    record_types: list[RecordTypeSpec] = Field(
        default_factory=list,
        description="Advertised record types; empty means the mapping profile's record type",
    )
    sortable_fields: list[str] = Field(
        default_factory=lambda: ["date"],
        description="Sortable fields for the default record type",
    )
    max_results: int = Field(default=200, ge=1, description="Advertised maximum-results ceiling")
    input_encoding: str = Field(default="UTF-8", description="Accepted query encoding")
    output_encoding: str = Field(default="UTF-8", description="Feed encoding")

    @field_validator("public_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")


class FeedSettings(BaseModel):
    """Feed-level metadata written on every rendered feed."""

    title: str = Field(default="Search results", description="Feed title prefix")
    feed_id: str = Field(default="urn:solrfeed:search", description="Stable feed identifier")


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the SOLRFEED_ prefix.
    Nested settings use double underscores: SOLRFEED_SERVER__PORT=9090

    Example:
        SOLRFEED_SOLR__BASE_URL=http://solr:8983/solr
        SOLRFEED_SOLR__COLLECTION=emails
        SOLRFEED_MAPPING__FAILURE_MODE=lenient
        SOLRFEED_MAPPING__FLATTEN_DELIMITER=", "
    """

    model_config = {
        "env_prefix": "SOLRFEED_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Application metadata
    app_name: str = Field(default="solrfeed", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    # Component settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    solr: SolrSettings = Field(default_factory=SolrSettings)
    mapping: MappingProfile = Field(default_factory=MappingProfile)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    description: DescriptionSettings = Field(default_factory=DescriptionSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values present in the YAML file override environment variables;
        anything the file leaves out still falls back to the environment.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        return cls(**data)
