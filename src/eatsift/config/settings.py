"""Settings for the EatSift service, read from YAML and EATSIFT_* variables.

Precedence, highest first:
  1. Keys present in the YAML file passed to ``Settings.from_yaml``
  2. Environment variables (EATSIFT_ prefix, ``__`` for nesting)
  3. Field defaults
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=4, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class SearchSettings(BaseModel):
    """Search behavior configuration."""

    backend: Literal["relational", "typesense"] = Field(
        default="relational",
        description="Active search backend adapter",
    )
    timeout_seconds: float = Field(default=5.0, gt=0, description="Upper bound for a single search call")
    suggestion_timeout_seconds: float = Field(default=2.0, gt=0, description="Upper bound for a suggestion call")
    suggestion_limit: int = Field(default=8, ge=1, le=8, description="Maximum backend suggestions per request")
    default_limit: int = Field(default=20, ge=1, description="Page size used when the caller's limit is invalid")
    max_limit: int | None = Field(
        default=None,
        ge=1,
        description="Optional ceiling on the page size (unset = no ceiling)",
    )


class RelationalSettings(BaseModel):
    """PostgREST / Supabase connection used by the relational ranking adapter."""

    base_url: str = Field(default="http://localhost:54321", description="PostgREST base URL")
    api_key: str | None = Field(default=None, description="Service or anon API key")
    function: str = Field(default="search_restaurants", description="Ranking RPC function name")
    suggestions_table: str = Field(default="search_suggestions", description="Suggestion term table")
    tags_view: str = Field(default="restaurant_search_tags", description="View exposing cuisine/feature slugs")
    timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")


class TypesenseSettings(BaseModel):
    """Typesense connection used by the external index adapter."""

    host: str = Field(default="localhost", description="Host name or URL, e.g. 'https://search.example.com:443'")
    api_key: str | None = Field(default=None, description="Typesense API key")
    collection: str = Field(default="restaurant_content", description="Searchable content collection")
    suggestion_collection: str | None = Field(
        default=None,
        description="Collection for autocomplete (defaults to the content collection)",
    )
    connection_timeout_seconds: float = Field(default=5.0, gt=0, description="HTTP timeout in seconds")
    use_record_store: bool = Field(
        default=True,
        description="Look up cuisine/feature slugs through the relational record store when hits omit them",
    )


class CacheSettings(BaseModel):
    """Search result cache configuration."""

    enabled: bool = Field(default=False, description="Cache successful search results")
    backend: Literal["memory", "redis"] = Field(default="memory", description="Cache backend")
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    ttl_seconds: int = Field(default=60, ge=1, description="Time-to-live for cached search results")
    max_entries: int = Field(default=10_000, ge=1, description="Entry cap for the in-memory backend")

    @field_validator("backend", mode="before")
    @classmethod
    def _lower_backend(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class EngineConfig(BaseModel):
    """Immutable search engine configuration.

    Built once at startup (see ``Settings.engine_config``) and handed to the
    engine; nothing mutates it afterwards.
    """

    model_config = ConfigDict(frozen=True)

    backend: str
    timeout_seconds: float = 5.0
    suggestion_timeout_seconds: float = 2.0
    suggestion_limit: int = Field(default=8, ge=1, le=8)
    default_limit: int = 20
    max_limit: int | None = None
    cache_ttl_seconds: int = 60


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the EATSIFT_ prefix.
    Nested settings use double underscores: EATSIFT_SERVER__PORT=9090

    Example:
        EATSIFT_SEARCH__BACKEND=typesense
        EATSIFT_TYPESENSE__HOST=https://search.example.com
        EATSIFT_TYPESENSE__API_KEY=xyz
    """

    model_config = {
        "env_prefix": "EATSIFT_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Application metadata
    app_name: str = Field(default="EatSift", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    # Component settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    relational: RelationalSettings = Field(default_factory=RelationalSettings)
    typesense: TypesenseSettings = Field(default_factory=TypesenseSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    def engine_config(self) -> EngineConfig:
        """Freeze the search-related settings into an ``EngineConfig``."""
        return EngineConfig(
            backend=self.search.backend,
            timeout_seconds=self.search.timeout_seconds,
            suggestion_timeout_seconds=self.search.suggestion_timeout_seconds,
            suggestion_limit=self.search.suggestion_limit,
            default_limit=self.search.default_limit,
            max_limit=self.search.max_limit,
            cache_ttl_seconds=self.cache.ttl_seconds,
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        YAML values are passed as constructor arguments, so they override
        environment variables for the keys they define.

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
            data = yaml.safe_load(f) or {}

        return cls(**data)
