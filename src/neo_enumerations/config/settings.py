"""
Settings for neo-enumerations.

Global switches for enumeration caching, read from the environment with the
``NEO_ENUM_`` prefix. Per-type options on EnumerationType take precedence.
"""
from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

from .constants import MissPolicy, EnumerationDefaults


class EnumerationSettings(BaseSettings):
    """Process-wide enumeration cache settings."""
    
    model_config = SettingsConfigDict(
        env_prefix="NEO_ENUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Caching
    perform_caching: bool = Field(default=True, description="Enable enumeration caching globally")
    default_miss_policy: MissPolicy = Field(default=MissPolicy.RAISE, description="Miss policy for types that do not set one")
    prefer_incremental_updates: bool = Field(
        default=True,
        description="Patch the cache after single-record writes instead of invalidating it"
    )
    
    # Backing store
    database_url: Optional[str] = Field(default=None, description="PostgreSQL DSN for the asyncpg repository")
    database_schema: str = Field(default=EnumerationDefaults.DATABASE_SCHEMA, description="Schema holding enumeration tables")
    id_column: str = Field(default=EnumerationDefaults.ID_ATTRIBUTE, description="Primary key column of enumeration tables")
    
    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="simple", description="Log format: simple, detailed or json")
    enable_store_logging: bool = Field(default=False, description="Log store operations below WARNING")
    
    @field_validator('database_schema', 'id_column')
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Reject identifiers that cannot be safely interpolated into SQL."""
        if not v or not v.replace("_", "").isalnum():
            raise ValueError(f"Invalid SQL identifier: {v!r}")
        return v
    
    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return v
    
    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ("simple", "detailed", "json"):
            raise ValueError(f"Invalid log format: {v}. Expected simple, detailed or json")
        return v


@lru_cache()
def get_settings() -> EnumerationSettings:
    """Get the cached process-wide settings instance."""
    return EnumerationSettings()
