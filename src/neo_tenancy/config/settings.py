"""
Configuration for neo-tenancy.

Settings are read from the environment (prefix ``TENANCY_``) and an optional
``.env`` file.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DatabaseSchemas, DEFAULT_INVITATION_EXPIRATION_HOURS


class TenancySettings(BaseSettings):
    """Runtime settings for the tenant directory."""
    
    model_config = SettingsConfigDict(
        env_prefix="TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Database Configuration
    database_url: str = Field(default="", description="asyncpg DSN for the directory store")
    database_schema: str = Field(default=DatabaseSchemas.TENANCY)
    authz_schema: str = Field(default=DatabaseSchemas.AUTHZ)
    db_pool_min_size: int = Field(default=2, ge=1)
    db_pool_max_size: int = Field(default=10, ge=1)
    db_command_timeout: int = Field(default=60, ge=1)
    
    # Redis Cache Configuration
    redis_url: Optional[str] = Field(default=None)
    cache_key_prefix: str = Field(default="neo_tenancy")
    cache_ttl_permissions: int = Field(default=600, ge=0)  # 10 minutes
    
    # Directory behaviour
    invitation_expiration_hours: int = Field(default=DEFAULT_INVITATION_EXPIRATION_HOURS, ge=1)
    enforce_organization_status: bool = Field(default=True)
    
    # Limits (None means unlimited)
    max_organizations_per_user: Optional[int] = Field(default=None, ge=1)
    max_members_per_organization: Optional[int] = Field(default=None, ge=1)
    max_teams_per_organization: Optional[int] = Field(default=None, ge=1)
    
    @field_validator("database_schema", "authz_schema")
    @classmethod
    def validate_schema_name(cls, v: str) -> str:
        if not v.replace("_", "").isalnum():
            raise ValueError(f"Invalid schema name: {v}")
        return v
    
    @field_validator("database_url")
    @classmethod
    def strip_driver_suffix(cls, v: str) -> str:
        return v.replace("+asyncpg", "")
    
    @property
    def is_cache_enabled(self) -> bool:
        """Check if Redis caching is configured."""
        return self.redis_url is not None


@lru_cache()
def get_settings() -> TenancySettings:
    """Return the process-wide settings instance."""
    return TenancySettings()
