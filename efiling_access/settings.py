# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Process-wide configuration for the e-filing access core.

Settings are read from the environment once, validated with Pydantic and
frozen. The global role set in particular is never mutated at runtime.
"""

import os
import logging
from typing import FrozenSet, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_GLOBAL_ROLE_CODES = "CEO,COO"
DEFAULT_ADMIN_SYSTEM_ROLES = "1,2"


def _split_csv(value) -> list:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(value or [])


class ScopingSettings(BaseModel):
    """Static configuration loaded at process start."""

    model_config = ConfigDict(frozen=True)

    environment: str = Field(default="development", description="Deployment environment")
    global_role_codes: FrozenSet[str] = Field(
        default=frozenset({"CEO", "COO"}),
        description="Role codes exempt from geography scoping"
    )
    admin_system_roles: FrozenSet[int] = Field(
        default=frozenset({1, 2}),
        description="System roles that bypass geography resolution entirely"
    )
    mongodb_uri: str = Field(default="mongodb://localhost:27017/efiling_dev", description="Directory MongoDB URI")
    mongodb_database: str = Field(default="efiling_dev", description="Directory database name")
    mongodb_max_pool_size: int = Field(default=10, ge=1, description="Connection pool size")
    mongodb_server_selection_timeout_ms: int = Field(default=5000, ge=1, description="Server selection deadline")
    otel_enabled: bool = Field(default=True, description="Enable OpenTelemetry tracing")
    service_version: str = Field(default="1.0.0", description="Reported service version")
    base_url: str = Field(default="http://localhost:5000", description="Base URL for problem type links")

    @field_validator('global_role_codes', mode='before')
    @classmethod
    def normalise_global_role_codes(cls, v):
        """Role codes are compared upper-cased."""
        return frozenset(code.strip().upper() for code in _split_csv(v) if code.strip())

    @field_validator('admin_system_roles', mode='before')
    @classmethod
    def parse_admin_system_roles(cls, v):
        """Accept a comma separated string of integers."""
        try:
            return frozenset(int(role) for role in _split_csv(v))
        except (TypeError, ValueError):
            raise ValueError(f'Invalid admin system roles: {v!r}')

    @classmethod
    def from_env(cls) -> "ScopingSettings":
        """Build settings from environment variables."""
        return cls(
            environment=os.getenv('ENVIRONMENT', 'development'),
            global_role_codes=os.getenv('EFILING_GLOBAL_ROLE_CODES', DEFAULT_GLOBAL_ROLE_CODES),
            admin_system_roles=os.getenv('EFILING_ADMIN_SYSTEM_ROLES', DEFAULT_ADMIN_SYSTEM_ROLES),
            mongodb_uri=os.getenv('MONGODB_URI', 'mongodb://localhost:27017/efiling_dev'),
            mongodb_database=os.getenv('MONGODB_DATABASE', 'efiling_dev'),
            mongodb_max_pool_size=int(os.getenv('MONGODB_MAX_POOL_SIZE', '10')),
            mongodb_server_selection_timeout_ms=int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000')),
            otel_enabled=os.getenv('OTEL_ENABLED', 'true').lower() == 'true',
            service_version=os.getenv('SERVICE_VERSION', '1.0.0'),
            base_url=os.getenv('BASE_URL', 'http://localhost:5000'),
        )


# Singleton instance for application use
_scoping_settings: Optional[ScopingSettings] = None


def get_scoping_settings() -> ScopingSettings:
    """Get the process-wide settings, loading them on first use."""
    global _scoping_settings
    if _scoping_settings is None:
        _scoping_settings = ScopingSettings.from_env()
        logger.info(
            "Scoping settings loaded",
            extra={
                "environment": _scoping_settings.environment,
                "global_role_codes": sorted(_scoping_settings.global_role_codes)
            }
        )
    return _scoping_settings


def reset_scoping_settings() -> None:
    """Drop the cached settings (used by tests between environments)."""
    global _scoping_settings
    _scoping_settings = None
