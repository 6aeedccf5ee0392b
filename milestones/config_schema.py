"""Pydantic schema for configuration validation.

All config values are validated at startup. Typos and invalid values
fail fast with clear error messages.

Usage:
    from milestones.config_schema import load_validated_config, AppConfig
    config = load_validated_config("config/config.yaml")
    # config is now a validated AppConfig instance
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# BASE MODEL WITH STRICT VALIDATION
# =============================================================================

class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# REGISTRY MODELS
# =============================================================================

# Heights are unsigned 64-bit on the host ledger
UINT64_MAX: int = 2**64 - 1


class MethodConfig(StrictModel):
    """Configuration for a registry method."""

    cost: int = Field(default=0, ge=0, description="Compute cost to invoke method")
    description: str = Field(default="", description="Method description for callers")


class RegistryMethodsConfig(StrictModel):
    """Milestone registry method configurations."""

    initialize: MethodConfig = Field(
        default_factory=lambda: MethodConfig(
            description="Create your milestone. Args: [description]"
        )
    )
    assign: MethodConfig = Field(
        default_factory=lambda: MethodConfig(
            description="Create a milestone for another principal. Args: [target_id, description]"
        )
    )
    modify: MethodConfig = Field(
        default_factory=lambda: MethodConfig(
            description="Overwrite your milestone. Args: [description, completed]"
        )
    )
    terminate: MethodConfig = Field(
        default_factory=lambda: MethodConfig(
            description="Delete your milestone (annotations are kept). Args: []"
        )
    )
    set_priority: MethodConfig = Field(
        default_factory=lambda: MethodConfig(
            description="Set priority tier 1-3 on your milestone. Args: [tier]"
        )
    )
    set_deadline: MethodConfig = Field(
        default_factory=lambda: MethodConfig(
            description="Set a deadline N blocks from now. Args: [increment]"
        )
    )
    get_status: MethodConfig = Field(
        default_factory=lambda: MethodConfig(
            description="Status of your milestone. Never fails. Args: []"
        )
    )
    get_priority: MethodConfig = Field(
        default_factory=lambda: MethodConfig(
            description="Your priority annotation, if any. Args: []"
        )
    )
    get_deadline: MethodConfig = Field(
        default_factory=lambda: MethodConfig(
            description="Your deadline annotation, if any. Args: []"
        )
    )


class RegistryConfig(StrictModel):
    """Milestone registry configuration."""

    id: str = Field(default="milestone_registry", description="Artifact ID")
    description: str = Field(
        default="Per-principal milestone registry. One milestone per principal, "
                "with optional priority and block deadline.",
        description="Artifact description"
    )
    description_max_length: int = Field(
        default=100,
        gt=0,
        le=100,
        description="Maximum milestone description length in characters (may only tighten)"
    )
    max_tier: int = Field(
        default=3,
        ge=1,
        le=3,
        description="Highest priority tier, tiers run from 1 to max_tier (may only tighten)"
    )
    max_height: int = Field(
        default=UINT64_MAX,
        gt=0,
        le=UINT64_MAX,
        description="Largest representable block height"
    )
    methods: RegistryMethodsConfig = Field(default_factory=RegistryMethodsConfig)


# =============================================================================
# STORE MODEL
# =============================================================================

class StoreConfig(StrictModel):
    """Keyed record store configuration."""

    backend: Literal["memory", "sqlite"] = Field(
        default="memory",
        description="Store backend"
    )
    path: str | None = Field(
        default=None,
        description="SQLite database file (required for the sqlite backend)"
    )

    @model_validator(mode="after")
    def check_path(self) -> StoreConfig:
        """The sqlite backend needs a database path."""
        if self.backend == "sqlite" and not self.path:
            raise ValueError("store.path is required when store.backend is 'sqlite'")
        return self


# =============================================================================
# LOGGING MODEL
# =============================================================================

class LoggingConfig(StrictModel):
    """Logging configuration."""

    output_file: str | None = Field(
        default=None,
        description="JSONL file for registry events (None disables the event log)"
    )
    default_recent: int = Field(
        default=50,
        gt=0,
        description="Default number of recent events to return"
    )
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level for the server process"
    )


# =============================================================================
# SERVER MODEL
# =============================================================================

class ServerConfig(StrictModel):
    """HTTP server configuration."""

    host: str = Field(
        default="127.0.0.1",
        description="Host to bind (0.0.0.0 for all interfaces)"
    )
    port: int = Field(
        default=8080,
        gt=0,
        description="Port number"
    )
    principal_header: str = Field(
        default="X-Principal-Id",
        description="Header carrying the authenticated caller principal"
    )
    initial_height: int = Field(
        default=0,
        ge=0,
        description="Block height the server starts at"
    )


# =============================================================================
# ROOT CONFIG
# =============================================================================

class AppConfig(StrictModel):
    """Root configuration model for the entire application.

    All fields have sensible defaults, so an empty config file is valid.
    """

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


# =============================================================================
# LOADING FUNCTIONS
# =============================================================================

def load_validated_config(config_path: str | Path = "config/config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config YAML file.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid (with detailed error message).
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw_config)


def validate_config_dict(config_dict: dict[str, Any]) -> AppConfig:
    """Validate a configuration dictionary.

    Args:
        config_dict: Configuration as a dictionary.

    Returns:
        Validated AppConfig instance.

    Raises:
        pydantic.ValidationError: If config is invalid.
    """
    return AppConfig.model_validate(config_dict)


__all__ = [
    "AppConfig",
    "RegistryConfig",
    "RegistryMethodsConfig",
    "MethodConfig",
    "StoreConfig",
    "LoggingConfig",
    "ServerConfig",
    "UINT64_MAX",
    "load_validated_config",
    "validate_config_dict",
]
