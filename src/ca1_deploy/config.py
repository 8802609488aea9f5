"""
Configuration management for ca1-deploy.

Supports loading from a YAML config file, environment variables, and CLI args.
Uses Pydantic Settings for validation and type coercion. Resource names are
part of the fixed topology and are not configurable.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Set

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ca1_deploy.core.desired_state import (
    DEFAULT_ADMIN_USERNAME,
    DEFAULT_BOOTSTRAP_FILE,
    DEFAULT_LOCATION,
    DesiredState,
)


# ── Azure Auth Config ──────────────────────────────────────────────────────────


class AzureAuthConfig(BaseModel):
    """Azure authentication configuration."""

    method: str = Field(default="cli", description="Auth method: cli, default, managed-identity, service-principal")
    subscription_id: Optional[str] = Field(default=None, description="Subscription to provision into")
    tenant_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    managed_identity_client_id: Optional[str] = None


# ── Root Config ────────────────────────────────────────────────────────────────


DEFAULT_CONFIG_DIR = Path.home() / ".ca1-deploy"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"


class DeployConfig(BaseSettings):
    """Root configuration for ca1-deploy."""

    model_config = SettingsConfigDict(
        env_prefix="CA1_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    location: str = Field(default=DEFAULT_LOCATION, description="Azure region for new resources")
    admin_username: str = Field(default=DEFAULT_ADMIN_USERNAME, description="VM local admin user")
    bootstrap_file: str = Field(default=DEFAULT_BOOTSTRAP_FILE, description="cloud-init file read before VM creation")
    log_level: str = Field(default="INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    azure: AzureAuthConfig = Field(default_factory=AzureAuthConfig)

    @classmethod
    def load(cls, config_path: Optional[str] = None, **overrides: Any) -> "DeployConfig":
        """
        Load configuration from YAML file, env vars, and overrides.

        Priority (highest to lowest):
        1. Explicit overrides (CLI args)
        2. Environment variables (CA1_*)
        3. YAML config file
        4. Defaults
        """
        yaml_data: Dict[str, Any] = {}

        path = Path(config_path) if config_path else DEFAULT_CONFIG_FILE

        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

        # Init kwargs beat env vars in pydantic-settings, so YAML values that
        # have an env counterpart are dropped. Nested blocks are filtered per
        # key and deep-merged with the env values.
        yaml_data = cls._without_env_keys(yaml_data, {name.upper() for name in os.environ})
        explicit = {k: v for k, v in overrides.items() if v is not None}
        merged = {**yaml_data, **explicit}
        return cls(**merged)

    @classmethod
    def _without_env_keys(cls, data: Dict[str, Any], env_names: Set[str], prefix: str = "CA1_") -> Dict[str, Any]:
        kept: Dict[str, Any] = {}
        for key, value in data.items():
            name = f"{prefix}{key}".upper()
            if isinstance(value, dict):
                kept[key] = cls._without_env_keys(value, env_names, name + "__")
            elif name not in env_names:
                kept[key] = value
        return kept

    def desired_state(self) -> DesiredState:
        """The topology to reconcile, with this config's per-run inputs."""
        return DesiredState(
            location=self.location,
            admin_username=self.admin_username,
            bootstrap_file=self.bootstrap_file,
        )
