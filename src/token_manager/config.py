"""Configuration system for token-manager.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (TM_*) -> .env file -> field defaults.

Command-line overrides are applied via resolve_config() which creates a new
config instance without mutating the defaults.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from token_manager.exceptions import ConfigValidationError


class TokenManagerConfig(BaseSettings):
    """Configuration for the token-manager server and client.

    Resolution order: init kwargs -> env vars (TM_*) -> .env file -> defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Transport ---

    bind_address: str = Field(
        default="0.0.0.0:50051",
        description="Address the server listens on (host:port or unix:///path)",
    )
    server_address: str = Field(
        default="localhost:50051",
        description="Address the client connects to",
    )
    max_workers: int = Field(
        default=10,
        description="Server thread pool size; each request runs on one worker",
    )
    grpc_timeout_ms: float = Field(
        default=5000.0,
        description="Client-side deadline per RPC in milliseconds",
    )
    grace_period_s: float = Field(
        default=5.0,
        description="Seconds in-flight RPCs get to finish on shutdown",
    )

    # --- Table ---

    lock_mode: str = Field(
        default="per_token",
        description="Table concurrency control: 'global' or 'per_token'",
    )

    # --- Diagnostics ---

    dump_level: str = Field(
        default="summary",
        description="Token dump verbosity after each mutation: 'none', 'summary', 'full'",
    )
    diagnostic_mode: bool = Field(
        default=False,
        description="Keep every token event in memory for analysis",
    )


_ALL_FIELDS: frozenset[str] = frozenset(TokenManagerConfig.model_fields.keys())


def resolve_config(
    defaults: TokenManagerConfig,
    overrides: dict[str, Any] | None,
) -> TokenManagerConfig:
    """Create a new config instance merging defaults with explicit overrides.

    ``None`` values in *overrides* mean "not given" and are skipped, so an
    argparse namespace can be passed through ``vars()`` directly.

    Args:
        defaults: The base configuration loaded from environment.
        overrides: Field name to value mapping.

    Returns:
        A new TokenManagerConfig with overrides applied, or *defaults* itself
        if there is nothing to apply.

    Raises:
        ConfigValidationError: If a key is not a config field.
    """
    if not overrides:
        return defaults

    applied: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in _ALL_FIELDS:
            raise ConfigValidationError(f"Unknown config field: '{key}'")
        if value is not None:
            applied[key] = value

    if not applied:
        return defaults

    # model_validate (not model_copy) so that string values are coerced.
    merged = defaults.model_dump()
    merged.update(applied)
    return TokenManagerConfig.model_validate(merged)
