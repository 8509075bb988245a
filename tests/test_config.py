"""Tests for token_manager.config.

Covers:
- Default values
- Environment variable loading (TM_ prefix)
- resolve_config merge logic and unknown-key rejection
"""

from __future__ import annotations

import pytest

from token_manager.config import TokenManagerConfig, resolve_config
from token_manager.exceptions import ConfigValidationError


def _config(**overrides: object) -> TokenManagerConfig:
    return TokenManagerConfig(_env_file=None, **overrides)  # type: ignore[arg-type]


class TestDefaults:
    """Verify default values."""

    def test_transport_defaults(self) -> None:
        cfg = _config()
        assert cfg.bind_address == "0.0.0.0:50051"
        assert cfg.server_address == "localhost:50051"
        assert cfg.max_workers == 10
        assert cfg.grpc_timeout_ms == 5000.0
        assert cfg.grace_period_s == 5.0

    def test_table_defaults(self) -> None:
        assert _config().lock_mode == "per_token"

    def test_diagnostic_defaults(self) -> None:
        cfg = _config()
        assert cfg.dump_level == "summary"
        assert cfg.diagnostic_mode is False


class TestEnvironment:
    """Environment variables override defaults."""

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TM_LOCK_MODE", "global")
        monkeypatch.setenv("TM_MAX_WORKERS", "32")
        monkeypatch.setenv("TM_DIAGNOSTIC_MODE", "true")
        cfg = _config()
        assert cfg.lock_mode == "global"
        assert cfg.max_workers == 32
        assert cfg.diagnostic_mode is True

    def test_init_kwargs_beat_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TM_DUMP_LEVEL", "full")
        assert _config(dump_level="none").dump_level == "none"

    def test_unprefixed_env_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOCK_MODE", "global")
        assert _config().lock_mode == "per_token"


class TestResolveConfig:
    """Tests for resolve_config merge logic."""

    def test_none_overrides_returns_defaults(self) -> None:
        defaults = _config()
        assert resolve_config(defaults, None) is defaults

    def test_all_none_values_return_defaults(self) -> None:
        defaults = _config()
        assert resolve_config(defaults, {"lock_mode": None, "max_workers": None}) is defaults

    def test_override_applied(self) -> None:
        defaults = _config()
        result = resolve_config(defaults, {"lock_mode": "global", "bind_address": None})
        assert result.lock_mode == "global"
        assert result.bind_address == defaults.bind_address
        assert result is not defaults
        assert defaults.lock_mode == "per_token"

    def test_string_values_coerced(self) -> None:
        result = resolve_config(_config(), {"max_workers": "4"})
        assert result.max_workers == 4

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ConfigValidationError, match="lock_type"):
            resolve_config(_config(), {"lock_type": "global"})
