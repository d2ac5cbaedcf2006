"""Integration tests for the composition root.

These tests verify that configuration loads and validates, and that the
store wiring picks the right adapter for each backend.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from satchel.adapters.store.cookie import CookieStore
from satchel.adapters.store.file import FileStore
from satchel.adapters.store.memory import MemoryStore
from satchel.config import Settings, load_settings
from satchel.main import build_store, build_store_factory, configure_logging


class TestConfigurationLoading:
    """Test configuration loading and validation."""

    def test_load_settings_with_defaults(self) -> None:
        settings = load_settings()
        assert settings.store_backend == "memory"
        assert settings.run_mode == "cli"
        assert settings.default_cart_id == "default"
        assert settings.autosave is True
        assert settings.log_level == "INFO"

    def test_load_settings_from_env(self) -> None:
        with patch.dict(
            os.environ,
            {
                "STORE_BACKEND": "file",
                "FILE_STORE_PATH": "/tmp/satchel-carts",
                "DEFAULT_CART_ID": "kiosk-1",
                "LOG_LEVEL": "DEBUG",
            },
        ):
            settings = load_settings()
            assert settings.store_backend == "file"
            assert settings.file_store_path == "/tmp/satchel-carts"
            assert settings.default_cart_id == "kiosk-1"
            assert settings.log_level == "DEBUG"

    def test_load_settings_from_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / "custom.env"
        env_file.write_text("RUN_MODE=http\nHTTP_PORT=9090\n")
        settings = load_settings(str(env_file))
        assert settings.run_mode == "http"
        assert settings.http_port == 9090

    @pytest.mark.parametrize(
        "overrides",
        [
            {"default_cart_id": "  "},
            {"cookie_prefix": ""},
            {"cookie_max_age_seconds": 0},
            {"http_port": 70000},
            {"store_backend": "redis"},
        ],
    )
    def test_invalid_settings_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            Settings(**overrides)


class TestStoreWiring:
    """Test adapter selection."""

    def test_memory_backend(self) -> None:
        assert isinstance(build_store(Settings(store_backend="memory")), MemoryStore)

    def test_file_backend(self, tmp_path: Path) -> None:
        store = build_store(
            Settings(store_backend="file", file_store_path=str(tmp_path / "carts"))
        )
        assert isinstance(store, FileStore)
        assert store.storage_path == tmp_path / "carts"

    def test_cookie_backend_needs_http(self) -> None:
        with pytest.raises(ValueError, match="http mode"):
            build_store(Settings(store_backend="cookie"))

    def test_shared_store_factory(self) -> None:
        factory = build_store_factory(Settings(store_backend="memory"))
        assert factory({}) is factory({"cart_x": "y"})

    def test_cookie_store_factory_builds_per_request(self) -> None:
        factory = build_store_factory(
            Settings(store_backend="cookie", cookie_prefix="bag_", cookie_max_age_seconds=60)
        )
        first = factory({})
        second = factory({"bag_x": "e30"})
        assert isinstance(first, CookieStore)
        assert first is not second
        assert second.exists("x")
        assert first.max_age == 60


def test_configure_logging_accepts_both_formats() -> None:
    configure_logging("DEBUG", "json")
    configure_logging("INFO", "text")
