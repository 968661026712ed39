import json
from pathlib import Path

import pytest

from backend.src.services import config as config_module

ENV_VARS = (
    "MONGODB_URI",
    "MONGODB_DATABASE",
    "MONGODB_COLLECTION",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_CHAT_MODEL",
    "ALLOW_ORIGIN",
    "FIREBASE_SERVICE_ACCOUNT_JSON",
    "PORT",
    "LOG_LEVEL",
    "MAX_UPLOAD_BYTES",
    "FRONTEND_DIST",
)


@pytest.fixture(autouse=True)
def restore_config_cache(monkeypatch):
    """
    Ensure configuration cache is cleared between tests.
    """
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_module.reload_config()
    yield
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_module.reload_config()


def test_defaults_without_environment() -> None:
    cfg = config_module.reload_config()

    assert cfg.mongodb_uri == config_module.DEFAULT_MONGODB_URI
    assert cfg.mongodb_collection == "docs"
    assert cfg.port == 3000
    assert cfg.allow_origins == ["*"]
    assert cfg.gemini_api_key is None
    assert cfg.gemini_model == "gemini-2.5-flash-lite"
    assert cfg.gemini_chat_model == "gemini-2.5-flash"
    assert cfg.firebase_enabled is False
    assert cfg.max_upload_bytes == 10 * 1024 * 1024


def test_allow_origin_is_split_on_commas(monkeypatch) -> None:
    monkeypatch.setenv("ALLOW_ORIGIN", "http://localhost:5173, https://notely.app ,")

    cfg = config_module.reload_config()

    assert cfg.allow_origins == ["http://localhost:5173", "https://notely.app"]


def test_blank_allow_origin_means_any(monkeypatch) -> None:
    monkeypatch.setenv("ALLOW_ORIGIN", "  ")

    assert config_module.reload_config().allow_origins == ["*"]


def test_blank_gemini_key_is_treated_as_missing(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "   ")

    assert config_module.reload_config().gemini_api_key is None


def test_service_account_json_enables_firebase(monkeypatch) -> None:
    account = {"type": "service_account", "project_id": "notely-test"}
    monkeypatch.setenv("FIREBASE_SERVICE_ACCOUNT_JSON", json.dumps(account))

    cfg = config_module.reload_config()

    assert cfg.firebase_enabled is True
    assert cfg.firebase_service_account["project_id"] == "notely-test"


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '"text"'])
def test_service_account_must_be_a_json_object(monkeypatch, raw: str) -> None:
    monkeypatch.setenv("FIREBASE_SERVICE_ACCOUNT_JSON", raw)

    with pytest.raises(ValueError):
        config_module.reload_config()


def test_port_log_level_and_dist_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("FRONTEND_DIST", str(tmp_path))

    cfg = config_module.reload_config()

    assert cfg.port == 8080
    assert cfg.log_level == "DEBUG"
    assert cfg.frontend_dist == tmp_path.resolve()


def test_get_config_is_cached(monkeypatch) -> None:
    first = config_module.get_config()
    monkeypatch.setenv("PORT", "9999")

    assert config_module.get_config() is first
    assert config_module.reload_config().port == 9999
