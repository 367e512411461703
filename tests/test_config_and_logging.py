"""Environment-driven configuration and structured log redaction."""

import json
import logging
from pathlib import Path

import pytest

from models.taxonomy import clamp_score, material_score, normalize_season, round_half_up
from wardrobe_app.app import WardrobeApp
from wardrobe_app.config import AppConfig
from wardrobe_app.logging_config import JsonFormatter, correlation_context, redact_for_log


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in (
        "APP_ENV",
        "APP_CONFIG_PATH",
        "APP_CONFIG_DIR",
        "GEMINI_API_KEY",
        "MODEL",
        "OPENWEATHER_API_KEY",
        "DEFAULT_LOCATION",
        "STORE_BACKEND",
        "STORE_PATH",
        "SEED_DEMO_DATA",
        "WEATHER_TIMEOUT_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_environment() -> None:
    config = AppConfig.from_env()
    assert config.model == "gemini-1.5-flash"
    assert config.default_location == "New York"
    assert config.store_backend == "memory"
    assert config.seed_demo_data is True
    assert config.gemini_api_key is None


def test_yaml_file_is_overridden_by_environment(tmp_path: Path, monkeypatch) -> None:
    env_dir = tmp_path / "environments"
    env_dir.mkdir()
    (env_dir / "staging.yaml").write_text(
        "# staging\n"
        "default_location: \"Berlin\"\n"
        "store_backend: sqlite\n"
        "seed_demo_data: false\n"
        "weather_timeout_seconds: 2.5\n"
    )
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("APP_CONFIG_DIR", str(env_dir))
    monkeypatch.setenv("DEFAULT_LOCATION", "Madrid")

    config = AppConfig.from_env()

    assert config.environment == "staging"
    assert config.default_location == "Madrid"
    assert config.store_backend == "sqlite"
    assert config.seed_demo_data is False
    assert config.weather_timeout_seconds == 2.5


def test_sqlite_backend_is_built_from_config(tmp_path: Path) -> None:
    config = AppConfig(store_backend="sqlite", store_path=str(tmp_path / "db" / "wardrobe.db"))
    app = WardrobeApp(config)
    assert (tmp_path / "db" / "wardrobe.db").exists()
    assert len(app.list_wardrobe(app.demo_user.id)) == 10


def test_unknown_backend_is_rejected() -> None:
    with pytest.raises(ValueError):
        WardrobeApp(AppConfig(store_backend="redis", seed_demo_data=False))


def test_redaction_masks_personal_fields() -> None:
    scrubbed = redact_for_log(
        {
            "email": "emma@example.com",
            "nested": {"location": "New York", "note": "mail me at emma@example.com"},
            "photo": "data:image/png;base64,AAAA",
            "score": 80,
        }
    )
    assert scrubbed["email"] == "[redacted]"
    assert scrubbed["nested"]["location"] == "[redacted]"
    assert "emma@example.com" not in scrubbed["nested"]["note"]
    assert scrubbed["photo"] == "[redacted-data-url]"
    assert scrubbed["score"] == 80


def test_json_formatter_emits_correlation_and_redacts_extras() -> None:
    record = logging.LogRecord("wardrobe", logging.INFO, __file__, 1, "weather_lookup", None, None)
    record.location = "Paris"
    record.outfit_count = 2
    with correlation_context("corr-123"):
        payload = json.loads(JsonFormatter().format(record))
    assert payload["correlation_id"] == "corr-123"
    assert payload["location"] == "[redacted]"
    assert payload["outfit_count"] == 2


def test_taxonomy_helpers() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(-0.5) == 0
    assert clamp_score("87.5") == 88
    assert clamp_score(None) == 60
    assert clamp_score(True) == 60
    assert clamp_score(-3) == 0
    assert material_score("Organic Cotton") == 95
    assert material_score("silk") == 60
    assert normalize_season("Autumn") == "fall"
