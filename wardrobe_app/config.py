"""Configuration helpers for the EcoWardrobe app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_LOCATION = "New York"


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class AppConfig:
    """Configuration values for the wardrobe backend.

    Secrets (Gemini and OpenWeather keys) are optional so the app can boot
    offline; the soft AI adapters then fall back to their defaults while the
    weather adapter reports itself unavailable.
    """

    gemini_api_key: Optional[str] = None
    model: str = DEFAULT_GEMINI_MODEL
    openweather_api_key: Optional[str] = None
    default_location: str = DEFAULT_LOCATION
    store_backend: str = "memory"
    store_path: Optional[str] = None
    seed_demo_data: bool = True
    weather_timeout_seconds: float = 5.0
    log_level: str = "INFO"
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged under environment variables so that secrets can be
        injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("APP_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        timeout = get_value("weather_timeout_seconds", "5.0")

        return cls(
            gemini_api_key=get_value("gemini_api_key"),
            model=str(get_value("model", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL),
            openweather_api_key=get_value("openweather_api_key"),
            default_location=str(get_value("default_location", DEFAULT_LOCATION) or DEFAULT_LOCATION),
            store_backend=str(get_value("store_backend", "memory") or "memory").lower(),
            store_path=get_value("store_path"),
            seed_demo_data=_as_bool(get_value("seed_demo_data"), True),
            weather_timeout_seconds=float(timeout or 5.0),
            log_level=str(get_value("log_level", "INFO") or "INFO"),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a flat ``key: value`` config file."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config


__all__ = ["AppConfig", "DEFAULT_GEMINI_MODEL", "DEFAULT_LOCATION"]
