from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv


CONFIG_FILE_PATH = Path(__file__).parent / "config.yaml"

APP_ENVS = ("development", "production", "test")


def load_config(config_path: Path | str = CONFIG_FILE_PATH) -> Dict[str, Any]:
    """Read the YAML defaults; an empty file yields ``{}``.

    A missing file raises ``FileNotFoundError`` and malformed YAML or a
    non-mapping document raises ``ValueError``, both naming the path.
    """
    path = Path(config_path)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open(encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {path}, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class ClientSettings:
    api_base_url: str = "http://localhost:3000/api/v1"
    timeout_sec: float = 10.0
    debounce_ms: int = 300


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    port: int = 3000
    database_url: str = "sqlite:///./travel_search.db"
    cors_origin: str = "http://localhost:5173"
    api_prefix: str = "/api/v1"
    api_base_path: str = ""
    log_level: str = "INFO"
    client: ClientSettings = field(default_factory=ClientSettings)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def _normalize_path(value: str) -> str:
    """Turn 'api/v1/' into '/api/v1'; empty stays empty."""
    value = (value or "").strip()
    if not value:
        return ""
    if not value.startswith("/"):
        value = "/" + value
    if value.endswith("/") and value != "/":
        value = value.rstrip("/")
    return value


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Setting '{name}' must be an integer, got {value!r}") from e


def _as_positive_float(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Setting '{name}' must be a number, got {value!r}") from e
    if number <= 0:
        raise ValueError(f"Setting '{name}' must be positive, got {value!r}")
    return number


def build_settings(
    cfg: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Merge YAML values with environment overrides and validate the result.

    Env overrides:
      - APP_ENV, PORT, DATABASE_URL, CORS_ORIGIN, API_PREFIX, API_BASE_PATH, LOG_LEVEL
      - API_BASE_URL, API_TIMEOUT_SEC, AUTOCOMPLETE_DEBOUNCE_MS (client side)
    """
    cfg = dict(cfg or {})
    env = os.environ if env is None else env
    client_cfg = cfg.get("client") or {}
    defaults = Settings()

    app_env = (env.get("APP_ENV") or cfg.get("app_env") or defaults.app_env).lower()
    if app_env not in APP_ENVS:
        raise ValueError(f"Setting 'app_env' must be one of {APP_ENVS}, got {app_env!r}")

    client = ClientSettings(
        api_base_url=(
            env.get("API_BASE_URL")
            or client_cfg.get("api_base_url")
            or defaults.client.api_base_url
        ).rstrip("/"),
        timeout_sec=_as_positive_float(
            "client.timeout_sec",
            env.get("API_TIMEOUT_SEC", client_cfg.get("timeout_sec", defaults.client.timeout_sec)),
        ),
        debounce_ms=_as_int(
            "client.debounce_ms",
            env.get(
                "AUTOCOMPLETE_DEBOUNCE_MS",
                client_cfg.get("debounce_ms", defaults.client.debounce_ms),
            ),
        ),
    )

    return Settings(
        app_env=app_env,
        port=_as_int("port", env.get("PORT", cfg.get("port", defaults.port))),
        database_url=env.get("DATABASE_URL") or cfg.get("database_url") or defaults.database_url,
        cors_origin=env.get("CORS_ORIGIN") or cfg.get("cors_origin") or defaults.cors_origin,
        api_prefix=_normalize_path(env.get("API_PREFIX", cfg.get("api_prefix", defaults.api_prefix))),
        api_base_path=_normalize_path(env.get("API_BASE_PATH", cfg.get("api_base_path", ""))),
        log_level=(env.get("LOG_LEVEL") or cfg.get("log_level") or defaults.log_level).upper(),
        client=client,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv(override=True)
    try:
        cfg = load_config(CONFIG_FILE_PATH)
    except FileNotFoundError:
        cfg = {}
    return build_settings(cfg)
