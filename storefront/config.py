"""Configuration management for the storefront service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import yaml

from .database import resolve_database_path


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _as_str_tuple(value: object, key: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return _split_csv(value)
    if isinstance(value, list):
        return tuple(str(item).strip() for item in value if str(item).strip())
    raise ValueError(f"'{key}' must be a list of strings or a comma separated string")


def _as_positive_int(value: object, key: str) -> int:
    try:
        number = int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"'{key}' must be an integer") from exc
    if number <= 0:
        raise ValueError(f"'{key}' must be greater than zero")
    return number


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the API and CLI."""

    database_path: Path
    session_ttl_minutes: int = 480
    cors_origins: Tuple[str, ...] = ("*",)
    trusted_proxies: Tuple[str, ...] = ()

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""

        unknown = set(data.keys()) - {"database_path", "session_ttl_minutes", "cors_origins", "trusted_proxies"}
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        raw_db_path = data.get("database_path")
        if raw_db_path:
            candidate = Path(str(raw_db_path)).expanduser()
            if not candidate.is_absolute() and base_path is not None:
                candidate = base_path / candidate
            database_path = candidate.resolve(strict=False)
        else:
            database_path = resolve_database_path(None)

        return Settings(
            database_path=database_path,
            session_ttl_minutes=_as_positive_int(data.get("session_ttl_minutes", 480), "session_ttl_minutes"),
            cors_origins=_as_str_tuple(data.get("cors_origins", ["*"]), "cors_origins"),
            trusted_proxies=_as_str_tuple(data.get("trusted_proxies"), "trusted_proxies"),
        )

    def trusted_proxy_hosts(self) -> List[str] | str:
        return list(self.trusted_proxies) or "*"


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "storefront.yaml").resolve(strict=False)
    return candidate


def _apply_environment(settings: Settings, environ: Mapping[str, str]) -> Settings:
    overrides: Dict[str, object] = {}
    db_path = environ.get("STOREFRONT_DB_PATH")
    if db_path:
        overrides["database_path"] = resolve_database_path(db_path)
    ttl = environ.get("STOREFRONT_SESSION_TTL_MINUTES")
    if ttl:
        overrides["session_ttl_minutes"] = _as_positive_int(ttl, "STOREFRONT_SESSION_TTL_MINUTES")
    origins = environ.get("STOREFRONT_CORS_ORIGINS")
    if origins is not None:
        overrides["cors_origins"] = _split_csv(origins)
    proxies = environ.get("STOREFRONT_TRUSTED_PROXIES")
    if proxies is not None:
        overrides["trusted_proxies"] = _split_csv(proxies)
    return replace(settings, **overrides) if overrides else settings


def load_settings(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from YAML (when present) and apply environment overrides."""

    env = os.environ if environ is None else environ
    path = config_path if config_path is not None else resolve_config_path(env.get("STOREFRONT_CONFIG"))

    raw: Dict[str, object] = {}
    if path.exists():
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        raw = loaded

    settings = Settings.from_dict(raw, base_path=path.parent)
    return _apply_environment(settings, env)


__all__ = ["Settings", "load_settings", "resolve_config_path"]
