from __future__ import annotations

from pathlib import Path

import pytest

from storefront.config import Settings, load_settings, resolve_config_path


def test_defaults_without_config_file(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "missing.yaml", environ={})

    assert settings.database_path.name == "storefront.sqlite3"
    assert settings.session_ttl_minutes == 480
    assert settings.cors_origins == ("*",)
    assert settings.trusted_proxy_hosts() == "*"


def test_yaml_values_resolve_relative_to_config_file(tmp_path: Path) -> None:
    config = tmp_path / "storefront.yaml"
    config.write_text(
        "database_path: data/shop.sqlite3\n"
        "session_ttl_minutes: 30\n"
        "cors_origins:\n  - http://localhost:3000\n"
        "trusted_proxies: 10.0.0.1, 10.0.0.2\n",
        encoding="utf-8",
    )

    settings = load_settings(config, environ={})

    assert settings.database_path == (tmp_path / "data" / "shop.sqlite3").resolve()
    assert settings.session_ttl_minutes == 30
    assert settings.cors_origins == ("http://localhost:3000",)
    assert settings.trusted_proxy_hosts() == ["10.0.0.1", "10.0.0.2"]


def test_environment_overrides_yaml(tmp_path: Path) -> None:
    config = tmp_path / "storefront.yaml"
    config.write_text("session_ttl_minutes: 30\n", encoding="utf-8")

    settings = load_settings(
        config,
        environ={
            "STOREFRONT_DB_PATH": str(tmp_path / "override.sqlite3"),
            "STOREFRONT_SESSION_TTL_MINUTES": "5",
            "STOREFRONT_CORS_ORIGINS": "https://a.example, https://b.example",
        },
    )

    assert settings.database_path == (tmp_path / "override.sqlite3").resolve()
    assert settings.session_ttl_minutes == 5
    assert settings.cors_origins == ("https://a.example", "https://b.example")


def test_config_path_comes_from_environment(tmp_path: Path) -> None:
    config = tmp_path / "custom.yaml"
    config.write_text("session_ttl_minutes: 12\n", encoding="utf-8")

    settings = load_settings(environ={"STOREFRONT_CONFIG": str(config)})

    assert settings.session_ttl_minutes == 12
    assert resolve_config_path(str(config)) == config.resolve()


@pytest.mark.parametrize(
    "content",
    [
        "session_ttl_minutes: 0\n",
        "session_ttl_minutes: soon\n",
        "cors_origins: 42\n",
        "unexpected: true\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_configuration_is_rejected(tmp_path: Path, content: str) -> None:
    config = tmp_path / "storefront.yaml"
    config.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError):
        load_settings(config, environ={})


def test_settings_from_dict_requires_nothing() -> None:
    settings = Settings.from_dict({})
    assert settings.session_ttl_minutes == 480


def test_environment_overrides_trusted_proxies_and_disables_cors(tmp_path: Path) -> None:
    settings = load_settings(
        tmp_path / "missing.yaml",
        environ={
            "STOREFRONT_TRUSTED_PROXIES": "192.168.0.10, 192.168.0.11",
            "STOREFRONT_CORS_ORIGINS": "",
        },
    )

    assert settings.trusted_proxy_hosts() == ["192.168.0.10", "192.168.0.11"]
    assert settings.cors_origins == ()
