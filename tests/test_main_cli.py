import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from main import _parse_args, main


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"
    assert args.port == 8080


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "9000"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 9000


def test_config_option_precedes_subcommand() -> None:
    args = _parse_args(["--config", "custom.yaml", "init-db"])
    assert args.command == "init-db"
    assert args.config == "custom.yaml"

    serve = _parse_args(["--config", "custom.yaml", "--port", "9001"])
    assert serve.command == "serve"
    assert serve.port == 9001


def test_init_db_creates_database(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "nested" / "storefront.sqlite3"
    monkeypatch.setenv("STOREFRONT_DB_PATH", str(db_path))

    assert main(["--config", str(tmp_path / "missing.yaml"), "init-db"]) == 0
    assert db_path.exists()


def test_invalid_configuration_exits_with_error(tmp_path: Path) -> None:
    config = tmp_path / "storefront.yaml"
    config.write_text("session_ttl_minutes: -5\n", encoding="utf-8")

    assert main(["--config", str(config), "init-db"]) == 2
