import json

from typer.testing import CliRunner

from tabrows.config.config import ENV_NAMES, load_settings
from tabrows.main import app

runner = CliRunner()


def _clear_env(monkeypatch):
    for name in ENV_NAMES.values():
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_sources(monkeypatch):
    _clear_env(monkeypatch)

    loaded = load_settings(config_path=None, cli_overrides={})

    assert loaded.sources_used == []
    assert loaded.settings.csv_delimiter is None
    assert loaded.settings.has_header is True
    assert loaded.settings.quoting == "lazy"
    assert loaded.settings.fields_per_record == 0


def test_priority_cli_over_env_over_config(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    cfg = tmp_path / "config.yml"
    cfg.write_text(
        "\n".join([
            'csv_delimiter: ";"',
            "quoting: strict",
            "has_header: false",
            'sheet: "Planets"',
            "report_items_limit: 10",
        ]),
        encoding="utf-8",
    )

    # ENV перекрывает config
    monkeypatch.setenv("TABROWS_DELIMITER", "|")
    monkeypatch.setenv("TABROWS_HAS_HEADER", "yes")
    monkeypatch.setenv("TABROWS_REPORT_ITEMS_LIMIT", "20")

    # CLI перекрывает ENV
    loaded = load_settings(config_path=str(cfg), cli_overrides={"csv_delimiter": "\t", "sheet": None})

    assert loaded.sources_used == ["config", "env", "cli"]
    assert loaded.settings.csv_delimiter == "\t"
    assert loaded.settings.has_header is True
    assert loaded.settings.report_items_limit == 20
    assert loaded.settings.quoting == "strict"
    assert loaded.settings.sheet == "Planets"


def test_env_tab_delimiter_is_not_stripped(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("TABROWS_DELIMITER", "\t")

    loaded = load_settings(config_path=None, cli_overrides={})

    assert loaded.settings.csv_delimiter == "\t"


def test_env_empty_delimiter_is_unset(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("TABROWS_DELIMITER", "")

    loaded = load_settings(config_path=None, cli_overrides={})

    assert loaded.settings.csv_delimiter is None
    assert loaded.sources_used == []


def test_env_tab_delimiter_reaches_csv_reader(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    data = tmp_path / "planets.txt"
    data.write_text("order\tname\n1\tMercury\n", encoding="utf-8")
    monkeypatch.setenv("TABROWS_DELIMITER", "\t")

    result = runner.invoke(
        app,
        ["--log-dir", str(tmp_path / "logs"), "--report-dir", str(tmp_path / "reports"), "header", "--file", str(data)],
    )

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["order", "name"]


def test_cli_delimiter_overrides_env(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    data = tmp_path / "planets.txt"
    data.write_text("order\tname\n1\tMercury\n", encoding="utf-8")
    monkeypatch.setenv("TABROWS_DELIMITER", ";")

    result = runner.invoke(
        app,
        [
            "--log-dir", str(tmp_path / "logs"),
            "--report-dir", str(tmp_path / "reports"),
            "--run-id", "run-cfg",
            "--delimiter", "tab",
            "header",
            "--file", str(data),
        ],
    )

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["order", "name"]

    report = json.loads((tmp_path / "reports" / "report_header_run-cfg.json").read_text(encoding="utf-8"))
    assert report["context"]["config"]["sources"] == ["env", "cli"]


def test_invalid_env_value_is_usage_error(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("TABROWS_FIELDS_PER_RECORD", "many")

    result = runner.invoke(
        app,
        ["--log-dir", str(tmp_path / "logs"), "--report-dir", str(tmp_path / "reports"), "header", "--file", "x.csv"],
    )

    assert result.exit_code == 2
    assert "invalid settings" in result.output
