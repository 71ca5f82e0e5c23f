from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
import os
import yaml


@dataclass(frozen=True)
class Settings:
    # Paths
    log_dir: str = "./logs"
    report_dir: str = "./reports"

    # Logging
    log_level: str = "INFO"

    # Source
    csv_delimiter: str | None = None
    has_header: bool = True
    quoting: str = "lazy"
    sheet: str = ""
    encoding: str = "utf-8-sig"
    fields_per_record: int = 0

    # Report
    report_items_limit: int = 200


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


ENV_NAMES = {
    "log_dir": "TABROWS_LOG_DIR",
    "report_dir": "TABROWS_REPORT_DIR",
    "log_level": "TABROWS_LOG_LEVEL",
    "csv_delimiter": "TABROWS_DELIMITER",
    "has_header": "TABROWS_HAS_HEADER",
    "quoting": "TABROWS_QUOTING",
    "sheet": "TABROWS_SHEET",
    "encoding": "TABROWS_ENCODING",
    "fields_per_record": "TABROWS_FIELDS_PER_RECORD",
    "report_items_limit": "TABROWS_REPORT_ITEMS_LIMIT",
}

INT_FIELDS = {"fields_per_record", "report_items_limit"}
BOOL_FIELDS = {"has_header"}


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None:
        return None
    # разделитель может быть пробельным символом (TAB)
    if name == ENV_NAMES["csv_delimiter"]:
        return v or None
    if v.strip() == "":
        return None
    return v.strip()


def parse_bool(v: str | None) -> bool | None:
    if v is None:
        return None
    vv = v.lower()
    if vv in ("1", "true", "yes", "y"):
        return True
    if vv in ("0", "false", "no", "n"):
        return False
    raise ValueError(f"Invalid boolean env value: {v}")


def _parse_env_value(key: str, raw: str):
    if key in INT_FIELDS:
        return int(raw)
    if key in BOOL_FIELDS:
        return parse_bool(raw)
    return raw


def load_settings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults
    """
    sources: list[str] = []
    defaults = Settings()
    known = [f.name for f in fields(Settings)]

    # 1) config file
    cfg: dict = {}
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")

    # 2) env
    env = {key: _env_get(ENV_NAMES[key]) for key in known}
    if any(v is not None for v in env.values()):
        sources.append("env")

    merged = {key: cfg.get(key, getattr(defaults, key)) for key in known}

    for key, raw in env.items():
        if raw is not None:
            merged[key] = _parse_env_value(key, raw)

    # 3) apply CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")

    for k, v in cli_overrides.items():
        if v is None or k not in merged:
            continue
        merged[k] = v

    settings = Settings(
        log_dir=str(merged["log_dir"]),
        report_dir=str(merged["report_dir"]),
        log_level=str(merged["log_level"]),
        csv_delimiter=merged["csv_delimiter"] or None,
        has_header=bool(merged["has_header"]),
        quoting=str(merged["quoting"]).lower(),
        sheet=str(merged["sheet"] or ""),
        encoding=str(merged["encoding"]),
        fields_per_record=int(merged["fields_per_record"]),
        report_items_limit=int(merged["report_items_limit"]),
    )

    return LoadedSettings(settings=settings, sources_used=sources)
