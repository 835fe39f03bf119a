from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import yaml

ENV_PREFIX = "DBACCESS_"


@dataclass(frozen=True)
class Settings:
    # Database
    database: str | None = None
    create_if_missing: bool = False
    busy_timeout_ms: int = 5000
    # PRAGMA foreign_keys; по умолчанию выключено, как в самом SQLite.
    foreign_keys: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: str = "./logs"


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


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
    v = os.getenv(ENV_PREFIX + name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def parse_int(v: str | None) -> int | None:
    if v is None:
        return None
    return int(v)


def parse_bool(v: str | None) -> bool | None:
    if v is None:
        return None
    vv = v.lower()
    if vv in ("1", "true", "yes", "y", "on"):
        return True
    if vv in ("0", "false", "no", "n", "off"):
        return False
    raise ValueError(f"Invalid boolean env value: {v}")


def loadSettings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults
    """
    sources: list[str] = []
    defaults = Settings()

    # 1) config file
    cfg: dict = {}
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")

    # 2) env
    env = {
        "database": _env_get("DATABASE"),
        "create_if_missing": parse_bool(_env_get("CREATE_IF_MISSING")),
        "busy_timeout_ms": parse_int(_env_get("BUSY_TIMEOUT_MS")),
        "foreign_keys": parse_bool(_env_get("FOREIGN_KEYS")),
        "log_level": _env_get("LOG_LEVEL"),
        "log_dir": _env_get("LOG_DIR"),
    }
    if any(v is not None for v in env.values()):
        sources.append("env")

    # merge config -> env -> cli
    merged = {
        "database": cfg.get("database", defaults.database),
        "create_if_missing": cfg.get("create_if_missing", defaults.create_if_missing),
        "busy_timeout_ms": cfg.get("busy_timeout_ms", defaults.busy_timeout_ms),
        "foreign_keys": cfg.get("foreign_keys", defaults.foreign_keys),
        "log_level": cfg.get("log_level", defaults.log_level),
        "log_dir": cfg.get("log_dir", defaults.log_dir),
    }

    for k, v in env.items():
        if v is not None:
            merged[k] = v

    # 3) apply CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")

    for k, v in cli_overrides.items():
        if v is None:
            continue
        merged[k] = v

    settings = Settings(
        database=merged["database"],
        create_if_missing=bool(merged["create_if_missing"]),
        busy_timeout_ms=int(merged["busy_timeout_ms"]),
        foreign_keys=bool(merged["foreign_keys"]),
        log_level=str(merged["log_level"]),
        log_dir=str(merged["log_dir"]),
    )

    return LoadedSettings(settings=settings, sources_used=sources)
