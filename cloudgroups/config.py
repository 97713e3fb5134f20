"""TOML-based reconciler configuration.

Loads ~/.cloudgroups/defaults.toml (global) and cloudgroups.toml (project),
merges them, and resolves the sections into typed settings.
"""

from __future__ import annotations

import tomllib
from dataclasses import MISSING, dataclass, field, fields
from pathlib import Path
from typing import Any

from cloudgroups.core.exceptions import ConfigurationError
from cloudgroups.observability.logging import LOG_LEVELS, LogConfig
from cloudgroups.providers.gcp.config import GCP

type RawConfig = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".cloudgroups" / "defaults.toml"
PROJECT_CONFIG_NAME = "cloudgroups.toml"


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    """Discovery policy.

    Args:
        warn_unmatched: Warn about owned managed groups no declared group matches.
        zone_concurrency: Zones listed concurrently during discovery.
    """

    warn_unmatched: bool = False
    zone_concurrency: int = 4


@dataclass(frozen=True, slots=True)
class Settings:
    gcp: GCP = field(default_factory=GCP)
    reconcile: ReconcileConfig = field(default_factory=ReconcileConfig)
    logging: LogConfig = field(default_factory=LogConfig)


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    for section in ("gcp", "reconcile", "logging"):
        merged.setdefault(section, {})
    return merged


def _matches_default(value: Any, expected: Any) -> bool:
    """Whether a TOML value has the type of a field's default. Ints are accepted for floats."""
    if isinstance(value, bool) or isinstance(expected, bool):
        return isinstance(value, bool) and isinstance(expected, bool)
    if isinstance(expected, float):
        return isinstance(value, int | float)
    return isinstance(value, type(expected))


def _build_section[T](name: str, cls: type[T], raw: Any) -> T:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Section '{name}' must be a table")

    known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
    if unknown := sorted(set(raw) - known):
        raise ConfigurationError(
            f"Unknown keys in section '{name}': {', '.join(unknown)}. "
            f"Valid: {', '.join(sorted(known))}"
        )

    values = {k: tuple(v) if isinstance(v, list) else v for k, v in raw.items()}

    defaults = {
        f.name: f.default
        for f in fields(cls)  # type: ignore[arg-type]
        if f.default is not MISSING and f.default is not None
    }
    for key, value in values.items():
        expected = defaults.get(key)
        if expected is not None and not _matches_default(value, expected):
            raise ConfigurationError(
                f"Invalid value for '{name}.{key}': expected "
                f"{type(expected).__name__}, got {type(value).__name__}"
            )

    try:
        return cls(**values)
    except TypeError as e:
        raise ConfigurationError(f"Invalid section '{name}': {e}") from e


def resolve_settings(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> Settings:
    config = load_config(project_dir=project_dir, global_path=global_path)

    settings = Settings(
        gcp=_build_section("gcp", GCP, config["gcp"]),
        reconcile=_build_section("reconcile", ReconcileConfig, config["reconcile"]),
        logging=_build_section("logging", LogConfig, config["logging"]),
    )
    if settings.logging.level not in LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid logging.level {settings.logging.level!r}. "
            f"Valid: {', '.join(LOG_LEVELS)}"
        )
    if settings.reconcile.zone_concurrency < 1:
        raise ConfigurationError("reconcile.zone_concurrency must be at least 1")
    return settings
