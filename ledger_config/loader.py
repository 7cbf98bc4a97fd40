"""
Settings loader (``ledger_config.loader``).

Responsibility
--------------
Builds a ``LedgerSettings`` from three layers, later layers winning:

1. an optional YAML file (flat mapping of ``LedgerSettings`` field names),
2. ``LEDGER_*`` environment variables (``LEDGER_INPUT_DIR``,
   ``LEDGER_CHART_FILE``, ``LEDGER_PERIOD_FILE``, ``LEDGER_BATCH_GLOB``,
   ``LEDGER_ENCODING``, ``LEDGER_LOG_LEVEL``, ``LEDGER_VERBOSE``),
3. explicit overrides (the CLI arguments); ``None`` values are ignored.

A relative ``input_dir`` from the YAML file is resolved against the
directory holding that file.

Failure modes
-------------
* Missing settings file -> ``SettingsError``.
* Malformed YAML, non-mapping document, unknown key, bad boolean or log
  level, missing ``input_dir`` -> ``SettingsError``.
"""

from __future__ import annotations

import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from ledger_config.schema import LOG_LEVELS, LedgerSettings

ENV_PREFIX = "LEDGER_"

_FIELD_NAMES = tuple(f.name for f in fields(LedgerSettings))
_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


class SettingsError(ValueError):
    """Settings file or value is malformed."""

    code: str = "SETTINGS_ERROR"

    def __init__(self, reason: str, source: str | None = None):
        self.reason = reason
        self.source = source
        where = f" ({source})" if source else ""
        super().__init__(f"Invalid settings{where}: {reason}")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML settings file and return its mapping.

    An empty file yields an empty dict.

    Raises:
        SettingsError: if the file is missing, unparsable or not a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise SettingsError("file not found", str(path)) from exc
    except yaml.YAMLError as exc:
        raise SettingsError(f"malformed YAML: {exc}", str(path)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError("top level must be a mapping", str(path))
    unknown = sorted(set(data) - set(_FIELD_NAMES))
    if unknown:
        raise SettingsError(f"unknown keys: {', '.join(unknown)}", str(path))
    data = {k: v for k, v in data.items() if v is not None}
    if "input_dir" in data:
        input_dir = Path(str(data["input_dir"]))
        if not input_dir.is_absolute():
            input_dir = path.parent / input_dir
        data["input_dir"] = input_dir
    return data


def settings_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name in _FIELD_NAMES:
        key = ENV_PREFIX + name.upper()
        if key in env:
            values[name] = env[key]
    return values


def _parse_bool(value: Any, source: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise SettingsError(f"verbose must be a boolean, got {value!r}", source)


def _coerce(values: dict[str, Any], source: str) -> dict[str, Any]:
    out = dict(values)
    if "input_dir" in out:
        out["input_dir"] = Path(out["input_dir"])
    if "verbose" in out:
        out["verbose"] = _parse_bool(out["verbose"], source)
    if "log_level" in out:
        level = str(out["log_level"]).strip().upper()
        if level not in LOG_LEVELS:
            raise SettingsError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {out['log_level']!r}",
                source,
            )
        out["log_level"] = level
    for name in ("chart_file", "period_file", "batch_glob", "encoding"):
        if name in out:
            out[name] = str(out[name]).strip()
            if not out[name]:
                raise SettingsError(f"{name} must not be empty", source)
    return out


def load_settings(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> LedgerSettings:
    """
    Compose settings from file, environment and overrides.

    Raises:
        SettingsError: on any malformed layer, or when no layer supplies
            ``input_dir``.
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}
    if path is not None:
        values.update(_coerce(load_yaml_file(Path(path)), str(path)))
    values.update(_coerce(settings_from_env(env), "environment"))
    if overrides:
        given = {k: v for k, v in overrides.items() if v is not None}
        unknown = sorted(set(given) - set(_FIELD_NAMES))
        if unknown:
            raise SettingsError(f"unknown keys: {', '.join(unknown)}", "overrides")
        values.update(_coerce(given, "overrides"))

    if values.get("input_dir") is None:
        raise SettingsError("input_dir is required")
    return LedgerSettings(**values)
