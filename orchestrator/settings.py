"""Load orchestrator settings from config/settings.yaml."""

import os
from pathlib import Path
from typing import Any

import yaml

_DEFAULTS: dict[str, Any] = {
    "orchestrator": {
        "db_path": "data/event_journal.db",
        "poll_interval": 5.0,
        "batch_size": 3,
        "busy_timeout": 5000,
        "stale_timeout": 300,
        "watchdog_interval": 30.0,
        "shutdown_timeout": 30.0,
        "max_retry": 3,
        "worker_id": None,
        "backoff": {
            "base_delay": 5.0,
            "max_delay": 300.0,
            "multiplier": 2.0,
            "jitter": 0.0,
        },
    },
    "logging": {
        "file": "logs/orchestrator.log",
        "level": "INFO",
        "log_to_console": False,
        "max_bytes": 10485760,  # 10 MB
        "backup_count": 3,
    },
}

# Environment overrides: variable -> dot path
_ENV_OVERRIDES = {
    "ORCHESTRATOR_DB_PATH": "orchestrator.db_path",
    "ORCHESTRATOR_WORKER_ID": "orchestrator.worker_id",
    "ORCHESTRATOR_LOG_LEVEL": "logging.level",
}

_cached: dict[str, Any] | None = None


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base recursively. Mutates base."""
    for key, value in overlay.items():
        if value is None:
            continue
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def get_default_settings() -> dict[str, Any]:
    """Return a deep copy of default settings."""
    return _deep_copy_nested(_DEFAULTS)


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Get a nested value by dot path (e.g. 'orchestrator.backoff.base_delay')."""
    current: Any = settings
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def _set_setting(settings: dict[str, Any], path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    current = settings
    for part in parents:
        current = current.setdefault(part, {})
    current[leaf] = value


def reload_settings() -> None:
    """Clear the settings cache. Call after config files change."""
    global _cached
    _cached = None


def load_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """Load settings from config/settings.yaml. Returns merged defaults + file + env values."""
    global _cached
    if _cached is not None:
        return _cached

    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent / "config"
    path = config_dir / "settings.yaml"

    result = get_default_settings()

    if path.exists():
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if data is not None and not isinstance(data, dict):
            raise ValueError(f"{path}: top level must be a mapping")
        if data:
            _deep_merge(result, data)

    for env_name, dot_path in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            _set_setting(result, dot_path, value)

    _cached = result
    return result


def _deep_copy_nested(obj: Any) -> Any:
    """Return a deep copy of nested dicts/lists for defaults."""
    if isinstance(obj, dict):
        return {k: _deep_copy_nested(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_deep_copy_nested(x) for x in obj]
    return obj
