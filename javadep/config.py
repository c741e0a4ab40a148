"""Configuration loading for javadep (.javadep.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import ScanPolicy

CONFIG_FILENAME = ".javadep.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class PolicyConfig:
    """Scan policy switches; ``None`` leaves the built-in default in place."""

    declarations: Optional[bool] = None
    code: Optional[bool] = None
    system: Optional[bool] = None

    def to_policy(self) -> ScanPolicy:
        defaults = ScanPolicy()
        return ScanPolicy(
            declarations=defaults.declarations if self.declarations is None else self.declarations,
            code=defaults.code if self.code is None else self.code,
            system=defaults.system if self.system is None else self.system,
        )


@dataclass
class JavadepConfig:
    """Represents the settings defined in .javadep.yml."""

    root: Path
    classes: List[str] = field(default_factory=list)
    roots: List[Path] = field(default_factory=list)
    path_elements: List[Path] = field(default_factory=list)
    system_path: List[Path] = field(default_factory=list)
    java_home: Optional[Path] = None
    cache: Optional[Path] = None
    policy: PolicyConfig = field(default_factory=PolicyConfig)


def load_config(config_path: Path) -> JavadepConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return JavadepConfig(root=root, java_home=default_java_home())

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    policy_data = _as_dict(data.get("policy"))
    policy = PolicyConfig(
        declarations=_as_bool(policy_data.get("declarations")),
        code=_as_bool(policy_data.get("code")),
        system=_as_bool(policy_data.get("system")),
    )

    java_home_str = _as_str(data.get("java_home"))
    cache_str = _as_str(data.get("cache"))

    return JavadepConfig(
        root=root,
        classes=_as_str_list(data.get("classes")),
        roots=_as_path_list(root, data.get("roots")),
        path_elements=_as_path_list(root, data.get("path_elements")),
        system_path=_as_path_list(root, data.get("system_path")),
        java_home=_as_path(root, java_home_str) if java_home_str else default_java_home(),
        cache=_as_path(root, cache_str) if cache_str else None,
        policy=policy,
    )


def default_java_home() -> Optional[Path]:
    """Return ``$JAVA_HOME`` when it is set to a non-empty value."""
    value = os.environ.get("JAVA_HOME", "").strip()
    return Path(value).expanduser() if value else None


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "on", "1"}:
            return True
        if lowered in {"false", "no", "off", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def _as_path(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


def _as_path_list(root: Path, value: Any) -> List[Path]:
    return [_as_path(root, item) for item in _as_str_list(value)]


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "JavadepConfig",
    "PolicyConfig",
    "default_java_home",
    "load_config",
]
