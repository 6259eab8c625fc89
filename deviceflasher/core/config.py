"""Loading and validation of the optional YAML configuration file."""

from __future__ import annotations

import json
import logging
import os
import platform
from dataclasses import dataclass, replace
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from deviceflasher.core.errors import ConfigError

LOGGER = logging.getLogger(__name__)


class _ConfigLoader(yaml.SafeLoader):
    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[str] = set()
        for key_node, _ in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                continue
            if key_node.value in seen:
                raise ConfigError(f"Duplicate key '{key_node.value}' {key_node.start_mark}")
            seen.add(key_node.value)
        return super().construct_mapping(node, deep=deep)


@dataclass(frozen=True)
class Settings:
    host_os: str
    platform_tools_path: Path | None = None
    parallel: bool = False
    lock_timeout_s: float = 300.0
    poll_interval_s: float = 5.0
    debug: bool = False


def host_os() -> str:
    return platform.system().lower()


def config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "deviceflasher/config.yaml"


def _schema_errors(doc: dict[str, Any]) -> list[str]:
    schema = json.loads(
        resources.files("deviceflasher.schemas").joinpath("config.schema.json").read_text(encoding="utf-8")
    )
    errors = sorted(Draft202012Validator(schema).iter_errors(doc), key=lambda e: list(e.path))
    return [
        f"{'.'.join(str(p) for p in error.path) or '<root>'}: {error.message}" for error in errors
    ]


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=_ConfigLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at root")
    return loaded


def load_settings(path: Path | None = None, **overrides: Any) -> Settings:
    """Build settings from the config file, then apply non-None overrides.

    A missing config file is not an error; defaults are used instead.
    """
    path = path or config_path()
    settings = Settings(host_os=host_os())

    if path.is_file():
        doc = _read_yaml(path)
        errors = _schema_errors(doc)
        if errors:
            raise ConfigError(f"Invalid config file {path}: {'; '.join(errors)}")
        if "platform_tools_path" in doc:
            doc["platform_tools_path"] = Path(doc["platform_tools_path"]).expanduser()
        settings = replace(settings, **doc)
        LOGGER.debug("loaded config from %s", path)

    values = {key: value for key, value in overrides.items() if value is not None}
    return replace(settings, **values)
