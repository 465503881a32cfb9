"""Generator configuration file."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from dataclasses_json import DataClassJsonMixin

INPUT_TYPES = ("fs", "git")


class ConfigError(RuntimeError):
    """Raised when a generator config is invalid."""


@dataclass
class InputSource(DataClassJsonMixin):
    """One ROS package to generate: a local directory or a git checkout.

    ``path`` is the directory holding the interface files, relative to the
    repository root for git sources.
    """

    type: str
    name: str
    path: str
    url: str | None = None
    tag: str | None = None

    def __post_init__(self) -> None:
        if self.type not in INPUT_TYPES:
            raise ConfigError(f"input {self.name!r}: unknown type {self.type!r}")
        if self.type == "git" and (not self.url or not self.tag):
            raise ConfigError(f"input {self.name!r}: git sources need 'url' and 'tag'")


@dataclass
class TypegenConfig(DataClassJsonMixin):
    output: str
    input: list[InputSource] = field(default_factory=list)


def load_config(path: str | Path) -> TypegenConfig:
    """Load a config file; relative paths resolve against its directory."""
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ConfigError(f"{config_path}: invalid JSON: {e}") from e

    if not isinstance(raw, dict) or not isinstance(raw.get("input", []), list):
        raise ConfigError(f"{config_path}: expected an object with an 'input' list")
    if not isinstance(raw.get("output"), str):
        raise ConfigError(f"{config_path}: 'output' must be a path")
    if not all(isinstance(item, dict) for item in raw.get("input", [])):
        raise ConfigError(f"{config_path}: every input must be an object")

    try:
        config = TypegenConfig.from_dict(raw)
    except (KeyError, TypeError) as e:
        raise ConfigError(f"{config_path}: {e}") from e

    base = config_path.parent
    config.output = str(base / config.output)
    for source in config.input:
        if source.type == "fs":
            source.path = str(base / source.path)
    return config
