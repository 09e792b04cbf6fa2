from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from saftools.csvpipe.loader import DEFAULT_ENCODING, check_encoding
from saftools.csvpipe.types import SafError

DEFAULT_OUTPUT_NAME = "SimpleArchiveFormat"


class ConfigError(SafError):
    pass


class ConvertSettings(BaseModel):
    # Options for one spreadsheet → SAF conversion run
    model_config = ConfigDict(extra="forbid")

    csv_path: Path
    encoding: str = Field(default=DEFAULT_ENCODING)
    zip: bool = False
    output_name: str = Field(default=DEFAULT_OUTPUT_NAME)
    template: Optional[Path] = None

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, v: str) -> str:
        try:
            check_encoding(v)
        except LookupError:
            raise ValueError(f"unknown encoding {v!r}")
        return v

    @field_validator("output_name")
    @classmethod
    def _single_component(cls, v: str) -> str:
        if not v or v in (".", "..") or Path(v).name != v:
            raise ValueError(f"output_name must be a plain directory name, got {v!r}")
        return v


def load_config_file(path: Path) -> Dict[str, Any]:
    path = Path(path).expanduser().resolve()
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML ({e})") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    # relative paths in the file are relative to the file
    for key in ("csv_path", "template"):
        if data.get(key):
            p = Path(str(data[key])).expanduser()
            data[key] = p if p.is_absolute() else path.parent / p
    return data


def build_settings(config_path: Optional[Path] = None, **overrides: Any) -> ConvertSettings:
    """
    Merge a YAML config file with explicit overrides (None = not given).
    """
    data: Dict[str, Any] = load_config_file(config_path) if config_path else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return ConvertSettings(**data)
    except ValueError as e:
        raise ConfigError(str(e)) from e
