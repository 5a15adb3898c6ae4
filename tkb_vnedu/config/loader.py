from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..engine.vocabulary import build_vocabulary
from ..models.subject_mapping import SubjectMapping

"""Config loader.

Responsibilities:
- Load the YAML config (default config/tkb.yml)
- Validate it against the packaged JSON schema (unknown keys rejected)
- Apply defaults for every optional key
- Apply environment overrides (TKB_OUTPUT_FILE, TKB_MAPPING_STORE), which the
  CLI fills from .env before calling in here
"""

__all__ = [
    "ConfigError",
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "default_config",
    "load_config",
    "apply_env_overrides",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/tkb.yml")

ENV_OUTPUT_FILE = "TKB_OUTPUT_FILE"
ENV_MAPPING_STORE = "TKB_MAPPING_STORE"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    output_file: Path = Path("TKB_vnedu.xlsx")
    mapping_store: Path = Path("config/subject_mappings.json")
    sheet_name: str | None = None  # None = first sheet of each workbook
    issue_log_dir: Path = Path("logs")
    extra_subjects: tuple[str, ...] = ()
    subject_mappings: dict[str, str] = field(default_factory=dict)  # seed raw -> canonical

    @property
    def vocabulary(self) -> tuple[str, ...]:
        return build_vocabulary(self.extra_subjects)

    def seed_mappings(self) -> list[SubjectMapping]:
        return [
            SubjectMapping(raw=raw, canonical=canonical, is_user_defined=True)
            for raw, canonical in self.subject_mappings.items()
            if raw.strip()
        ]


def default_config() -> AppConfig:
    return apply_env_overrides(AppConfig())


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def apply_env_overrides(cfg: AppConfig) -> AppConfig:
    overrides: dict[str, Any] = {}
    if os.getenv(ENV_OUTPUT_FILE):
        overrides["output_file"] = Path(os.environ[ENV_OUTPUT_FILE])
    if os.getenv(ENV_MAPPING_STORE):
        overrides["mapping_store"] = Path(os.environ[ENV_MAPPING_STORE])
    return replace(cfg, **overrides) if overrides else cfg


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    defaults = AppConfig()
    cfg = AppConfig(
        output_file=Path(data.get("output_file", defaults.output_file)),
        mapping_store=Path(data.get("mapping_store", defaults.mapping_store)),
        sheet_name=data.get("sheet_name"),
        issue_log_dir=Path(data.get("issue_log_dir", defaults.issue_log_dir)),
        extra_subjects=tuple(data.get("extra_subjects", ())),
        subject_mappings=dict(data.get("subject_mappings") or {}),
    )
    return apply_env_overrides(cfg)
