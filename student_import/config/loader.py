from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_STORAGE_BACKEND,
    ApiConfig,
    DatabaseConfig,
    ImportConfig,
    StorageConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config/import.yml
- Validate it against the bundled config_schema.json
- Apply defaults for every optional key
- Apply environment overrides (STUDENT_API_URL, STUDENT_API_TOKEN, STORAGE_BACKEND)

Database credentials are resolved later by the CLI, where DATABASE_URL /
PG* variables take precedence over the `database` section.
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "load_config",
    "config_from_dict",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"config validation failed at {location}: {e.message}") from e


def config_from_dict(data: dict[str, Any]) -> ImportConfig:
    """Build ImportConfig from already validated data, applying env overrides."""
    storage_raw = data.get("storage") or {}
    api_raw = data.get("api") or {}
    db_raw = data.get("database") or {}
    vocab_raw = data.get("vocabulary") or {}

    defaults = StorageConfig()
    storage = StorageConfig(
        backend=os.getenv("STORAGE_BACKEND") or storage_raw.get("backend", DEFAULT_STORAGE_BACKEND),
        bucket=storage_raw.get("bucket", defaults.bucket),
        base_path=storage_raw.get("base_path", defaults.base_path),
        endpoint_url=storage_raw.get("endpoint_url"),
        region=storage_raw.get("region"),
        public_base_url=storage_raw.get("public_base_url"),
        url_expires_in=int(storage_raw.get("url_expires_in", defaults.url_expires_in)),
        drive_folder_id=storage_raw.get("drive_folder_id"),
        local_root=storage_raw.get("local_root", defaults.local_root),
    )

    api_defaults = ApiConfig()
    api = ApiConfig(
        base_url=os.getenv("STUDENT_API_URL") or api_raw.get("base_url", api_defaults.base_url),
        timeout_seconds=float(api_raw.get("timeout_seconds", api_defaults.timeout_seconds)),
        token=os.getenv("STUDENT_API_TOKEN") or api_raw.get("token"),
    )

    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )

    return ImportConfig(
        storage=storage,
        api=api,
        database=db,
        sheet_name=data.get("sheet_name"),
        classes=vocab_raw.get("classes"),
        sections=vocab_raw.get("sections"),
        max_document_size_mb=float(data.get("max_document_size_mb", 5.0)),
        logs_directory=data.get("logs_directory", "./logs"),
    )


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)
    return config_from_dict(data)
