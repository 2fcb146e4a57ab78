from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_PACING_DELAY_MS,
    DEFAULT_TIMEOUT_SECONDS,
    ApiConfig,
    ImportConfig,
    UploadConfig,
)

"""Config loader.

Responsibilities:
- Load YAML ``config/import.yml`` (or an explicit ``--config`` path)
- Validate it against the bundled ``config_schema.json``
- Apply defaults and per-entity upload overrides
- Let ``API_BASE_URL`` / ``API_TOKEN`` from the environment win over the file
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "resolve_api_config",
    "require_base_url",
]

DEFAULT_CONFIG_PATH = Path("config/import.yml")
SCHEMA_PATH = Path(__file__).parent / "config_schema.json"

ENV_BASE_URL = "API_BASE_URL"
ENV_TOKEN = "API_TOKEN"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails schema validation.
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


def _upload_config(raw: Mapping[str, Any], base: UploadConfig) -> UploadConfig:
    return UploadConfig(
        batch_size=raw.get("batch_size", base.batch_size),
        pacing_delay_ms=raw.get("pacing_delay_ms", base.pacing_delay_ms),
    )


def resolve_api_config(raw: Mapping[str, Any], env: Mapping[str, str] | None = None) -> ApiConfig:
    """Build ApiConfig from the ``api`` section; environment values take precedence."""
    env = os.environ if env is None else env
    base_url = env.get(ENV_BASE_URL) or raw.get("base_url")
    return ApiConfig(
        base_url=base_url.rstrip("/") if base_url else None,
        timeout_seconds=float(raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        token=env.get(ENV_TOKEN) or None,
    )


def load_config(
    path: Path | None = None,
    *,
    explicit: bool = False,
    env: Mapping[str, str] | None = None,
) -> ImportConfig:
    """Load and validate the import configuration.

    A missing file at the default location means "all defaults"; a missing
    file that was asked for explicitly is an error.
    """
    path = path if path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        if explicit:
            raise ConfigError(f"config file not found: {path}")
        data: dict[str, Any] = {}
    else:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid yaml: {e}") from e
        except OSError as e:
            raise ConfigError(f"cannot read config file {path}: {e}") from e

    _validate_config_schema(data)

    upload = _upload_config(
        data.get("upload", {}),
        UploadConfig(batch_size=DEFAULT_BATCH_SIZE, pacing_delay_ms=DEFAULT_PACING_DELAY_MS),
    )
    overrides = {
        entity: _upload_config(raw or {}, upload)
        for entity, raw in (data.get("profiles") or {}).items()
    }
    return ImportConfig(
        api=resolve_api_config(data.get("api", {}), env),
        upload=upload,
        logs_directory=Path(data.get("logs_directory", "./logs")),
        profile_overrides=overrides,
    )


def require_base_url(config: ImportConfig) -> str:
    if not config.api.base_url:
        raise ConfigError(f"no API base URL configured (set api.base_url or {ENV_BASE_URL})")
    return config.api.base_url
