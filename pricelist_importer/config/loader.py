from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..contracts import CONFIG_SCHEMA_PATH
from ..models.config_models import (
    DEFAULT_ERROR_LOG_DIR,
    DEFAULT_IMPORT_ENDPOINT,
    DEFAULT_PARSE_ENDPOINT,
    DEFAULT_SERIAL_NUMBER_ALIASES,
    DEFAULT_TIMEOUT_SECONDS,
    ApiConfig,
    EmptyExtractionPolicy,
    ImporterConfig,
    ResolverDefaults,
)

"""Config loader.

Responsibilities:
- Load YAML config/importer.yml
- Validate against contracts/config_schema.json
- Apply defaults for every optional key
- Let the API_URL environment variable override api.base_url
"""

DEFAULT_CONFIG_PATH = Path("config/importer.yml")
API_URL_ENV = "API_URL"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails validation (missing keys, wrong types, extra keys).
    """
    if not CONFIG_SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {CONFIG_SCHEMA_PATH}")

    try:
        schema = json.loads(CONFIG_SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImporterConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    api_raw = data["api"]
    # 環境変数 (.env 読込済) を最優先
    base_url = os.getenv(API_URL_ENV) or api_raw["base_url"]
    api = ApiConfig(
        base_url=base_url,
        parse_endpoint=api_raw.get("parse_endpoint", DEFAULT_PARSE_ENDPOINT),
        import_endpoint=api_raw.get("import_endpoint", DEFAULT_IMPORT_ENDPOINT),
        timeout=float(api_raw.get("timeout", DEFAULT_TIMEOUT_SECONDS)),
    )
    defaults_raw = data.get("defaults", {})
    defaults = ResolverDefaults(**defaults_raw)
    aliases = tuple(data.get("serial_number_aliases", DEFAULT_SERIAL_NUMBER_ALIASES))
    policy = EmptyExtractionPolicy(data.get("empty_extraction_policy", "preserve"))
    return ImporterConfig(
        api=api,
        defaults=defaults,
        serial_number_aliases=aliases,
        empty_extraction_policy=policy,
        error_log_dir=data.get("error_log_dir", DEFAULT_ERROR_LOG_DIR),
    )
