from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Config dataclasses for the price list importer.

These are the typed counterparts of config/importer.yml. The loader in
pricelist_importer/config/loader.py validates the YAML and builds them;
default_config() gives the same values without a file (tests, offline use).
"""

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_PARSE_ENDPOINT = "/api/admin/parse-pdf"
DEFAULT_IMPORT_ENDPOINT = "/api/admin/import"
DEFAULT_TIMEOUT_SECONDS = 300.0
DEFAULT_BRAND = "Unknown"
DEFAULT_TYPE = "Standard"
DEFAULT_SERIAL_NUMBER_ALIASES: tuple[str, ...] = ("sr no", "sr. no", "s.no")
DEFAULT_ERROR_LOG_DIR = "./logs"


class EmptyExtractionPolicy(Enum):
    """What an extraction returning zero rows does to the Row Store.

    - PRESERVE: prior rows untouched, the extraction is reported as failed
    - CLEAR: Row Store emptied
    - PLACEHOLDER: one blank row seeded from the canonical headers
    """
    PRESERVE = "preserve"
    CLEAR = "clear"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class ApiConfig:
    """Remote extraction / import service location.

    The API_URL environment variable takes precedence over base_url.
    """
    base_url: str
    parse_endpoint: str = DEFAULT_PARSE_ENDPOINT
    import_endpoint: str = DEFAULT_IMPORT_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def parse_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.parse_endpoint}"

    @property
    def import_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.import_endpoint}"


@dataclass(frozen=True)
class ResolverDefaults:
    """Labels used when a record carries no usable brand / type column."""
    brand: str = DEFAULT_BRAND
    type: str = DEFAULT_TYPE


@dataclass(frozen=True)
class ImporterConfig:
    """Root configuration object for an import session."""
    api: ApiConfig
    defaults: ResolverDefaults = field(default_factory=ResolverDefaults)
    serial_number_aliases: tuple[str, ...] = DEFAULT_SERIAL_NUMBER_ALIASES
    empty_extraction_policy: EmptyExtractionPolicy = EmptyExtractionPolicy.PRESERVE
    error_log_dir: str = DEFAULT_ERROR_LOG_DIR


def default_config(base_url: str = DEFAULT_BASE_URL) -> ImporterConfig:
    return ImporterConfig(api=ApiConfig(base_url=base_url))
