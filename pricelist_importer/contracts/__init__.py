"""JSON schema contracts bundled with the package."""

from pathlib import Path

CONTRACTS_DIR = Path(__file__).parent

CONFIG_SCHEMA_PATH = CONTRACTS_DIR / "config_schema.json"
ERROR_LOG_SCHEMA_PATH = CONTRACTS_DIR / "error_log_schema.json"
IMPORT_PAYLOAD_SCHEMA_PATH = CONTRACTS_DIR / "import_payload_schema.json"
