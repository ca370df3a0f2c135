"""Domain models for the price list importer.

This package contains the record shapes, configuration dataclasses and
result types used throughout the application.
"""

from .canonical import CANONICAL_FIELDS, CanonicalRecord, Record
from .config_models import (
    ApiConfig,
    EmptyExtractionPolicy,
    ImporterConfig,
    ResolverDefaults,
    default_config,
)
from .error_record import ErrorRecord
from .extraction import ExtractionResult
from .processing_result import FileStat, ProcessingResult
from .source_file import FileStatus, SourceFile

__all__ = [
    # Record shapes
    "CANONICAL_FIELDS",
    "CanonicalRecord",
    "Record",
    # Configuration models
    "ApiConfig",
    "EmptyExtractionPolicy",
    "ImporterConfig",
    "ResolverDefaults",
    "default_config",
    # Processing models
    "ErrorRecord",
    "ExtractionResult",
    "FileStat",
    "FileStatus",
    "ProcessingResult",
    "SourceFile",
]
