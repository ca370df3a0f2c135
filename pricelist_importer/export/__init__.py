"""CSV and JSON export of the rows under edit."""

from .encoders import ExportFormatError, decode_json, encode_csv, encode_json, write_export

__all__ = [
    "ExportFormatError",
    "decode_json",
    "encode_csv",
    "encode_json",
    "write_export",
]
