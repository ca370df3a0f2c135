"""Price list importer.

Review extracted price list rows, correct them, and commit a normalized
record set (brand, model, type, dp, mrp) to the import service.
"""

__version__ = "0.1.0"
