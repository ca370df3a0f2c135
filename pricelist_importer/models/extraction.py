from __future__ import annotations

from dataclasses import dataclass, field

from .canonical import Record

"""ExtractionResult model: the parsed success body of the parse endpoint."""

__all__ = [
    "ExtractionResult",
]


@dataclass(frozen=True)
class ExtractionResult:
    """Rows and raw text returned by the remote extraction service.

    raw_text is kept for the operator's reference only and is never parsed.
    """
    extracted_data: list[Record] = field(default_factory=list)
    raw_text: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.extracted_data
