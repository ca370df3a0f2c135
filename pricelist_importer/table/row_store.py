from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from ..models.canonical import Record

"""Row Store: the ordered, mutable set of rows under edit.

A row is identified by its position. Deleting row 2 of 5 shifts what was row
3 into position 2, so callers must re-read indices after a delete. Order is
insertion/display order and is never changed by an edit.

Records are copied on the way in and on the way out; callers cannot mutate
the store except through its operations.
"""

__all__ = [
    "RowStore",
]


class RowStore:
    """Ordered, index-addressed collection of Records.

    All operations take one internal lock, so the store stays sequentially
    consistent even when a front end touches it from a worker thread.
    """

    def __init__(self, records: Iterable[Mapping[str, Any]] | None = None) -> None:
        self._rows: list[Record] = [dict(r) for r in records] if records is not None else []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __getitem__(self, index: int) -> Record:
        with self._lock:
            return dict(self._rows[index])

    def __repr__(self) -> str:
        return f"RowStore(rows={len(self)})"

    @property
    def records(self) -> list[Record]:
        """Snapshot of the current contents, in display order."""
        with self._lock:
            return [dict(r) for r in self._rows]

    def is_empty(self) -> bool:
        return len(self) == 0

    def _in_bounds(self, index: int) -> bool:
        # 負のインデックスは Python の末尾参照になるため範囲外扱い
        return isinstance(index, int) and 0 <= index < len(self._rows)

    def replace_all(self, records: Iterable[Mapping[str, Any]]) -> None:
        """Discard the current rows and install `records` in the given order."""
        new_rows = [dict(r) for r in records]
        with self._lock:
            self._rows = new_rows

    def clear(self) -> None:
        self.replace_all([])

    def insert_at_front(self, record: Mapping[str, Any]) -> None:
        with self._lock:
            self._rows.insert(0, dict(record))

    def set_field(self, index: int, field: str, value: Any) -> bool:
        """Set `field` on the row at `index`. Out of bounds is a no-op (False)."""
        with self._lock:
            if not self._in_bounds(index):
                return False
            self._rows[index][field] = value
            return True

    def delete_at(self, index: int) -> bool:
        """Remove the row at `index`, shifting later rows down. Out of bounds is a no-op (False)."""
        with self._lock:
            if not self._in_bounds(index):
                return False
            del self._rows[index]
            return True
