from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..models.canonical import CanonicalRecord
from ..models.config_models import DEFAULT_BRAND, DEFAULT_TYPE, ResolverDefaults

"""Field resolver: arbitrary extracted row -> CanonicalRecord.

Extracted rows use whatever column names the source document had ("Pattern",
"Dealer Price", "List Price", "Category", ...). Before submission every row
is mapped onto the five canonical fields with ordered alias predicates:

    brand  key == "brand"   (then a literal `brand` key, then the default label)
    model  key contains "model" | "pattern" | "item"
    type   key == "type" or contains "category"   (default label otherwise)
    dp     key contains "dp" | "dealer" | "net"
    mrp    key contains "mrp" | "list" | "price"

Keys are compared trimmed and lower-cased. The row's keys are scanned in
iteration order and the first key satisfying any alias of a field wins. Each
field is searched independently, so with columns ("Dealer Price", "MRP") in
that order "Dealer Price" feeds both dp and mrp ("price" matches first).

resolve_fields is pure and total: it never raises, and re-resolving a
canonical record returns it unchanged.
"""

__all__ = [
    "FieldResolver",
    "coerce_number",
    "find_key",
    "resolve_fields",
]

KeyPredicate = Callable[[str], bool]

_NON_NUMERIC = re.compile(r"[^0-9.]")


def _equals(*names: str) -> KeyPredicate:
    return lambda key: key in names


def _contains(*needles: str) -> KeyPredicate:
    return lambda key: any(n in key for n in needles)


BRAND_PREDICATES: tuple[KeyPredicate, ...] = (_equals("brand"),)
MODEL_PREDICATES: tuple[KeyPredicate, ...] = (_contains("model"), _contains("pattern"), _contains("item"))
TYPE_PREDICATES: tuple[KeyPredicate, ...] = (_equals("type"), _contains("category"))
DP_PREDICATES: tuple[KeyPredicate, ...] = (_contains("dp"), _contains("dealer"), _contains("net"))
MRP_PREDICATES: tuple[KeyPredicate, ...] = (_contains("mrp"), _contains("list"), _contains("price"))


def find_key(record: Mapping[str, Any], predicates: tuple[KeyPredicate, ...]) -> str | None:
    """Return the first key (in iteration order) satisfying any predicate, else None."""
    for key in record:
        name = str(key).strip().lower()
        if any(predicate(name) for predicate in predicates):
            return key
    return None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def _as_text(value: Any) -> str:
    if _is_blank(value):
        return ""
    return str(value)


def coerce_number(value: Any) -> float:
    """Parse a price cell into a float, 0 when nothing numeric is left.

    Every character other than digits and '.' is dropped first, so currency
    symbols and thousands separators are tolerated (and a minus sign is lost).

    >>> coerce_number("₹1,234.50")
    1234.5
    >>> coerce_number("abc")
    0.0
    """
    if _is_blank(value):
        return 0.0
    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return 0.0
    try:
        number = float(cleaned)
    except ValueError:  # "1.2.3", "."
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


@dataclass(frozen=True)
class FieldResolver:
    """Resolver bound to configured default labels."""
    default_brand: str = DEFAULT_BRAND
    default_type: str = DEFAULT_TYPE

    @classmethod
    def from_defaults(cls, defaults: ResolverDefaults) -> FieldResolver:
        return cls(default_brand=defaults.brand, default_type=defaults.type)

    def _lookup(self, record: Mapping[str, Any], predicates: tuple[KeyPredicate, ...]) -> Any:
        key = find_key(record, predicates)
        return None if key is None else record[key]

    def _brand(self, record: Mapping[str, Any]) -> str:
        value = self._lookup(record, BRAND_PREDICATES)
        if _is_blank(value):
            value = record.get("brand")
        if _is_blank(value):
            return self.default_brand
        return _as_text(value)

    def resolve(self, record: Mapping[str, Any]) -> CanonicalRecord:
        type_value = self._lookup(record, TYPE_PREDICATES)
        return CanonicalRecord(
            brand=self._brand(record),
            model=_as_text(self._lookup(record, MODEL_PREDICATES)),
            type=self.default_type if _is_blank(type_value) else _as_text(type_value),
            dp=coerce_number(self._lookup(record, DP_PREDICATES)),
            mrp=coerce_number(self._lookup(record, MRP_PREDICATES)),
        )

    __call__ = resolve


def resolve_fields(
    record: Mapping[str, Any],
    default_brand: str = DEFAULT_BRAND,
    default_type: str = DEFAULT_TYPE,
) -> CanonicalRecord:
    """Map one arbitrary record onto the canonical shape."""
    return FieldResolver(default_brand=default_brand, default_type=default_type).resolve(record)
