from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

_MISSING = object()


class Provenance(str, Enum):
    PARSED = "Parsed"
    DEFAULTED = "Defaulted"


@dataclass(frozen=True)
class DecodedField(Generic[T]):
    value: T
    provenance: Provenance

    @property
    def parsed(self) -> bool:
        return self.provenance is Provenance.PARSED

    @property
    def defaulted(self) -> bool:
        return self.provenance is Provenance.DEFAULTED


def parsed(value: T) -> DecodedField[T]:
    return DecodedField(value=value, provenance=Provenance.PARSED)


def defaulted(value: T, *, key: str, reason: str) -> DecodedField[T]:
    logger.debug("field_defaulted key=%s reason=%s", key, reason)
    return DecodedField(value=value, provenance=Provenance.DEFAULTED)


def _lookup(obj: Any, key: str) -> Any:
    if not isinstance(obj, dict):
        return _MISSING
    return obj.get(key, _MISSING)


def _kind(value: Any) -> str:
    if value is _MISSING:
        return "absent"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def decode_string(obj: Any, key: str, default: str) -> DecodedField[str]:
    value = _lookup(obj, key)
    if isinstance(value, str):
        return parsed(value.strip())
    return defaulted(default, key=key, reason=_kind(value))


def decode_string_array(obj: Any, key: str) -> DecodedField[list[str]]:
    """Collect the non-empty string elements of an array field.

    Elements that are not strings, or are blank after trimming, are dropped
    rather than coerced. An array with nothing usable is still ``Parsed``.
    """
    value = _lookup(obj, key)
    if not isinstance(value, list):
        return defaulted([], key=key, reason=_kind(value))

    items: list[str] = []
    dropped = 0
    for element in value:
        if not isinstance(element, str) or not element.strip():
            dropped += 1
            continue
        items.append(element.strip())
    if dropped:
        logger.debug("array_elements_dropped key=%s dropped=%s kept=%s", key, dropped, len(items))
    return parsed(items)


def decode_object_array(
    obj: Any,
    key: str,
    item_decoder: Callable[[dict[str, Any]], U],
) -> DecodedField[list[U]]:
    value = _lookup(obj, key)
    if not isinstance(value, list):
        return defaulted([], key=key, reason=_kind(value))

    items = [item_decoder(element) for element in value if isinstance(element, dict)]
    dropped = len(value) - len(items)
    if dropped:
        logger.debug("array_elements_dropped key=%s dropped=%s kept=%s", key, dropped, len(items))
    return parsed(items)
