from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RAW_PREVIEW_MAX_CHARS = 200


class ErrorKind(str, Enum):
    EMPTY_UPSTREAM_RESPONSE = "EmptyUpstreamResponse"
    # Advisory only: recorded on the trace, never terminal.
    NO_JSON_OBJECT_FOUND = "NoJsonObjectFound"
    MALFORMED_JSON = "MalformedJson"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"


TERMINAL_KINDS = frozenset(
    {
        ErrorKind.EMPTY_UPSTREAM_RESPONSE,
        ErrorKind.MALFORMED_JSON,
        ErrorKind.MISSING_REQUIRED_FIELD,
    }
)

_STATUS_CODES = {
    ErrorKind.EMPTY_UPSTREAM_RESPONSE: 400,
    ErrorKind.MALFORMED_JSON: 500,
    ErrorKind.MISSING_REQUIRED_FIELD: 500,
}

_MESSAGES = {
    ErrorKind.EMPTY_UPSTREAM_RESPONSE: "AI service returned an empty response.",
    ErrorKind.MALFORMED_JSON: "Failed to interpret AI response. The format was not as expected.",
    ErrorKind.MISSING_REQUIRED_FIELD: "AI response JSON was malformed (missing '{field}' array).",
}


class ClassifiedError(BaseModel):
    """Terminal pipeline failure with a bounded preview of the raw response."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    kind: ErrorKind
    raw_preview: str = Field(default="", max_length=RAW_PREVIEW_MAX_CHARS)
    field: str | None = None

    @property
    def status_code(self) -> int:
        return _STATUS_CODES.get(self.kind, 500)

    @property
    def message(self) -> str:
        template = _MESSAGES.get(self.kind, "An internal server error occurred.")
        return template.format(field=self.field or "unknown")

    def to_detail(self) -> dict[str, str]:
        return {
            "message": self.message,
            "kind": self.kind.value,
            "rawPreview": self.raw_preview,
        }


class InterpretationError(Exception):
    """Raised by pipeline stages; the pipeline converts it into a returned value."""

    def __init__(self, error: ClassifiedError):
        super().__init__(f"{error.kind.value}: {error.message}")
        self.error = error


def raw_preview(raw: str | None) -> str:
    return (raw or "")[:RAW_PREVIEW_MAX_CHARS]


def classify(kind: ErrorKind, raw: str | None, *, field: str | None = None) -> ClassifiedError:
    if kind not in TERMINAL_KINDS:
        raise ValueError(f"{kind.value} is advisory and cannot terminate an interpretation")
    return ClassifiedError(kind=kind, raw_preview=raw_preview(raw), field=field)


def fail(kind: ErrorKind, raw: str | None, *, field: str | None = None) -> InterpretationError:
    return InterpretationError(classify(kind, raw, field=field))
