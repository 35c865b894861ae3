from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Union, cast

from app.interpretation.assembler import (
    assemble_bullet_points,
    assemble_comparative_analysis,
    assemble_free_text,
    parse_envelope,
)
from app.interpretation.envelope import locate_envelope, trim_response
from app.interpretation.errors import ClassifiedError, ErrorKind, InterpretationError, raw_preview
from app.schemas.generation import BulletPointResult, ComparativeAnalysis, DomainResult, FreeTextResult

logger = logging.getLogger(__name__)


class ResultShape(str, Enum):
    BULLET_POINTS = "bullet_points"
    FREE_TEXT = "free_text"
    COMPARATIVE_ANALYSIS = "comparative_analysis"


class PipelineState(str, Enum):
    START = "Start"
    TRIMMED = "Trimmed"
    ENVELOPE_FOUND = "EnvelopeFound"
    ENVELOPE_NOT_FOUND = "EnvelopeNotFound"
    PARSED = "Parsed"
    ASSEMBLED = "Assembled"
    FAILED = "Failed"


@dataclass
class Interpretation:
    shape: ResultShape
    states: list[PipelineState] = field(default_factory=lambda: [PipelineState.START])
    advisories: list[ErrorKind] = field(default_factory=list)
    result: DomainResult | None = None
    error: ClassifiedError | None = None

    @property
    def state(self) -> PipelineState:
        return self.states[-1]

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.ASSEMBLED

    @property
    def outcome(self) -> Union[DomainResult, ClassifiedError]:
        if self.result is not None:
            return self.result
        return cast(ClassifiedError, self.error)

    def advance(self, state: PipelineState) -> None:
        self.states.append(state)


def _run(interpretation: Interpretation, raw: str | None) -> DomainResult:
    trimmed = trim_response(raw)
    interpretation.advance(PipelineState.TRIMMED)

    if interpretation.shape is ResultShape.FREE_TEXT:
        return assemble_free_text(trimmed, raw)

    envelope = locate_envelope(trimmed)
    if envelope.boundary_found:
        interpretation.advance(PipelineState.ENVELOPE_FOUND)
    else:
        interpretation.advance(PipelineState.ENVELOPE_NOT_FOUND)
        interpretation.advisories.append(ErrorKind.NO_JSON_OBJECT_FOUND)

    document = parse_envelope(envelope, raw)
    interpretation.advance(PipelineState.PARSED)

    if interpretation.shape is ResultShape.BULLET_POINTS:
        return assemble_bullet_points(document, raw)
    return assemble_comparative_analysis(document)


def run_pipeline(raw: str | None, shape: ResultShape) -> Interpretation:
    """Interpret one raw model response for the given result shape.

    Never raises for content problems: the returned ``Interpretation`` ends in
    either ``Assembled`` (with ``result``) or ``Failed`` (with ``error``).
    """
    interpretation = Interpretation(shape=ResultShape(shape))
    logger.debug("interpretation_started shape=%s preview=%r", interpretation.shape.value, raw_preview(raw))
    try:
        interpretation.result = _run(interpretation, raw)
    except InterpretationError as exc:
        interpretation.error = exc.error
        interpretation.advance(PipelineState.FAILED)
        logger.warning(
            "interpretation_failed shape=%s kind=%s field=%s",
            interpretation.shape.value,
            exc.error.kind.value,
            exc.error.field,
        )
    else:
        interpretation.advance(PipelineState.ASSEMBLED)
    return interpretation


def interpret(raw: str | None, shape: ResultShape) -> Union[DomainResult, ClassifiedError]:
    return run_pipeline(raw, shape).outcome


def interpret_bullet_points(raw: str | None) -> Union[BulletPointResult, ClassifiedError]:
    return interpret(raw, ResultShape.BULLET_POINTS)  # type: ignore[return-value]


def interpret_free_text(raw: str | None) -> Union[FreeTextResult, ClassifiedError]:
    return interpret(raw, ResultShape.FREE_TEXT)  # type: ignore[return-value]


def interpret_comparative_analysis(raw: str | None) -> Union[ComparativeAnalysis, ClassifiedError]:
    return interpret(raw, ResultShape.COMPARATIVE_ANALYSIS)  # type: ignore[return-value]
