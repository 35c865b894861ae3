from .decoder import DecodedField, Provenance, decode_object_array, decode_string, decode_string_array
from .envelope import Envelope, extract_envelope
from .errors import ClassifiedError, ErrorKind, InterpretationError
from .pipeline import (
    Interpretation,
    PipelineState,
    ResultShape,
    interpret,
    interpret_bullet_points,
    interpret_comparative_analysis,
    interpret_free_text,
    run_pipeline,
)

__all__ = [
    "ClassifiedError",
    "DecodedField",
    "Envelope",
    "ErrorKind",
    "Interpretation",
    "InterpretationError",
    "PipelineState",
    "Provenance",
    "ResultShape",
    "decode_object_array",
    "decode_string",
    "decode_string_array",
    "extract_envelope",
    "interpret",
    "interpret_bullet_points",
    "interpret_comparative_analysis",
    "interpret_free_text",
    "run_pipeline",
]
