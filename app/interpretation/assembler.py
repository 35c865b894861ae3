from __future__ import annotations

import json
import logging
from typing import Any

from app.interpretation.decoder import decode_object_array, decode_string, decode_string_array
from app.interpretation.envelope import Envelope
from app.interpretation.errors import ErrorKind, fail
from app.schemas.generation import (
    BULLET_POINT_PLACEHOLDER,
    DEFAULT_OVERALL_SUMMARY,
    DEFAULT_RELEVANCE_JUSTIFICATION,
    UNKNOWN_PROJECT_NAME,
    BulletPointResult,
    ComparativeAnalysis,
    FreeTextResult,
    RankedProject,
)

logger = logging.getLogger(__name__)

BULLET_POINTS_KEY = "bulletPoints"
_SKILL_KEYS = ("identifiedJobSkills", "matchedSkills", "missingSkills")


def parse_envelope(envelope: Envelope, raw: str | None) -> Any:
    # ValueError covers JSONDecodeError and the int digit limit; deep nesting hits RecursionError.
    try:
        return json.loads(envelope.text)
    except (ValueError, RecursionError) as exc:
        if isinstance(exc, json.JSONDecodeError):
            logger.error(
                "envelope_parse_failed boundary_found=%s line=%s col=%s: %s",
                envelope.boundary_found,
                exc.lineno,
                exc.colno,
                exc.msg,
            )
        else:
            logger.error(
                "envelope_parse_failed boundary_found=%s error=%s",
                envelope.boundary_found,
                type(exc).__name__,
            )
        raise fail(ErrorKind.MALFORMED_JSON, raw) from exc


def _unique(items: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        unique.append(item)
    return unique


def decode_ranked_project(item: dict[str, Any]) -> RankedProject:
    name = decode_string(item, "projectName", UNKNOWN_PROJECT_NAME)
    justification = decode_string(item, "relevanceJustification", DEFAULT_RELEVANCE_JUSTIFICATION)
    return RankedProject(project_name=name.value, relevance_justification=justification.value)


def assemble_bullet_points(document: Any, raw: str | None) -> BulletPointResult:
    if not isinstance(document, dict) or not isinstance(document.get(BULLET_POINTS_KEY), list):
        logger.warning("required_field_missing field=%s", BULLET_POINTS_KEY)
        raise fail(ErrorKind.MISSING_REQUIRED_FIELD, raw, field=BULLET_POINTS_KEY)

    bullet_points = decode_string_array(document, BULLET_POINTS_KEY).value
    if not bullet_points:
        # Downstream consumers rely on a non-empty list.
        logger.warning("bullet_points_empty substituting_placeholder=true")
        bullet_points = [BULLET_POINT_PLACEHOLDER]
    return BulletPointResult(bullet_points=bullet_points)


def assemble_free_text(trimmed: str, raw: str | None) -> FreeTextResult:
    text = (trimmed or "").strip()
    if not text:
        raise fail(ErrorKind.EMPTY_UPSTREAM_RESPONSE, raw)
    return FreeTextResult(text=text)


def assemble_comparative_analysis(document: Any) -> ComparativeAnalysis:
    """Build the analysis from whatever fields decoded; nothing here is required."""
    skills = {key: decode_string_array(document, key) for key in _SKILL_KEYS}
    ranked = decode_object_array(document, "rankedProjects", decode_ranked_project)
    summary = decode_string(document, "overallSummary", DEFAULT_OVERALL_SUMMARY)

    missing = [key for key, field in skills.items() if field.defaulted]
    if ranked.defaulted:
        missing.append("rankedProjects")
    if summary.defaulted:
        missing.append("overallSummary")
    if missing:
        logger.debug("comparative_analysis_defaults fields=%s", ",".join(missing))

    return ComparativeAnalysis(
        identified_job_skills=_unique(skills["identifiedJobSkills"].value),
        matched_skills=_unique(skills["matchedSkills"].value),
        missing_skills=_unique(skills["missingSkills"].value),
        ranked_projects=ranked.value,
        overall_summary=summary.value,
    )
