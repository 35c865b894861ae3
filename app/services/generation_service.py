from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any, Sequence, cast

from app.ai.errors import AIProviderError
from app.ai.prompts import (
    build_bullet_messages,
    build_comparison_messages,
    build_cover_letter_messages,
    format_readme_section,
    format_repository_fallback,
)
from app.ai.types import AIClient, ChatMessage
from app.analytics.db import log_ai_analysis_run
from app.core.config import settings
from app.integrations.github import RepositoryNotFound, RepositorySource, RepositorySourceError
from app.interpretation import ClassifiedError, ResultShape, run_pipeline
from app.schemas.generation import (
    BulletPointResult,
    ComparativeAnalysis,
    ComparePortfolioRequest,
    CoverLetterRequest,
    CoverLetterResponse,
    DomainResult,
    FreeTextResult,
    GenerateBulletsRequest,
    RepoAnalysisDetails,
)

logger = logging.getLogger(__name__)

COVER_LETTER_MAX_REPOSITORIES = 4
COMPARISON_TEMPERATURE = 0.1
COMPARISON_MAX_TOKENS = 2048


class GenerationError(RuntimeError):
    def __init__(self, message: str, status_code: int = 500, *, error: ClassifiedError | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error = error

    @property
    def detail(self) -> Any:
        if self.error is not None:
            return self.error.to_detail()
        return {"message": str(self)}


def _model_name(ai: AIClient) -> str:
    return getattr(ai, "model", None) or "unknown"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _log_ai_run(
    *,
    run_id: str,
    tool_slug: str,
    model: str,
    schema_valid: bool,
    status: str,
    latency_ms: int | None,
    error_code: str | None = None,
) -> None:
    try:
        log_ai_analysis_run(
            run_id=run_id,
            tool_slug=tool_slug,
            model=model,
            schema_valid=schema_valid,
            status=status,
            error_code=error_code,
            latency_ms=latency_ms,
        )
    except Exception:  # pragma: no cover - analytics must not break AI responses
        logger.debug("ai_run_logging_failed", exc_info=True)


async def _generate(
    ai: AIClient,
    messages: Sequence[ChatMessage],
    shape: ResultShape,
    *,
    tool_slug: str,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> DomainResult:
    run_id = uuid.uuid4().hex
    model = _model_name(ai)
    started = time.perf_counter()

    # Cancellation propagates from here untouched; the pipeline only runs on a completed fetch.
    try:
        raw = await asyncio.wait_for(
            ai.complete(messages, temperature=temperature, max_tokens=max_tokens),
            timeout=settings.ai_timeout_s,
        )
    except asyncio.TimeoutError as exc:
        logger.warning("ai_completion_timeout tool=%s model=%s timeout_s=%s", tool_slug, model, settings.ai_timeout_s)
        _log_ai_run(
            run_id=run_id,
            tool_slug=tool_slug,
            model=model,
            schema_valid=False,
            status="error",
            error_code="llm_timeout",
            latency_ms=_elapsed_ms(started),
        )
        raise GenerationError("AI service timed out.", status_code=504) from exc
    except AIProviderError as exc:
        _log_ai_run(
            run_id=run_id,
            tool_slug=tool_slug,
            model=model,
            schema_valid=False,
            status="error",
            error_code=exc.code,
            latency_ms=_elapsed_ms(started),
        )
        raise GenerationError(str(exc), status_code=exc.status_code) from exc

    interpretation = run_pipeline(raw, shape)
    if interpretation.error is not None:
        error = interpretation.error
        logger.error(
            "ai_response_rejected tool=%s kind=%s states=%s preview=%r",
            tool_slug,
            error.kind.value,
            ",".join(state.value for state in interpretation.states),
            error.raw_preview,
        )
        _log_ai_run(
            run_id=run_id,
            tool_slug=tool_slug,
            model=model,
            schema_valid=False,
            status="invalid_schema",
            error_code=error.kind.value,
            latency_ms=_elapsed_ms(started),
        )
        raise GenerationError(error.message, status_code=error.status_code, error=error)

    _log_ai_run(
        run_id=run_id,
        tool_slug=tool_slug,
        model=model,
        schema_valid=True,
        status="success",
        error_code=",".join(kind.value for kind in interpretation.advisories) or None,
        latency_ms=_elapsed_ms(started),
    )
    return cast(DomainResult, interpretation.result)


def _source_error(exc: RepositorySourceError) -> GenerationError:
    return GenerationError(str(exc), status_code=exc.status_code)


async def generate_bullet_points(
    payload: GenerateBulletsRequest,
    *,
    repositories: RepositorySource,
    ai: AIClient,
) -> BulletPointResult:
    try:
        readme = await repositories.get_readme(payload.owner, payload.repo_name)
    except RepositoryNotFound as exc:
        raise GenerationError("Could not find a README file for this repository.", status_code=404) from exc
    except RepositorySourceError as exc:
        raise _source_error(exc) from exc

    result = await _generate(
        ai,
        build_bullet_messages(payload.repo_name, readme),
        ResultShape.BULLET_POINTS,
        tool_slug="generate-bullets",
    )
    return cast(BulletPointResult, result)


async def _cover_letter_section(repositories: RepositorySource, owner: str, repo_name: str) -> str | None:
    try:
        readme = await repositories.get_readme(owner, repo_name)
        return format_readme_section(repo_name, readme)
    except RepositoryNotFound:
        logger.warning("readme_not_found owner=%s repo=%s", owner, repo_name)

    try:
        details = await repositories.get_repository(owner, repo_name)
    except RepositorySourceError as exc:
        logger.error("repository_details_failed owner=%s repo=%s: %s", owner, repo_name, exc)
        return None
    return format_repository_fallback(repo_name, details)


async def generate_cover_letter(
    payload: CoverLetterRequest,
    *,
    repositories: RepositorySource,
    ai: AIClient,
) -> CoverLetterResponse:
    sections: list[str] = []
    for repo_name in payload.repo_names[:COVER_LETTER_MAX_REPOSITORIES]:
        try:
            section = await _cover_letter_section(repositories, payload.owner, repo_name)
        except RepositorySourceError as exc:
            raise _source_error(exc) from exc
        if section:
            sections.append(section)

    if not sections:
        raise GenerationError("No README files found for the selected repositories.", status_code=400)

    result = await _generate(
        ai,
        build_cover_letter_messages(payload.owner, payload.position_requirements, sections),
        ResultShape.FREE_TEXT,
        tool_slug="generate-cover-letter",
    )
    return CoverLetterResponse(cover_letter=cast(FreeTextResult, result).text)


async def _collect_repo_details(
    repositories: RepositorySource,
    payload: ComparePortfolioRequest,
) -> list[RepoAnalysisDetails]:
    details: list[RepoAnalysisDetails] = []
    for selected in payload.selected_repositories:
        try:
            repository = await repositories.get_repository(payload.owner, selected.name)
            languages = await repositories.get_languages(payload.owner, selected.name)
            try:
                readme = await repositories.get_readme(payload.owner, selected.name)
            except RepositoryNotFound:
                logger.debug("readme_not_found owner=%s repo=%s", payload.owner, selected.name)
                readme = ""
        except RepositorySourceError as exc:
            logger.warning("repository_details_failed owner=%s repo=%s: %s", payload.owner, selected.name, exc)
            continue

        topics = repository.get("topics")
        details.append(
            RepoAnalysisDetails(
                name=selected.name,
                custom_title=selected.custom_title or selected.name,
                custom_description=selected.custom_description,
                languages=languages,
                topics=[t for t in topics if isinstance(t, str)] if isinstance(topics, list) else [],
                custom_bullet_points=selected.custom_bullet_points,
                readme_content=readme,
            )
        )
    return details


async def compare_portfolio(
    payload: ComparePortfolioRequest,
    *,
    repositories: RepositorySource,
    ai: AIClient,
) -> ComparativeAnalysis:
    if not payload.selected_repositories:
        raise GenerationError(
            "No selected repositories found for analysis. Please save a portfolio with selected repositories first.",
            status_code=400,
        )

    details = await _collect_repo_details(repositories, payload)
    if not details:
        raise GenerationError("Could not fetch details for any of the selected repositories.", status_code=400)

    result = await _generate(
        ai,
        build_comparison_messages(payload.job_description, details),
        ResultShape.COMPARATIVE_ANALYSIS,
        tool_slug="compare-portfolio",
        temperature=COMPARISON_TEMPERATURE,
        max_tokens=COMPARISON_MAX_TOKENS,
    )
    return cast(ComparativeAnalysis, result)
