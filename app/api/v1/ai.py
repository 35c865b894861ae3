from typing import AsyncIterator

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from app.ai.errors import AIProviderError
from app.ai.factory import get_ai_client
from app.ai.types import AIClient
from app.core.rate_limit import rate_limit
from app.core.security import bearer_token, check_api_key
from app.integrations.github import GitHubRepositorySource, RepositorySource
from app.schemas.generation import (
    BulletPointResult,
    ComparativeAnalysis,
    ComparePortfolioRequest,
    CoverLetterRequest,
    CoverLetterResponse,
    GenerateBulletsRequest,
)
from app.services.generation_service import (
    GenerationError,
    compare_portfolio,
    generate_bullet_points,
    generate_cover_letter,
)

router = APIRouter()


def _auth(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    check_api_key(x_api_key)


async def get_repository_source(
    authorization: str | None = Header(default=None),
) -> AsyncIterator[RepositorySource]:
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not read access token")
    async with GitHubRepositorySource(token) as source:
        yield source


def get_ai() -> AIClient:
    try:
        return get_ai_client()
    except AIProviderError as exc:
        raise HTTPException(status_code=exc.status_code, detail={"message": str(exc)}) from exc


def _raise_generation_error(exc: GenerationError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post("/ai/generate-bullets", response_model=BulletPointResult)
@rate_limit()
async def ai_generate_bullets(
    request: Request,
    payload: GenerateBulletsRequest,
    _: None = Depends(_auth),
    repositories: RepositorySource = Depends(get_repository_source),
    ai: AIClient = Depends(get_ai),
):
    try:
        return await generate_bullet_points(payload, repositories=repositories, ai=ai)
    except GenerationError as exc:
        _raise_generation_error(exc)


@router.post("/ai/generate-cover-letter", response_model=CoverLetterResponse)
@rate_limit()
async def ai_generate_cover_letter(
    request: Request,
    payload: CoverLetterRequest,
    _: None = Depends(_auth),
    repositories: RepositorySource = Depends(get_repository_source),
    ai: AIClient = Depends(get_ai),
):
    try:
        return await generate_cover_letter(payload, repositories=repositories, ai=ai)
    except GenerationError as exc:
        _raise_generation_error(exc)


@router.post("/ai/compare-portfolio", response_model=ComparativeAnalysis)
@rate_limit()
async def ai_compare_portfolio(
    request: Request,
    payload: ComparePortfolioRequest,
    _: None = Depends(_auth),
    repositories: RepositorySource = Depends(get_repository_source),
    ai: AIClient = Depends(get_ai),
):
    try:
        return await compare_portfolio(payload, repositories=repositories, ai=ai)
    except GenerationError as exc:
        _raise_generation_error(exc)
