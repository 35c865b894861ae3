from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNKNOWN_PROJECT_NAME = "Unknown Project"
DEFAULT_RELEVANCE_JUSTIFICATION = "No justification provided."
DEFAULT_OVERALL_SUMMARY = "Unable to generate summary."
BULLET_POINT_PLACEHOLDER = "Generated bullet point placeholder."


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateBulletsRequest(CamelModel):
    owner: str = Field(min_length=1, max_length=100)
    repo_name: str = Field(min_length=1, max_length=200)


class CoverLetterRequest(CamelModel):
    owner: str = Field(min_length=1, max_length=100)
    repo_names: list[str] = Field(default_factory=list, max_length=50)
    position_requirements: str = Field(default="", max_length=50000)


class SelectedRepository(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    custom_title: str = ""
    custom_description: str = ""
    custom_bullet_points: list[str] = Field(default_factory=list)


class ComparePortfolioRequest(CamelModel):
    owner: str = Field(min_length=1, max_length=100)
    job_description: str = Field(min_length=1, max_length=50000)
    selected_repositories: list[SelectedRepository] = Field(default_factory=list, max_length=50)


class RepoAnalysisDetails(BaseModel):
    name: str
    custom_title: str
    custom_description: str = ""
    languages: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    custom_bullet_points: list[str] = Field(default_factory=list)
    readme_content: str = ""


class BulletPointResult(CamelModel):
    bullet_points: list[str] = Field(min_length=1)


class FreeTextResult(CamelModel):
    text: str = Field(min_length=1)


class CoverLetterResponse(CamelModel):
    cover_letter: str


class RankedProject(CamelModel):
    project_name: str = UNKNOWN_PROJECT_NAME
    relevance_justification: str = DEFAULT_RELEVANCE_JUSTIFICATION


class ComparativeAnalysis(CamelModel):
    identified_job_skills: list[str] = Field(default_factory=list)
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    ranked_projects: list[RankedProject] = Field(default_factory=list)
    overall_summary: str = DEFAULT_OVERALL_SUMMARY


DomainResult = Union[BulletPointResult, FreeTextResult, ComparativeAnalysis]
