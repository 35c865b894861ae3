from __future__ import annotations

from typing import Any, Sequence

from app.ai.types import ChatMessage
from app.schemas.generation import RepoAnalysisDetails

README_SNIPPET_MAX_CHARS = 2000

BULLETS_SYSTEM_PROMPT = (
    "You are an expert resume writer. Your task is to generate 4-5 concise, impactful bullet points "
    "for a software developer's resume based on a project's README file. Each bullet point should start "
    "with a unique action verb and highlight a technical achievement, a key feature, or the problem the "
    "project solves. Focus on quantifiable results if possible. **CRITICAL INSTRUCTION: Respond ONLY with "
    "a valid JSON object. The JSON must contain a single key 'bulletPoints' which is an array of strings. "
    "Do not include any other text, explanations, or markdown code blocks like ```json.** Example: "
    '{"bulletPoints":["Developed a feature using Python and FastAPI.", "Increased performance by 20%.", '
    '"Implemented user authentication."]}'
)

COVER_LETTER_SYSTEM_PROMPT = (
    "You are an expert cover letter writer for software developers. You create personalized, professional, "
    "and compelling cover letters based on a user's projects (from READMEs) and a target job description."
)

COMPARISON_SYSTEM_PROMPT = (
    "You are an expert career advisor and technical recruiter. You specialize in analyzing software developer "
    "portfolios (projects) against job descriptions to identify skill matches, gaps, and project relevance. "
    "You respond with precise, actionable insights in a structured JSON format."
)

_COVER_LETTER_INSTRUCTIONS = """
Instructions:
Using the project details provided, write a professional and compelling cover letter tailored specifically to the job description above.
- Highlight relevant skills, technologies, and experiences demonstrated in the projects.
- Write three paragraphs: an introduction stating the purpose for writing, a body linking skills, experience and qualifications directly to the job requirements, and a closing that thanks the reader, reiterates interest and suggests a follow-up or interview.
- Connect the projects' features, problems solved, and outcomes to the requirements and responsibilities mentioned in the job description.
- Maintain a professional tone and structure.
- The cover letter should be addressed to the hiring manager and signed off by the applicant (use the GitHub username: {owner}).

Return the complete cover letter as a single string."""

_COMPARISON_INSTRUCTIONS = """
Instructions:
Act as an expert career advisor and technical recruiter. Your task is to perform a deep, semantic analysis comparing the candidate's selected projects against the provided job description.

1.  **Skills Identification:** Based SOLELY on the 'Job Description', identify the core technical skills, programming languages, frameworks, tools, and methodologies explicitly required or strongly desired. Provide this list as 'identifiedJobSkills'.
2.  **Skills Matched:** Determine which of the identified skills the candidate demonstrably possesses based on their project work (languages used, topics, descriptions, bullet points, README content). Provide this list as 'matchedSkills'.
3.  **Skills Missing/Gaps:** Identify which of the identified skills are NOT sufficiently demonstrated by the listed projects. Provide this list as 'missingSkills'.
4.  **Project Relevance Ranking:** Rank the projects from MOST relevant to LEAST relevant to the job description and justify each ranking briefly. Provide this ranked list as 'rankedProjects'.
5.  **Overall Summary:** Provide a concise, maximum 3 sentence summary of how well the portfolio aligns with the job description, mentioning strengths and key areas for improvement. Provide this as 'overallSummary'.

Format your entire response STRICTLY as a JSON object with the following structure:
{
  "identifiedJobSkills": ["skill1", "skill2", ...],
  "matchedSkills": ["matched_skill1", "matched_skill2", ...],
  "missingSkills": ["missing_skill1", "missing_skill2", ...],
  "rankedProjects": [
    {"projectName": "Project A", "relevanceJustification": "Brief reason why it's ranked 1st"},
    {"projectName": "Project B", "relevanceJustification": "Brief reason why it's ranked 2nd"},
    ...
  ],
  "overallSummary": "A concise summary of the alignment."
}

Ensure the JSON is valid and parseable. Do not include any other text, explanations, or markdown code blocks like ```json.
"""


def build_bullet_messages(repo_name: str, readme_content: str) -> list[ChatMessage]:
    user = f"Here is the README content for the project '{repo_name}':\n\n---\n{readme_content}\n---"
    return [
        ChatMessage(role="system", content=BULLETS_SYSTEM_PROMPT),
        ChatMessage(role="user", content=user),
    ]


def format_readme_section(repo_name: str, readme_content: str) -> str:
    return f"--- Repository: {repo_name} ---\n{readme_content}\n--- End of {repo_name} ---"


def format_repository_fallback(repo_name: str, repository: dict[str, Any]) -> str:
    lines = [
        f"--- Repository: {repo_name} (No README) ---",
        f"Description: {repository.get('description') or 'No description provided'}",
        f"Language: {repository.get('language') or 'Not specified'}",
        f"Stars: {repository.get('stargazers_count') or 0}",
        f"Forks: {repository.get('forks_count') or 0}",
        f"URL: {repository.get('html_url') or ''}",
    ]
    return "\n".join(lines) + "\n"


def build_cover_letter_messages(
    owner: str,
    position_requirements: str,
    project_sections: Sequence[str],
) -> list[ChatMessage]:
    project_details = "\n\n".join(project_sections)
    user = (
        f"\nJob Description:\n{position_requirements}\n\n"
        f"Project Details (from READMEs):\n{project_details}\n"
        + _COVER_LETTER_INSTRUCTIONS.replace("{owner}", owner)
    )
    return [
        ChatMessage(role="system", content=COVER_LETTER_SYSTEM_PROMPT),
        ChatMessage(role="user", content=user),
    ]


def truncate_readme(readme_content: str, limit: int = README_SNIPPET_MAX_CHARS) -> str:
    if len(readme_content) > limit:
        return readme_content[:limit] + "..."
    return readme_content


def build_project_details(repos: Sequence[RepoAnalysisDetails]) -> str:
    lines: list[str] = []
    for repo in repos:
        lines.append(f"--- Project: {repo.name} ---")
        lines.append(f"Title: {repo.custom_title}")
        if repo.custom_description:
            lines.append(f"Description: {repo.custom_description}")
        if repo.languages:
            lines.append(f"Languages: {', '.join(repo.languages)}")
        if repo.topics:
            lines.append(f"Topics/Technologies: {', '.join(repo.topics)}")
        if repo.custom_bullet_points:
            lines.append("Key Contributions:")
            lines.extend(f"  - {bullet}" for bullet in repo.custom_bullet_points)
        if repo.readme_content:
            lines.append(
                f"README Snippet (first {README_SNIPPET_MAX_CHARS} chars): {truncate_readme(repo.readme_content)}"
            )
        lines.append("--- End of Project ---\n")
    return "\n".join(lines)


def build_comparison_messages(job_description: str, repos: Sequence[RepoAnalysisDetails]) -> list[ChatMessage]:
    user = (
        f"\nJob Description:\n{job_description}\n\n"
        f"Candidate's Projects:\n{build_project_details(repos)}\n"
        + _COMPARISON_INSTRUCTIONS
    )
    return [
        ChatMessage(role="system", content=COMPARISON_SYSTEM_PROMPT),
        ChatMessage(role="user", content=user),
    ]
