import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for path in (PROJECT_ROOT, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Keep API tests deterministic: no analytics writes, no request throttling.
os.environ.setdefault("ANALYTICS_ENABLED", "0")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from fastapi.testclient import TestClient  # noqa: E402

from app.ai.errors import AIProviderError  # noqa: E402
from app.api.v1.ai import get_ai, get_repository_source  # noqa: E402
from app.main import app  # noqa: E402
from fakes import FakeAIClient, FakeRepositorySource  # noqa: E402

AUTH = {"Authorization": "Bearer gho_test_token"}


class AiApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        self.repos = FakeRepositorySource(
            readmes={"api-server": "# API Server\nA FastAPI service."},
            repositories={"api-server": {"topics": ["fastapi"]}},
            languages={"api-server": ["Python"]},
        )
        self.ai = FakeAIClient()
        app.dependency_overrides[get_repository_source] = lambda: self.repos
        app.dependency_overrides[get_ai] = lambda: self.ai

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_health_reports_provider(self):
        with patch.dict(os.environ, {"AI_PROVIDER": "groq", "AI_MODEL": ""}):
            response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"status": "healthy", "aiProvider": "groq", "aiModel": "llama-3.1-8b-instant"},
        )

    def test_generate_bullets_contract(self):
        self.ai.response = 'Sure! ```json\n{"bulletPoints":["Built X","",42]}``` thanks'
        response = self.client.post(
            "/v1/ai/generate-bullets",
            json={"owner": "octocat", "repoName": "api-server"},
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"bulletPoints": ["Built X"]})

    def test_generate_bullets_missing_field_is_500_with_preview(self):
        self.ai.response = '{"other": 1}'
        response = self.client.post(
            "/v1/ai/generate-bullets",
            json={"owner": "octocat", "repoName": "api-server"},
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 500)
        detail = response.json()["detail"]
        self.assertEqual(detail["kind"], "MissingRequiredField")
        self.assertEqual(detail["rawPreview"], '{"other": 1}')
        self.assertIn("bulletPoints", detail["message"])

    def test_generate_bullets_empty_response_is_400(self):
        self.ai.response = "   "
        response = self.client.post(
            "/v1/ai/generate-bullets",
            json={"owner": "octocat", "repoName": "api-server"},
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["kind"], "EmptyUpstreamResponse")

    def test_generate_bullets_unknown_repo_is_404(self):
        response = self.client.post(
            "/v1/ai/generate-bullets",
            json={"owner": "octocat", "repoName": "ghost"},
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json()["detail"]["message"],
            "Could not find a README file for this repository.",
        )

    def test_cover_letter_contract(self):
        self.ai.response = "  Dear Hiring Manager,\n\nRegards,\noctocat \n"
        response = self.client.post(
            "/v1/ai/generate-cover-letter",
            json={"owner": "octocat", "repoNames": ["api-server"], "positionRequirements": "Python engineer"},
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"coverLetter": "Dear Hiring Manager,\n\nRegards,\noctocat"})

    def test_compare_portfolio_defaults_missing_fields(self):
        self.ai.response = '```json\n{"rankedProjects":[{"projectName":"A"}]}\n```'
        response = self.client.post(
            "/v1/ai/compare-portfolio",
            json={
                "owner": "octocat",
                "jobDescription": "Python engineer",
                "selectedRepositories": [{"name": "api-server", "customTitle": "API"}],
            },
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "identifiedJobSkills": [],
                "matchedSkills": [],
                "missingSkills": [],
                "rankedProjects": [
                    {"projectName": "A", "relevanceJustification": "No justification provided."}
                ],
                "overallSummary": "Unable to generate summary.",
            },
        )

    def test_compare_portfolio_malformed_json_is_500(self):
        self.ai.response = "I could not analyse this portfolio."
        response = self.client.post(
            "/v1/ai/compare-portfolio",
            json={
                "owner": "octocat",
                "jobDescription": "Python engineer",
                "selectedRepositories": [{"name": "api-server"}],
            },
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"]["kind"], "MalformedJson")

    def test_provider_failure_is_bad_gateway(self):
        self.ai.error = AIProviderError("AI service request failed.")
        response = self.client.post(
            "/v1/ai/generate-bullets",
            json={"owner": "octocat", "repoName": "api-server"},
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], {"message": "AI service request failed."})

    def test_missing_access_token_is_401(self):
        del app.dependency_overrides[get_repository_source]
        response = self.client.post(
            "/v1/ai/generate-bullets",
            json={"owner": "octocat", "repoName": "api-server"},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Could not read access token")

    def test_unconfigured_provider_is_503(self):
        del app.dependency_overrides[get_ai]
        with patch.dict(os.environ, {"AI_PROVIDER": "groq", "GROQ_API_KEY": ""}):
            response = self.client.post(
                "/v1/ai/generate-bullets",
                json={"owner": "octocat", "repoName": "api-server"},
                headers=AUTH,
            )
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["detail"]["message"], "GROQ_API_KEY is missing")

    def test_invalid_request_body_is_422(self):
        response = self.client.post("/v1/ai/generate-bullets", json={"owner": "octocat"}, headers=AUTH)
        self.assertEqual(response.status_code, 422)


if __name__ == "__main__":
    unittest.main()
