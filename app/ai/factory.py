from app.ai.config import load_ai_config
from app.ai.errors import AIProviderError
from app.ai.types import AIClient

from app.ai.providers.groq_provider import GroqProvider
from app.ai.providers.openai_provider import OpenAIProvider


def get_ai_client() -> AIClient:
    cfg = load_ai_config()

    if cfg.provider == "groq":
        return GroqProvider(model=cfg.model)

    if cfg.provider == "openai":
        return OpenAIProvider(model=cfg.model)

    raise AIProviderError(
        f"Unsupported AI_PROVIDER='{cfg.provider}'",
        code="llm_disabled",
        status_code=503,
    )
