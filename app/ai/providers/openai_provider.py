from __future__ import annotations

import logging
import os
from typing import Optional, Sequence

import openai
from openai import AsyncOpenAI

from app.ai.errors import AIProviderError
from app.ai.types import ChatMessage

logger = logging.getLogger(__name__)


class OpenAIProvider:
    name = "openai"
    api_key_env = "OPENAI_API_KEY"
    base_url_env = "OPENAI_BASE_URL"
    default_base_url: Optional[str] = None

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        max_retries: int = 2,
        temperature: float = 0.2,
    ):
        self.model = model
        self._temperature = temperature
        key = (api_key or os.getenv(self.api_key_env) or "").strip()
        if not key:
            raise AIProviderError(
                f"{self.api_key_env} is missing",
                code="llm_disabled",
                status_code=503,
            )

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=(base_url or os.getenv(self.base_url_env) or self.default_base_url),
            timeout=float(os.getenv("OPENAI_TIMEOUT_S", str(timeout_s))),
            max_retries=int(os.getenv("OPENAI_MAX_RETRIES", str(max_retries))),
        )

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str | None:
        payload = [{"role": m.role, "content": m.content} for m in messages]

        create_kwargs = {
            "model": self.model,
            "messages": payload,
            "temperature": self._temperature if temperature is None else temperature,
        }
        if max_tokens is not None:
            create_kwargs["max_tokens"] = max_tokens

        try:
            response = await self._client.chat.completions.create(**create_kwargs)
        except openai.APITimeoutError as exc:
            raise AIProviderError(
                "AI service timed out.", code="llm_timeout", status_code=504
            ) from exc
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            logger.error("%s_auth_failed model=%s: %s", self.name, self.model, exc)
            raise AIProviderError(
                "AI service rejected the configured credentials.", code="llm_auth"
            ) from exc
        except openai.APIError as exc:
            logger.warning("%s_completion_failed model=%s: %s", self.name, self.model, exc)
            raise AIProviderError("AI service request failed.") from exc

        if not response.choices:
            return None
        return response.choices[0].message.content
