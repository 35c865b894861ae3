from __future__ import annotations


class AIProviderError(RuntimeError):
    """Transport, auth or configuration failure talking to the text generation provider."""

    def __init__(self, message: str, *, code: str = "llm_unavailable", status_code: int = 502):
        super().__init__(message)
        self.code = code
        self.status_code = status_code
