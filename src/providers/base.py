"""Abstract base for all AI model providers."""

from abc import ABC, abstractmethod

from src.errors import ErrorKind, GatewayError
from src.models import ModelResponse


class ProviderError(GatewayError):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str, kind: ErrorKind = ErrorKind.UNAVAILABLE) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}", kind)


def classify_failure(exc: BaseException) -> ErrorKind:
    """Map an SDK exception onto the gateway failure taxonomy.

    The anthropic and openai SDKs expose ``status_code``; google-genai
    exposes ``code``. Anything without an HTTP status is treated as the
    service being unavailable.
    """
    status = getattr(exc, "status_code", None) or getattr(exc, "code", None)
    message = str(exc).lower()
    if status == 402 or "insufficient_quota" in message:
        return ErrorKind.QUOTA_EXCEEDED
    if status == 429:
        return ErrorKind.QUOTA_EXCEEDED if "quota" in message else ErrorKind.RATE_LIMITED
    return ErrorKind.UNAVAILABLE


class AIProvider(ABC):
    """Abstract base for all AI model providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'gemini', 'claude')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def generate(self, system_prompt: str, prompt: str) -> ModelResponse:
        """Generate a response for the given prompt.

        Args:
            system_prompt: Persona instructions.
            prompt: The user prompt (instruction, corpus and discussion).

        Returns:
            ModelResponse dataclass with content and metadata.

        Raises:
            ProviderError: On API failure, timeout, or invalid response.
        """
        ...
