"""Readiness check: one short persona call before the debate starts.

The ping goes through the same ``generate(system_prompt, prompt)`` path the
debate uses, with the Researcher's system prompt, so a provider that rejects
the persona prompt fails here instead of after the opening turn.
"""

import asyncio
import logging
from dataclasses import dataclass

from src.errors import ErrorKind, GatewayError
from src.providers.base import AIProvider, classify_failure

logger = logging.getLogger(__name__)

_PING_PROMPT = "Reply with the word OK only."
_TIMEOUT_SEC = 15.0


@dataclass(frozen=True)
class HealthResult:
    provider: str
    model: str
    ok: bool
    latency_sec: float = 0.0
    error: str = ""
    error_kind: ErrorKind | None = None

    def summary(self) -> str:
        if self.ok:
            return f"{self.provider} ({self.model}) answered in {self.latency_sec:.1f}s"
        first_line = self.error.splitlines()[0][:120] if self.error else "unknown error"
        kind = self.error_kind.value if self.error_kind else "error"
        return f"{self.provider} ({self.model}) {kind}: {first_line}"


async def check_provider(
    provider: AIProvider,
    system_prompt: str,
    timeout_sec: float | None = None,
) -> HealthResult:
    """Ping ``provider`` once and classify the outcome.

    Never raises for provider failures; the caller decides whether a failed
    check stops the run.
    """
    timeout = _TIMEOUT_SEC if timeout_sec is None else timeout_sec
    name, model = provider.name(), provider.model_string()

    def failed(error: str, kind: ErrorKind) -> HealthResult:
        logger.debug("Health check failed for %s: %s (%s)", name, error, kind.value)
        return HealthResult(name, model, ok=False, error=error, error_kind=kind)

    try:
        response = await asyncio.wait_for(provider.generate(system_prompt, _PING_PROMPT), timeout=timeout)
    except TimeoutError:
        return failed(f"no reply within {timeout:g}s", ErrorKind.UNAVAILABLE)
    except GatewayError as exc:
        return failed(str(exc), exc.kind)
    except Exception as exc:
        # Adapters wrap SDK errors, but a raw one can still escape the client
        return failed(str(exc) or type(exc).__name__, classify_failure(exc))

    if not response.content.strip():
        return failed("empty reply", ErrorKind.MALFORMED)

    logger.info("Health check passed for %s in %.2fs", name, response.latency_sec)
    return HealthResult(name, model, ok=True, latency_sec=response.latency_sec)
