"""
talentmatch/llm/backends.py

Backend protocols + OpenAI/Anthropic adapters.

Design principles:
- Backends are constructor-injected; no module-level clients.
- One request per call, bounded by a timeout passed to the SDK.
- SDK retries are disabled (max_retries=0): a single failure means fallback.
- Every SDK exception is translated into the talentmatch error taxonomy.
- API keys MUST NOT appear in any log line or exception message.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from talentmatch import config as _config
from talentmatch.core.text_processing import truncate
from talentmatch.errors import (
    BackendError,
    BackendMalformedResponse,
    BackendQuotaExceeded,
    BackendTimeout,
    TalentMatchError,
)
from talentmatch.llm.prompt import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

QUOTA_HINTS = (
    "rate limit",
    "ratelimit",
    "too many requests",
    "quota",
    "insufficient_quota",
    "429",
)

# Top-level optional imports so tests can patch them via module attribute.
# The actual ImportError (if library not installed) is raised at call time.
try:
    import anthropic
except ImportError:
    anthropic = None  # type: ignore[assignment]

try:
    import openai
except ImportError:
    openai = None  # type: ignore[assignment]


class EmbeddingBackend(Protocol):
    def embed(self, text: str) -> List[float]:
        ...


class GenerativeBackend(Protocol):
    def complete(self, prompt: str) -> str:
        ...


def _looks_like_quota(exc: Exception) -> bool:
    msg = (str(exc) or "").lower()
    return any(h in msg for h in QUOTA_HINTS)


def _translate(vendor: str, exc: Exception, sdk) -> TalentMatchError:
    """Map an SDK exception to our taxonomy. Only the exception type name is kept."""
    name = type(exc).__name__
    if isinstance(exc, sdk.APITimeoutError):
        return BackendTimeout(f"{vendor} request timed out")
    if isinstance(exc, sdk.RateLimitError) or _looks_like_quota(exc):
        return BackendQuotaExceeded(f"{vendor} quota or rate limit exceeded: {name}")
    return BackendError(f"{vendor} API error: {name}")


class OpenAIEmbeddingBackend:
    """Embeds text with the OpenAI embeddings endpoint."""

    def __init__(
            self,
            *,
            api_key: str,
            model: Optional[str] = None,
            timeout: Optional[float] = None,
    ) -> None:
        if not api_key:
            raise BackendError("OpenAI API key must not be empty.")
        self._api_key = api_key
        self._model = (model or _config.TALENTMATCH_EMBEDDING_MODEL).strip()
        self._timeout = timeout if timeout is not None else _config.REQUEST_TIMEOUT_SECONDS

    def embed(self, text: str) -> List[float]:
        if openai is None:
            raise BackendError("Package 'openai' is not installed. Run: pip install openai")

        client = openai.OpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
        try:
            response = client.embeddings.create(model=self._model, input=text)
        except (openai.APITimeoutError, openai.RateLimitError, openai.APIError) as exc:
            raise _translate("OpenAI", exc, openai) from None
        except Exception as exc:
            raise BackendError(f"OpenAI embedding failed: {type(exc).__name__}") from None

        try:
            vector = [float(v) for v in response.data[0].embedding]
        except (AttributeError, IndexError, TypeError, ValueError):
            raise BackendMalformedResponse("OpenAI returned no usable embedding.") from None
        if not vector:
            raise BackendMalformedResponse("OpenAI returned an empty embedding.")
        return vector


class AnthropicGenerativeBackend:
    """Text completion via the Anthropic Messages API."""

    _MAX_TOKENS = 2000

    def __init__(
            self,
            *,
            api_key: str,
            model: Optional[str] = None,
            timeout: Optional[float] = None,
    ) -> None:
        if not api_key:
            raise BackendError("Anthropic API key must not be empty.")
        self._api_key = api_key
        self._model = (model or _config.TALENTMATCH_LLM_MODEL).strip()
        self._timeout = timeout if timeout is not None else _config.REQUEST_TIMEOUT_SECONDS

    def complete(self, prompt: str) -> str:
        if anthropic is None:
            raise BackendError("Package 'anthropic' is not installed. Run: pip install anthropic")

        client = anthropic.Anthropic(api_key=self._api_key, max_retries=0)
        try:
            message = client.messages.create(
                model=self._model,
                max_tokens=self._MAX_TOKENS,
                timeout=self._timeout,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except (anthropic.APITimeoutError, anthropic.RateLimitError, anthropic.APIError) as exc:
            raise _translate("Anthropic", exc, anthropic) from None
        except Exception as exc:
            raise BackendError(f"Anthropic call failed: {type(exc).__name__}") from None

        try:
            for block in message.content:
                if getattr(block, "type", None) == "text" and block.text:
                    return block.text
        except (AttributeError, TypeError):
            raise BackendMalformedResponse("Anthropic returned an unreadable message.") from None
        raise BackendMalformedResponse("Anthropic returned no text content.")


class OpenAIGenerativeBackend:
    """Text completion via OpenAI chat completions."""

    _MAX_TOKENS = 2000

    def __init__(
            self,
            *,
            api_key: str,
            model: Optional[str] = None,
            timeout: Optional[float] = None,
    ) -> None:
        if not api_key:
            raise BackendError("OpenAI API key must not be empty.")
        self._api_key = api_key
        self._model = (model or _config.TALENTMATCH_LLM_MODEL).strip()
        self._timeout = timeout if timeout is not None else _config.REQUEST_TIMEOUT_SECONDS

    def complete(self, prompt: str) -> str:
        if openai is None:
            raise BackendError("Package 'openai' is not installed. Run: pip install openai")

        client = openai.OpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)
        try:
            response = client.chat.completions.create(
                model=self._model,
                max_tokens=self._MAX_TOKENS,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except (openai.APITimeoutError, openai.RateLimitError, openai.APIError) as exc:
            raise _translate("OpenAI", exc, openai) from None
        except Exception as exc:
            raise BackendError(f"OpenAI call failed: {type(exc).__name__}") from None

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            raise BackendMalformedResponse("OpenAI returned no choices.") from None
        if not content or not isinstance(content, str):
            raise BackendMalformedResponse("OpenAI returned empty content.")
        return content


def build_generative_backend(
        provider: Optional[str] = None,
        *,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
) -> Optional[GenerativeBackend]:
    """
    Construct the configured text backend, or None when no key is available
    (offline mode: every AI call takes its deterministic fallback).
    """
    provider = (provider or _config.TALENTMATCH_LLM_PROVIDER).strip().lower()
    api_key = _config.resolve_api_key(provider)
    if not api_key:
        logger.info("No API key for provider %r; generative features use fallbacks.", provider)
        return None
    if provider == "anthropic":
        return AnthropicGenerativeBackend(api_key=api_key, model=model, timeout=timeout)
    if provider == "openai":
        return OpenAIGenerativeBackend(api_key=api_key, model=model, timeout=timeout)
    logger.warning("Unsupported provider %r; generative features use fallbacks.", truncate(provider, 40))
    return None


def build_embedding_backend(
        *,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
) -> Optional[EmbeddingBackend]:
    api_key = _config.resolve_api_key("openai")
    if not api_key:
        logger.info("No OpenAI key configured; embeddings use the term-frequency fallback.")
        return None
    return OpenAIEmbeddingBackend(api_key=api_key, model=model, timeout=timeout)
