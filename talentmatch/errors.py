"""
talentmatch/errors.py

Error taxonomy for the matching engine.

Backend-facing errors (quota, timeout, generic backend failure, malformed
output) are caught at component boundaries and converted into deterministic
fallbacks. InputValidationError is allowed to reach the aggregator, which
scores the offending dimension 0. MissingInputError is the only error meant
to surface to the application layer.
"""
from __future__ import annotations

from typing import Optional


class TalentMatchError(Exception):
    """Base class for every error raised by talentmatch."""


class BackendError(TalentMatchError):
    """The generative/embedding backend failed (network, API error, missing SDK)."""


class BackendQuotaExceeded(BackendError):
    """Quota or rate limit exhausted on the backend."""


class BackendTimeout(BackendError):
    """The backend did not answer within the configured timeout."""


class BackendMalformedResponse(TalentMatchError):
    """The backend answered, but not in a shape we can use."""


class ParseError(BackendMalformedResponse):
    """
    The response sanitizer could not locate valid JSON.
    Carries a truncated copy of the raw response for diagnostics.
    """

    def __init__(self, message: str, raw_snippet: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw_snippet = raw_snippet or ""


class InputValidationError(TalentMatchError):
    """Inputs violate a precondition of a pure computation (e.g. vector dimensions differ)."""


class MissingInputError(TalentMatchError):
    """Required input data does not exist (no active resume, unknown job)."""


# Errors that every AI-touching component converts into its fallback path.
FALLBACK_ERRORS = (BackendError, BackendMalformedResponse)
