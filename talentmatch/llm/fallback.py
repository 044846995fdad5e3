"""
talentmatch/llm/fallback.py

Primary/fallback combinator shared by every AI-touching component.

The primary path talks to a backend; the fallback is a plain deterministic
function of the same inputs. Backend failures and malformed output never
escape: they are logged at WARNING and the fallback result is returned.
Anything else (programming errors, InputValidationError) propagates.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from talentmatch.errors import FALLBACK_ERRORS

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_fallback(
        primary: Optional[Callable[[], T]],
        fallback: Callable[[], T],
        *,
        label: str,
) -> T:
    """
    Run primary(); on a backend/malformed failure run fallback() instead.
    A primary of None (no backend configured) goes straight to the fallback.
    """
    if primary is None:
        logger.debug("%s: no backend configured, using fallback", label)
        return fallback()
    try:
        return primary()
    except FALLBACK_ERRORS as exc:
        # Message only: adapters already scrub key material from it.
        logger.warning("%s: falling back (%s: %s)", label, type(exc).__name__, exc)
        return fallback()

