import logging

import pytest

from talentmatch.errors import (
    BackendError,
    BackendQuotaExceeded,
    BackendTimeout,
    InputValidationError,
    ParseError,
)
from talentmatch.llm.fallback import with_fallback


def test_primary_result_is_returned_when_it_succeeds() -> None:
    assert with_fallback(lambda: "ai", lambda: "rules", label="t") == "ai"


def test_no_primary_goes_straight_to_fallback() -> None:
    assert with_fallback(None, lambda: "rules", label="t") == "rules"


@pytest.mark.parametrize(
    "exc",
    [BackendQuotaExceeded("quota"), BackendTimeout("slow"), BackendError("boom"), ParseError("bad json")],
)
def test_backend_failures_take_the_fallback(exc, caplog) -> None:
    def primary():
        raise exc

    with caplog.at_level(logging.WARNING, logger="talentmatch.llm.fallback"):
        assert with_fallback(primary, lambda: "rules", label="unit") == "rules"
    assert "unit: falling back" in caplog.text


def test_programming_errors_propagate() -> None:
    def primary():
        raise InputValidationError("dims differ")

    with pytest.raises(InputValidationError):
        with_fallback(primary, lambda: "rules", label="t")
