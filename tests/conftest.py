from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    # The CLI configures structlog to print to the (test-captured) stderr;
    # restore defaults so later tests don't log to a closed stream.
    yield
    structlog.reset_defaults()
