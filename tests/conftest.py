from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_ggfig_logger():
    # The CLI attaches handlers bound to the (captured) stderr of the calling test.
    yield
    logger = logging.getLogger("ggfig")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
