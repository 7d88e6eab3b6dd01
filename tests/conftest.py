from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from profwrap.engine import InstrumentationEngine
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def engine() -> InstrumentationEngine:
    """An engine wrapping with ``instrument`` instead of the default helper name."""
    engine = InstrumentationEngine()
    engine.symbol = "instrument"
    return engine


@pytest.fixture(autouse=True)
def _reset_profwrap_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("profwrap")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
