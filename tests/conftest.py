from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.classpath_builder import ClasspathBuilder


@pytest.fixture
def classpath_builder(tmp_path: Path) -> ClasspathBuilder:
    """Provide a builder for jars and class directories rooted at the pytest tmp_path."""
    return ClasspathBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _restore_javadep_logger():
    """Undo ``configure_logging`` so caplog keeps seeing javadep records."""
    logger = logging.getLogger("javadep")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
