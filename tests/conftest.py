# tests/conftest.py
"""Shared test configuration.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import logging
import os
import threading
from collections.abc import Iterator

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings
from structlog.stdlib import ProcessorFormatter

from tests.fixtures.metadata import blob_store, metadata_db, sql_metadata_store  # noqa: F401
from tests.fixtures.stores import call_log, fake_blob_store, fake_metadata_store  # noqa: F401

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # SQLite setup per example makes timing vary
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture(autouse=True)
def _no_leaked_sweeper_threads() -> Iterator[None]:
    """Fail a test that leaves sweeper threads running."""
    yield
    leaked = [t.name for t in threading.enumerate() if t.name.startswith("ttlsweep-") and t.is_alive()]
    assert not leaked, f"Sweeper threads still running after test: {leaked}"


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging() so handlers bound to captured streams don't leak."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    for name in ("sqlalchemy", "dynaconf"):
        logging.getLogger(name).setLevel(logging.NOTSET)
    structlog.reset_defaults()
