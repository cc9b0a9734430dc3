"""Shared test fixtures."""

import pytest


@pytest.fixture(autouse=True)
def _reset_verbose():
    from proc_runner import log

    log.set_verbose(None)
    yield
    log.set_verbose(None)


@pytest.fixture
def fake_runner():
    """A TestCommandRunner with an empty queue; push results as needed."""
    from proc_runner.testing import TestCommandRunner

    return TestCommandRunner()
