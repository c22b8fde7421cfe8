"""
Shared fixtures and step definitions for BDD tests.

- runner, context, store: available to all scenario files in this directory
- store: an in-memory Store behind every record-store session (no disk, no Firebase)
- no_logging: autouse, prevents log file creation during tests
- 'the output contains' step: shared across all feature files
"""

from contextlib import contextmanager

import pytest
from unittest.mock import patch
from click.testing import CliRunner
from pytest_bdd import then, parsers

from labelpr.db.seed import seed_store


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def context():
    """Mutable dict shared between Given/When/Then steps within a scenario."""
    return {}


@pytest.fixture
def store():
    s = seed_store()

    @contextmanager
    def fake_open_store(storage=None, readonly=False):
        yield s

    with patch("labelpr.engine.records.open_store", fake_open_store), \
         patch("labelpr.engine.transfer.open_store", fake_open_store):
        yield s


@pytest.fixture(autouse=True)
def no_logging():
    with patch("labelpr.cli.main.configure_logging"):
        yield


@then(parsers.parse('the output contains "{text}"'))
def output_contains(context, text):
    assert text in context["result"].output, (
        f"Expected {text!r} in output:\n{context['result'].output}"
    )


@then(parsers.parse('the output does not contain "{text}"'))
def output_lacks(context, text):
    assert text not in context["result"].output, (
        f"Did not expect {text!r} in output:\n{context['result'].output}"
    )
