"""Shared fixtures: canned SPARQL results and an in-memory toolkit."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from schemagov.operations import Toolkit
from schemagov.sparql_helper import SparqlHelper
from schemagov.usage_log import MemoryLogSink, UsageLog


def make_result(variables, rows):
    """Build a SPARQL JSON result; ``None`` cells are left unbound."""
    bindings = []
    for row in rows:
        bindings.append({
            var: {"type": "literal", "value": value}
            for var, value in zip(variables, row)
            if value is not None
        })
    return {"head": {"vars": list(variables)}, "results": {"bindings": bindings}}


@pytest.fixture()
def sink():
    return MemoryLogSink()


@pytest.fixture()
def usage_log(sink):
    return UsageLog(sink)


@pytest.fixture()
def helper():
    """SparqlHelper stand-in answering every query with no rows."""
    mock = MagicMock(spec=SparqlHelper)
    mock.select.return_value = make_result(["s"], [])
    return mock


@pytest.fixture()
def toolkit(helper, usage_log):
    return Toolkit(helper, usage_log)


@pytest.fixture()
def sparql_result():
    """Factory fixture for :func:`make_result`."""
    return make_result
