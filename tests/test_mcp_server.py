"""Tests for the MCP tool wrappers."""

from __future__ import annotations

import json

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from schemagov import mcp_server
from schemagov.backend.services.tool_service import ToolService
from schemagov.sparql_helper import RemoteQueryError


@pytest.fixture()
def service(toolkit):
    svc = ToolService(toolkit)
    mcp_server.set_service(svc)
    yield svc
    mcp_server.set_service(None)


def test_wrapper_returns_text(service, helper, sparql_result):
    helper.select.return_value = sparql_result(["concept", "label"], [["http://x/c", "Scuola"]])
    text = mcp_server.search_in_vocabulary("http://x/scheme", "scu")
    assert json.loads(text) == [{"concept": "http://x/c", "label": "Scuola"}]
    assert "LIMIT 20" in helper.select.call_args.args[0]


def test_optional_arguments_are_dropped(service, helper, sink):
    mcp_server.explore_classes()
    assert "FILTER" not in helper.select.call_args.args[0]
    assert json.loads(sink.lines[0])["args"] == {"limit": 50}


def test_error_result_raises_tool_error(service, helper):
    helper.select.side_effect = RemoteQueryError(500, "Internal Server Error")
    with pytest.raises(ToolError, match="500 Internal Server Error"):
        mcp_server.query_sparql("SELECT * WHERE { ?s ?p ?o }")
