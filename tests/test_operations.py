"""Tests for the operation catalogue and the invocation boundary."""

from __future__ import annotations

import json

import pytest

from schemagov.operations import NO_SUGGESTIONS, NO_USAGE_LOGS, OPERATIONS
from schemagov.sparql_helper import (
    FetchedDocument,
    RemoteQueryError,
    RequestTimeoutError,
)
from schemagov.templates import PREFIXES

EXPECTED_TOOLS = {
    "query_sparql",
    "explore_classes",
    "explore_catalog",
    "check_coverage",
    "check_quality",
    "check_overlaps",
    "list_ontologies",
    "explore_ontology",
    "list_vocabularies",
    "search_in_vocabulary",
    "list_datasets",
    "explore_dataset",
    "search_concepts",
    "inspect_concept",
    "find_relations",
    "suggest_improvements",
    "preview_distribution",
    "suggest_new_tools",
    "analyze_usage",
}


def _sent_queries(helper):
    return [c.args[0] for c in helper.select.call_args_list]


def _log_entries(sink):
    return [json.loads(line) for line in sink.lines]


def test_catalogue_is_complete():
    assert set(OPERATIONS) == EXPECTED_TOOLS


def test_search_concepts_scenario(toolkit, helper, sink, sparql_result):
    helper.select.return_value = sparql_result(
        ["subject", "type", "label"],
        [[f"http://example.org/c{i}", "skos:Concept", f"Amministrazione {i}"] for i in range(7)],
    )

    result = toolkit.invoke("search_concepts", {"keyword": "amministrazione"})

    assert not result.is_error
    (query,) = _sent_queries(helper)
    assert query.startswith(PREFIXES)
    assert 'FILTER(REGEX(STR(?label), "amministrazione", "i"))' in query
    assert "LIMIT 10" in query

    payload = json.loads(result.text)
    assert payload["headers"] == ["subject", "type", "label"]
    assert len(payload["rows"]) == 7
    # compact JSON
    assert ", " not in result.text and '": ' not in result.text

    (entry,) = _log_entries(sink)
    assert entry["tool"] == "search_concepts"
    assert entry["args"] == {"keyword": "amministrazione", "limit": 10}
    assert entry["summary"] == "Success: 7 rows"


def test_small_result_is_record_list(toolkit, helper, sparql_result):
    helper.select.return_value = sparql_result(["ont", "label"], [["http://x/o", "Onto"]])
    result = toolkit.invoke("list_ontologies", {"limit": 3})
    assert json.loads(result.text) == [{"ont": "http://x/o", "label": "Onto"}]
    assert "LIMIT 3" in _sent_queries(helper)[0]


def test_empty_result(toolkit):
    result = toolkit.invoke("check_quality")
    assert result.text == "[]"


def test_raw_query_is_prefixed_and_logged(toolkit, helper, sink):
    query = "SELECT ?s WHERE { ?s a <http://example.org/Thing> }"
    toolkit.invoke("query_sparql", {"query": query})

    assert _sent_queries(helper) == [PREFIXES + "\n" + query]
    (entry,) = _log_entries(sink)
    assert entry["args"] == {"query": query}
    assert entry["summary"] == "Success: 0 rows"


def test_remote_error_becomes_error_result(toolkit, helper, sink):
    helper.select.side_effect = RemoteQueryError(400, "Bad Request")

    result = toolkit.invoke("query_sparql", {"query": "SELEKT"})

    assert result.is_error
    assert result.text == "Error executing query: SPARQL request failed: 400 Bad Request"
    (entry,) = _log_entries(sink)
    assert entry["summary"] == "Error: SPARQL request failed: 400 Bad Request"


def test_error_in_high_level_operation(toolkit, helper, sink):
    helper.select.side_effect = RemoteQueryError(503, "Service Unavailable")
    result = toolkit.invoke("list_datasets")
    assert result.is_error
    assert result.text == "Error: SPARQL request failed: 503 Service Unavailable"
    assert _log_entries(sink)[0]["summary"].startswith("Error")


def test_log_failure_does_not_change_result(helper, sparql_result):
    from unittest.mock import MagicMock

    from schemagov.operations import Toolkit
    from schemagov.usage_log import LogWriteError, UsageLog

    broken = MagicMock()
    broken.append.side_effect = LogWriteError("disk full")
    helper.select.return_value = sparql_result(["s"], [["a"]])
    toolkit = Toolkit(helper, UsageLog(broken))

    result = toolkit.invoke("check_overlaps")

    assert not result.is_error
    assert json.loads(result.text) == [{"s": "a"}]


def test_unknown_tool(toolkit):
    result = toolkit.invoke("drop_everything")
    assert result.is_error
    assert "Unknown tool" in result.text


def test_invalid_arguments(toolkit, helper):
    result = toolkit.invoke("search_concepts", {"limit": 5})
    assert result.is_error
    assert "keyword" in result.text
    helper.select.assert_not_called()


def test_explore_classes_filter_optional(toolkit, helper):
    toolkit.invoke("explore_classes")
    toolkit.invoke("explore_classes", {"filter": "Person", "limit": 5})
    without, with_filter = _sent_queries(helper)
    assert "FILTER" not in without
    assert "LIMIT 50" in without
    assert 'REGEX(STR(?class), "Person", "i")' in with_filter
    assert "LIMIT 5" in with_filter


def test_check_coverage_variants(toolkit, helper):
    toolkit.invoke("check_coverage")
    toolkit.invoke("check_coverage", {"target_uri": "http://example.org/P"})
    global_q, target_q = _sent_queries(helper)
    assert "GROUP BY ?type" in global_q
    assert target_q.count("<http://example.org/P>") == 3


def test_explore_catalog_runs_two_queries(toolkit, helper, sink):
    result = toolkit.invoke("explore_catalog")
    assert json.loads(result.text) == {"graphs": [], "ontologies": []}
    assert len(_sent_queries(helper)) == 2
    assert _log_entries(sink)[0]["summary"] == "Success"


def test_explore_ontology(toolkit, helper, sink):
    toolkit.invoke("explore_ontology", {"ontology_uri": "https://w3id.org/italia/onto/CPV/"})
    (query,) = _sent_queries(helper)
    assert 'STRSTARTS(STR(?item), "https://w3id.org/italia/onto/CPV/")' in query
    assert "LIMIT 200" in query
    assert _log_entries(sink)[0]["summary"] == "Success: 0 rows"


def test_explore_dataset(toolkit, helper, sparql_result):
    helper.select.side_effect = [
        sparql_result(["p", "o"], [["dct:title", "Scuole"]]),
        sparql_result(["dist", "format", "url"], []),
    ]
    result = toolkit.invoke("explore_dataset", {"dataset_uri": "http://example.org/ds"})
    assert json.loads(result.text) == {
        "metadata": [{"p": "dct:title", "o": "Scuole"}],
        "distributions": [],
    }
    for query in _sent_queries(helper):
        assert "<http://example.org/ds>" in query


def test_inspect_concept_runs_five_queries_in_order(toolkit, helper, sparql_result):
    helper.select.side_effect = [
        sparql_result(["p", "o"], [["rdfs:label", "Scuola"]]),
        sparql_result(["type", "parent", "child"], []),
        sparql_result(["instanceCount"], [["12"]]),
        sparql_result(["p", "sType"], []),
        sparql_result(["p", "oType"], []),
    ]

    result = toolkit.invoke("inspect_concept", {"uri": "http://example.org/Scuola"})

    profile = json.loads(result.text)
    assert list(profile) == ["definition", "hierarchy", "usage", "incoming", "outgoing"]
    assert profile["usage"] == [{"instanceCount": "12"}]
    sent = _sent_queries(helper)
    assert len(sent) == 5
    assert "FILTER(ISLITERAL(?o))" in sent[0]
    assert "COUNT(?s)" in sent[2]


def test_multi_query_failure_aborts_operation(toolkit, helper, sparql_result):
    helper.select.side_effect = [
        sparql_result(["p", "o"], []),
        RemoteQueryError(500, "Internal Server Error"),
    ]
    result = toolkit.invoke("inspect_concept", {"uri": "http://example.org/X"})
    assert result.is_error
    assert helper.select.call_count == 2


def test_suggest_improvements_keys(toolkit):
    result = toolkit.invoke("suggest_improvements")
    assert list(json.loads(result.text)) == ["possible_cycles", "unused_classes"]


def test_list_datasets_defaults(toolkit, helper):
    toolkit.invoke("list_datasets")
    query = _sent_queries(helper)[0]
    assert "LIMIT 20" in query
    assert "OFFSET 0" in query


def test_preview_distribution(toolkit, helper, sink):
    helper.fetch.return_value = FetchedDocument(
        url="http://example.org/d.csv", content_type="text/csv", text="a,b\n1,2"
    )
    result = toolkit.invoke("preview_distribution", {"url": "http://example.org/d.csv"})
    assert result.text == "Preview of http://example.org/d.csv:\n\na,b\n1,2"
    assert _log_entries(sink)[0]["tool"] == "preview_distribution"


def test_preview_timeout(toolkit, helper):
    helper.fetch.side_effect = RequestTimeoutError("Fetching x timed out after 10.0s")
    result = toolkit.invoke("preview_distribution", {"url": "http://example.org/slow"})
    assert result.is_error
    assert "timed out" in result.text


class TestMetaOperations:
    """analyze_usage and suggest_new_tools."""

    def test_no_log_yet(self, toolkit):
        assert toolkit.invoke("analyze_usage").text == NO_USAGE_LOGS
        assert toolkit.invoke("suggest_new_tools").text == NO_USAGE_LOGS

    def test_analyze_usage_reports_stats(self, toolkit, helper, sink):
        toolkit.invoke("list_ontologies")
        helper.select.side_effect = RemoteQueryError(504, "Gateway Timeout")
        toolkit.invoke("list_ontologies")

        result = toolkit.invoke("analyze_usage")

        stats = json.loads(result.text)
        assert stats["total_calls"] == 2
        assert stats["tool_breakdown"] == {"list_ontologies": 2}
        assert stats["recent_errors"] == [
            "[list_ontologies] Error: SPARQL request failed: 504 Gateway Timeout"
        ]
        assert stats["last_activity"] == json.loads(sink.lines[-1])["timestamp"]
        # analyze_usage does not log itself
        assert len(sink.lines) == 2

    def test_suggest_new_tools(self, toolkit, sink):
        query = "SELECT ?s WHERE { ?s a <http://example.org/onto/Scuola> }"
        toolkit.invoke("query_sparql", {"query": query})
        assert toolkit.invoke("suggest_new_tools").text == NO_SUGGESTIONS

        toolkit.invoke("query_sparql", {"query": query})
        result = toolkit.invoke("suggest_new_tools")

        (suggestion,) = json.loads(result.text)
        assert suggestion["uri"] == "http://example.org/onto/Scuola"
        assert suggestion["occurrences"] == 2
        assert suggestion["suggestion"].endswith("list_scuola")


@pytest.mark.parametrize("name", sorted(EXPECTED_TOOLS))
def test_every_operation_has_schema(name):
    schema = OPERATIONS[name].schema()
    assert schema["name"] == name
    assert schema["description"]
    assert schema["parameters"]["type"] == "object"
