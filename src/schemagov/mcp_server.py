"""MCP server exposing the tool catalogue over stdio.

Each function below is a thin signature for one catalogue operation; the
work happens in :meth:`schemagov.operations.Toolkit.invoke`.  Error results
are raised as :class:`ToolError` so the MCP client sees ``isError``.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from schemagov.backend.config import Config
from schemagov.backend.services.tool_service import ToolService
from schemagov.operations import OPERATIONS

logger = logging.getLogger(__name__)

mcp = FastMCP("schema-gov-it")

_service: ToolService | None = None


def get_service() -> ToolService:
    global _service
    if _service is None:
        _service = ToolService.from_config(Config)
    return _service


def set_service(service: ToolService | None) -> None:
    global _service
    _service = service


def _call(name: str, **args: Any) -> str:
    result = get_service().invoke(name, {k: v for k, v in args.items() if v is not None})
    if result.is_error:
        raise ToolError(result.text)
    return result.text


def _describe(name: str) -> str:
    return OPERATIONS[name].description


@mcp.tool(name="query_sparql", description=_describe("query_sparql"))
def query_sparql(query: str) -> str:
    return _call("query_sparql", query=query)


@mcp.tool(name="explore_classes", description=_describe("explore_classes"))
def explore_classes(limit: int = 50, filter: str | None = None) -> str:
    return _call("explore_classes", limit=limit, filter=filter)


@mcp.tool(name="explore_catalog", description=_describe("explore_catalog"))
def explore_catalog() -> str:
    return _call("explore_catalog")


@mcp.tool(name="check_coverage", description=_describe("check_coverage"))
def check_coverage(target_uri: str | None = None) -> str:
    return _call("check_coverage", target_uri=target_uri)


@mcp.tool(name="check_quality", description=_describe("check_quality"))
def check_quality(limit: int = 50) -> str:
    return _call("check_quality", limit=limit)


@mcp.tool(name="check_overlaps", description=_describe("check_overlaps"))
def check_overlaps(limit: int = 50) -> str:
    return _call("check_overlaps", limit=limit)


@mcp.tool(name="list_ontologies", description=_describe("list_ontologies"))
def list_ontologies(limit: int = 50) -> str:
    return _call("list_ontologies", limit=limit)


@mcp.tool(name="explore_ontology", description=_describe("explore_ontology"))
def explore_ontology(ontology_uri: str) -> str:
    return _call("explore_ontology", ontology_uri=ontology_uri)


@mcp.tool(name="list_vocabularies", description=_describe("list_vocabularies"))
def list_vocabularies(limit: int = 20) -> str:
    return _call("list_vocabularies", limit=limit)


@mcp.tool(name="search_in_vocabulary", description=_describe("search_in_vocabulary"))
def search_in_vocabulary(scheme_uri: str, keyword: str, limit: int = 20) -> str:
    return _call("search_in_vocabulary", scheme_uri=scheme_uri, keyword=keyword, limit=limit)


@mcp.tool(name="list_datasets", description=_describe("list_datasets"))
def list_datasets(limit: int = 20, offset: int = 0) -> str:
    return _call("list_datasets", limit=limit, offset=offset)


@mcp.tool(name="explore_dataset", description=_describe("explore_dataset"))
def explore_dataset(dataset_uri: str) -> str:
    return _call("explore_dataset", dataset_uri=dataset_uri)


@mcp.tool(name="search_concepts", description=_describe("search_concepts"))
def search_concepts(keyword: str, limit: int = 10) -> str:
    return _call("search_concepts", keyword=keyword, limit=limit)


@mcp.tool(name="inspect_concept", description=_describe("inspect_concept"))
def inspect_concept(uri: str) -> str:
    return _call("inspect_concept", uri=uri)


@mcp.tool(name="find_relations", description=_describe("find_relations"))
def find_relations(source_uri: str, target_uri: str) -> str:
    return _call("find_relations", source_uri=source_uri, target_uri=target_uri)


@mcp.tool(name="suggest_improvements", description=_describe("suggest_improvements"))
def suggest_improvements(limit: int = 20) -> str:
    return _call("suggest_improvements", limit=limit)


@mcp.tool(name="preview_distribution", description=_describe("preview_distribution"))
def preview_distribution(url: str) -> str:
    return _call("preview_distribution", url=url)


@mcp.tool(name="suggest_new_tools", description=_describe("suggest_new_tools"))
def suggest_new_tools() -> str:
    return _call("suggest_new_tools")


@mcp.tool(name="analyze_usage", description=_describe("analyze_usage"))
def analyze_usage() -> str:
    return _call("analyze_usage")


def main() -> None:
    logger.info("Schema.gov.it MCP server running on stdio")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
