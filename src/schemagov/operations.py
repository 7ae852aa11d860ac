"""Catalogue of query operations and the invocation boundary.

Every operation is an :class:`Operation`: a stable name, a pydantic parameter
model carrying the defaults, and a handler that renders one or more
templates, runs them through :class:`~schemagov.sparql_helper.SparqlHelper`
and compresses the answers.

:meth:`Toolkit.invoke` is the only entry point hosting surfaces use.  It
never raises for operation failures; they come back as a
:class:`ToolResult` with ``is_error`` set.  Each invocation, successful or
not, is appended to the :class:`~schemagov.usage_log.UsageLog`.

Keyword and URI parameters are substituted into the queries verbatim (see
:mod:`schemagov.templates`).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from schemagov import queries
from schemagov.analytics import SuggestionEngine, UsageAnalyzer
from schemagov.compress import compress_result, row_count
from schemagov.preview import render_preview
from schemagov.sparql_helper import SparqlHelper
from schemagov.templates import QueryTemplate, with_prefixes
from schemagov.usage_log import UsageLog

logger = logging.getLogger(__name__)

NO_USAGE_LOGS = "No usage logs found yet."
NO_SUGGESTIONS = "No clear patterns found in RAW queries yet to suggest new tools."


class UnknownOperationError(KeyError):
    """Raised when no operation is registered under a name."""


# ── Results ───────────────────────────────────────────────────────


class ToolResult(BaseModel):
    """Text payload handed back to the hosting surface."""

    text: str
    is_error: bool = False


@dataclass
class Outcome:
    """What a handler produced: payload text plus the log summary.

    ``summary`` is ``None`` for operations that are not logged.
    """

    text: str
    summary: str | None = "Success"


def dumps_compact(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def dumps_pretty(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ── Parameter models ──────────────────────────────────────────────


class NoParams(BaseModel):
    pass


class RawQueryParams(BaseModel):
    query: str = Field(description="The SPARQL query to execute")


class LimitParams(BaseModel):
    limit: int = Field(default=50, description="Maximum number of rows")


class SmallLimitParams(BaseModel):
    limit: int = Field(default=20, description="Maximum number of rows")


class ExploreClassesParams(LimitParams):
    filter: str | None = Field(default=None, description="Optional text filter for class URI")


class CoverageParams(BaseModel):
    target_uri: str | None = Field(
        default=None, description="URI of class or property to check coverage for"
    )


class OntologyParams(BaseModel):
    ontology_uri: str = Field(description="The URI of the Ontology (from list_ontologies)")


class VocabularySearchParams(BaseModel):
    scheme_uri: str = Field(description="The URI of the ConceptScheme (from list_vocabularies)")
    keyword: str = Field(description="The search keyword")
    limit: int = 20


class DatasetListParams(BaseModel):
    limit: int = 20
    offset: int = 0


class DatasetParams(BaseModel):
    dataset_uri: str = Field(description="The URI of the Dataset")


class KeywordParams(BaseModel):
    keyword: str = Field(description="The search term (e.g. 'amministrazione')")
    limit: int = 10


class ConceptParams(BaseModel):
    uri: str = Field(description="The URI of the concept to inspect")


class RelationParams(BaseModel):
    source_uri: str
    target_uri: str


class PreviewParams(BaseModel):
    url: str = Field(description="The download URL of the distribution")


# ── Operation registry ────────────────────────────────────────────


@dataclass(frozen=True)
class Operation:
    name: str
    description: str
    params: type[BaseModel]
    handler: Callable[[Toolkit, Any], Outcome]
    error_prefix: str = "Error"
    logged: bool = True

    def schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.params.model_json_schema(),
        }


OPERATIONS: dict[str, Operation] = {}


def operation(
    name: str,
    description: str,
    params: type[BaseModel] = NoParams,
    error_prefix: str = "Error",
    logged: bool = True,
) -> Callable[[Callable[[Toolkit, Any], Outcome]], Callable[[Toolkit, Any], Outcome]]:
    """Register a handler under *name*."""

    def register(handler: Callable[[Toolkit, Any], Outcome]) -> Callable[[Toolkit, Any], Outcome]:
        OPERATIONS[name] = Operation(name, description, params, handler, error_prefix, logged)
        return handler

    return register


# ── Toolkit ───────────────────────────────────────────────────────


class Toolkit:
    """Runs catalogue operations against one endpoint and one usage log."""

    def __init__(
        self,
        helper: SparqlHelper | None = None,
        usage_log: UsageLog | None = None,
        operations: Mapping[str, Operation] | None = None,
    ) -> None:
        self.helper = helper or SparqlHelper()
        self.usage_log = usage_log or UsageLog()
        self.operations = operations if operations is not None else OPERATIONS

    def get(self, name: str) -> Operation:
        try:
            return self.operations[name]
        except KeyError:
            raise UnknownOperationError(name) from None

    def parse_params(self, name: str, args: Mapping[str, Any] | None = None) -> BaseModel:
        """Validate *args* against the operation's parameter model.

        Raises
        ------
        UnknownOperationError
            If *name* is not registered.
        pydantic.ValidationError
            If *args* do not fit the model.
        """
        return self.get(name).params.model_validate(dict(args or {}))

    def invoke(self, name: str, args: Mapping[str, Any] | None = None) -> ToolResult:
        """Validate, run and log one operation; never raises on failure."""
        try:
            params = self.parse_params(name, args)
        except UnknownOperationError:
            return ToolResult(text=f"Error: Unknown tool '{name}'", is_error=True)
        except ValidationError as exc:
            return ToolResult(text=f"Error: Invalid arguments for {name}: {exc}", is_error=True)
        return self.run(name, params)

    def run(self, name: str, params: BaseModel) -> ToolResult:
        op = self.get(name)
        logged_args = params.model_dump(exclude_none=True)
        try:
            outcome = op.handler(self, params)
        except Exception as exc:
            logger.warning(f"{name} failed: {exc}")
            if op.logged:
                self.usage_log.record(name, logged_args, f"Error: {exc}")
            return ToolResult(text=f"{op.error_prefix}: {exc}", is_error=True)

        if op.logged and outcome.summary is not None:
            self.usage_log.record(name, logged_args, outcome.summary)
        return ToolResult(text=outcome.text)

    # -- helpers used by handlers --

    def execute(self, query: str) -> dict[str, Any]:
        """Send a fully rendered query."""
        return self.helper.select(query)

    def select(self, template: QueryTemplate, **values: Any) -> dict[str, Any]:
        return self.execute(template.render(**values))

    def single(self, template: QueryTemplate, **values: Any) -> Outcome:
        """Render, execute and compress one query."""
        result = self.select(template, **values)
        return Outcome(
            text=dumps_compact(compress_result(result).to_payload()),
            summary=f"Success: {row_count(result)} rows",
        )

    def sections(self, templates: Sequence[QueryTemplate], **values: Any) -> dict[str, Any]:
        """Run independent queries one after another, keyed by template name."""
        merged: dict[str, Any] = {}
        for template in templates:
            merged[template.name] = compress_result(self.select(template, **values)).to_payload()
        return merged


# ── Ad-hoc queries ────────────────────────────────────────────────


@operation(
    "query_sparql",
    "Execute a RAW SPARQL query against schema.gov.it. Use this for ad-hoc exploration.",
    RawQueryParams,
    error_prefix="Error executing query",
)
def query_sparql(tk: Toolkit, p: RawQueryParams) -> Outcome:
    result = tk.execute(with_prefixes(p.query))
    return Outcome(
        text=dumps_compact(compress_result(result).to_payload()),
        summary=f"Success: {row_count(result)} rows",
    )


# ── Exploration ───────────────────────────────────────────────────


@operation(
    "explore_classes",
    "List available classes in the ontology to understand content.",
    ExploreClassesParams,
)
def explore_classes(tk: Toolkit, p: ExploreClassesParams) -> Outcome:
    return tk.single(queries.EXPLORE_CLASSES, limit=p.limit, filter=p.filter)


@operation("explore_catalog", "List named graphs or ontologies available in the endpoint.")
def explore_catalog(tk: Toolkit, p: NoParams) -> Outcome:
    # GRAPH listing may be empty on some stores; ontologies are always listed too
    sections = tk.sections([queries.CATALOG_GRAPHS, queries.CATALOG_ONTOLOGIES])
    return Outcome(dumps_compact(sections))


@operation(
    "check_coverage",
    "Analyze the usage coverage of a specific class or property, or global stats.",
    CoverageParams,
)
def check_coverage(tk: Toolkit, p: CoverageParams) -> Outcome:
    if p.target_uri:
        return tk.single(queries.COVERAGE_TARGET, target_uri=p.target_uri)
    return tk.single(queries.COVERAGE_GLOBAL)


@operation("check_quality", "Verify quality issues like missing labels or descriptions.", LimitParams)
def check_quality(tk: Toolkit, p: LimitParams) -> Outcome:
    return tk.single(queries.CHECK_QUALITY, limit=p.limit)


@operation(
    "check_overlaps",
    "Identify potential overlaps (same labels) or explicit mappings.",
    LimitParams,
)
def check_overlaps(tk: Toolkit, p: LimitParams) -> Outcome:
    return tk.single(queries.CHECK_OVERLAPS, limit=p.limit)


# ── Model structure (ontologies) ──────────────────────────────────


@operation("list_ontologies", "List available Ontologies (Data Models) and their titles.", LimitParams)
def list_ontologies(tk: Toolkit, p: LimitParams) -> Outcome:
    return tk.single(queries.LIST_ONTOLOGIES, limit=p.limit)


@operation(
    "explore_ontology",
    "List Classes and Properties defined in a specific Ontology.",
    OntologyParams,
)
def explore_ontology(tk: Toolkit, p: OntologyParams) -> Outcome:
    return tk.single(queries.EXPLORE_ONTOLOGY, ontology_uri=p.ontology_uri)


# ── Controlled vocabularies ───────────────────────────────────────


@operation(
    "list_vocabularies",
    "List available Controlled Vocabularies (ConceptSchemes) and their instance counts.",
    SmallLimitParams,
)
def list_vocabularies(tk: Toolkit, p: SmallLimitParams) -> Outcome:
    return tk.single(queries.LIST_VOCABULARIES, limit=p.limit)


@operation(
    "search_in_vocabulary",
    "Search for concepts within a specific Controlled Vocabulary (ConceptScheme).",
    VocabularySearchParams,
)
def search_in_vocabulary(tk: Toolkit, p: VocabularySearchParams) -> Outcome:
    return tk.single(
        queries.SEARCH_IN_VOCABULARY,
        scheme_uri=p.scheme_uri,
        keyword=p.keyword,
        limit=p.limit,
    )


# ── Data catalogues (datasets) ────────────────────────────────────


@operation(
    "list_datasets",
    "List available Datasets (dcatapit:Dataset) in the catalog.",
    DatasetListParams,
)
def list_datasets(tk: Toolkit, p: DatasetListParams) -> Outcome:
    return tk.single(queries.LIST_DATASETS, limit=p.limit, offset=p.offset)


@operation(
    "explore_dataset",
    "Get details of a specific Dataset (Description, Distributions, Themes).",
    DatasetParams,
)
def explore_dataset(tk: Toolkit, p: DatasetParams) -> Outcome:
    sections = tk.sections(
        [queries.DATASET_METADATA, queries.DATASET_DISTRIBUTIONS],
        dataset_uri=p.dataset_uri,
    )
    return Outcome(dumps_compact(sections))


# ── Concept search and inspection ─────────────────────────────────


@operation(
    "search_concepts",
    "Fuzzy search for concepts/classes/properties by keyword. "
    "Use this when you don't know the exact URI.",
    KeywordParams,
)
def search_concepts(tk: Toolkit, p: KeywordParams) -> Outcome:
    return tk.single(queries.SEARCH_CONCEPTS, keyword=p.keyword, limit=p.limit)


@operation(
    "inspect_concept",
    "Get a comprehensive profile of a concept: definition, hierarchy, usage, and neighbors.",
    ConceptParams,
)
def inspect_concept(tk: Toolkit, p: ConceptParams) -> Outcome:
    return Outcome(dumps_compact(tk.sections(queries.CONCEPT_PROFILE, uri=p.uri)))


@operation(
    "find_relations",
    "Find how two concepts are connected (direct link or via 1 intermediate).",
    RelationParams,
)
def find_relations(tk: Toolkit, p: RelationParams) -> Outcome:
    return tk.single(queries.FIND_RELATIONS, source_uri=p.source_uri, target_uri=p.target_uri)


@operation(
    "suggest_improvements",
    "Analyze the ontology for structural issues (lonely classes, cycles, etc).",
    SmallLimitParams,
)
def suggest_improvements(tk: Toolkit, p: SmallLimitParams) -> Outcome:
    sections = tk.sections([queries.UNUSED_CLASSES, queries.POSSIBLE_CYCLES], limit=p.limit)
    return Outcome(
        dumps_compact(
            {
                "possible_cycles": sections["possible_cycles"],
                "unused_classes": sections["unused_classes"],
            }
        )
    )


# ── Meta operations ───────────────────────────────────────────────


@operation(
    "preview_distribution",
    "Download and preview the first 10 rows of a distribution (CSV/JSON only). "
    "Use this to see actual data.",
    PreviewParams,
)
def preview_distribution(tk: Toolkit, p: PreviewParams) -> Outcome:
    return Outcome(render_preview(tk.helper.fetch(p.url)))


@operation(
    "suggest_new_tools",
    "Analyze usage logs to suggest new potential tools based on frequent RAW queries.",
    error_prefix="Error analyzing usage",
)
def suggest_new_tools(tk: Toolkit, p: NoParams) -> Outcome:
    if not tk.usage_log.exists():
        return Outcome(NO_USAGE_LOGS, summary=None)
    suggestions = SuggestionEngine(tk.usage_log).suggest()
    if not suggestions:
        return Outcome(NO_SUGGESTIONS, summary=None)
    return Outcome(dumps_pretty([s.to_dict() for s in suggestions]))


@operation(
    "analyze_usage",
    "Analyze the server's own usage logs to identify patterns, errors, or frequent queries.",
    error_prefix="Error analyzing logs",
    logged=False,
)
def analyze_usage(tk: Toolkit, p: NoParams) -> Outcome:
    if not tk.usage_log.exists():
        return Outcome(NO_USAGE_LOGS)
    stats = UsageAnalyzer(tk.usage_log).analyze()
    return Outcome(dumps_pretty(stats.to_dict()))
