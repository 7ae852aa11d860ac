"""Usage statistics and new-tool suggestions mined from the usage log."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field

from schemagov.usage_log import UsageLog

__all__ = [
    "MAX_RECENT_ERRORS",
    "RAW_QUERY_TOOL",
    "SUGGESTION_THRESHOLD",
    "SuggestionEngine",
    "ToolSuggestion",
    "UsageAnalyzer",
    "UsageStats",
]

RAW_QUERY_TOOL = "query_sparql"
MAX_RECENT_ERRORS = 5
SUGGESTION_THRESHOLD = 2

# `a <uri>` type assertions. Textual: `rdf:type` and prefixed names are not seen.
TYPE_ASSERTION = re.compile(r"\ba\s+<([^>]+)>")


@dataclass
class UsageStats:
    """Aggregate view of the usage log."""

    total_calls: int = 0
    tool_breakdown: dict[str, int] = field(default_factory=dict)
    recent_errors: list[str] = field(default_factory=list)
    last_activity: str | None = None

    def to_dict(self) -> dict:
        return {
            "total_calls": self.total_calls,
            "tool_breakdown": self.tool_breakdown,
            "recent_errors": self.recent_errors,
            "last_activity": self.last_activity,
        }


@dataclass(frozen=True)
class ToolSuggestion:
    """Recommendation for a specialised listing operation."""

    type_uri: str
    occurrences: int

    @property
    def tool_name(self) -> str:
        return f"list_{self.type_uri.split('/')[-1].lower()}"

    @property
    def reason(self) -> str:
        return f"You frequently query for instances of <{self.type_uri}> ({self.occurrences} times)."

    def to_dict(self) -> dict:
        return {
            "type": "New Tool Recommendation",
            "uri": self.type_uri,
            "occurrences": self.occurrences,
            "reason": self.reason,
            "suggestion": f"Consider adding a specialized tool: {self.tool_name}",
        }


class UsageAnalyzer:
    """Computes :class:`UsageStats` over a :class:`UsageLog`."""

    def __init__(self, log: UsageLog) -> None:
        self.log = log

    def analyze(self) -> UsageStats:
        """Scan the whole log once.

        The last entry in file order is taken as the most recent activity;
        entries are appended in wall-clock order and never reordered.
        """
        stats = UsageStats()
        seen_errors: set[str] = set()

        for entry in self.log.entries():
            stats.total_calls += 1
            if entry.tool:
                stats.tool_breakdown[entry.tool] = stats.tool_breakdown.get(entry.tool, 0) + 1
            if entry.is_error:
                qualified = f"[{entry.tool}] {entry.summary}"
                if qualified not in seen_errors and len(stats.recent_errors) < MAX_RECENT_ERRORS:
                    stats.recent_errors.append(qualified)
                seen_errors.add(qualified)
            stats.last_activity = entry.timestamp

        return stats


class SuggestionEngine:
    """Mines raw ad-hoc queries for frequently asserted types."""

    def __init__(self, log: UsageLog, threshold: int = SUGGESTION_THRESHOLD) -> None:
        self.log = log
        self.threshold = threshold

    def raw_queries(self) -> list[str]:
        queries = []
        for entry in self.log.entries():
            if entry.tool != RAW_QUERY_TOOL:
                continue
            query = entry.args.get("query")
            if isinstance(query, str) and query:
                queries.append(query)
        return queries

    def type_counts(self) -> Counter[str]:
        counts: Counter[str] = Counter()
        for query in self.raw_queries():
            counts.update(TYPE_ASSERTION.findall(query))
        return counts

    def suggest(self) -> list[ToolSuggestion]:
        """Suggestions in first-seen order; empty when nothing qualifies."""
        return [
            ToolSuggestion(type_uri=uri, occurrences=count)
            for uri, count in self.type_counts().items()
            if count >= self.threshold
        ]
