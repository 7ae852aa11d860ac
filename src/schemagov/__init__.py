"""schemagov: token-efficient SPARQL tools for schema.gov.it.

Main modules:
- templates / queries: SPARQL templates for every catalogue operation
- sparql_helper: single-shot SPARQL client
- compress: compact reshaping of SPARQL JSON results
- usage_log / analytics: invocation log, usage statistics, tool suggestions
- operations: the catalogue and its invocation boundary
"""

from .analytics import SuggestionEngine, ToolSuggestion, UsageAnalyzer, UsageStats
from .compress import Empty, RecordList, Tabular, compress_result
from .operations import OPERATIONS, Toolkit, ToolResult
from .sparql_helper import SparqlHelper
from .templates import PREFIXES, QueryTemplate
from .usage_log import FileLogSink, MemoryLogSink, UsageLog, UsageLogEntry

# Import version information
from .version import VERSION

__all__ = [
    "OPERATIONS",
    "PREFIXES",
    "VERSION",
    "Empty",
    "FileLogSink",
    "MemoryLogSink",
    "QueryTemplate",
    "RecordList",
    "SparqlHelper",
    "SuggestionEngine",
    "Tabular",
    "ToolResult",
    "ToolSuggestion",
    "Toolkit",
    "UsageAnalyzer",
    "UsageLog",
    "UsageLogEntry",
    "UsageStats",
    "compress_result",
]
