"""Tool execution service: wires a :class:`~schemagov.operations.Toolkit`
from configuration.

All operation logic lives in :mod:`schemagov.operations`.  This service
builds the SPARQL helper and usage log the configuration asks for and
exposes the catalogue to the hosting surfaces (Flask, MCP, CLI).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from schemagov.backend.config import Config
from schemagov.operations import Toolkit, ToolResult
from schemagov.sparql_helper import SparqlHelper
from schemagov.usage_log import FileLogSink, MemoryLogSink, UsageLog


def build_usage_log(path: str) -> UsageLog:
    if path == ":memory:":
        return UsageLog(MemoryLogSink())
    return UsageLog(FileLogSink(path))


class ToolService:
    """Invoke catalogue operations, delegating to :class:`Toolkit`."""

    def __init__(self, toolkit: Toolkit) -> None:
        self.toolkit = toolkit

    @classmethod
    def from_config(cls, config_class: type[Config] = Config) -> ToolService:
        helper = SparqlHelper(
            config_class.SPARQL_ENDPOINT,
            timeout=config_class.SPARQL_TIMEOUT,
            fetch_timeout=config_class.PREVIEW_TIMEOUT,
        )
        return cls(Toolkit(helper, build_usage_log(config_class.USAGE_LOG_PATH)))

    def catalogue(self) -> list[dict[str, Any]]:
        """Name, description and JSON schema of every operation."""
        return [op.schema() for op in self.toolkit.operations.values()]

    def parse_params(self, name: str, args: dict[str, Any]) -> BaseModel:
        return self.toolkit.parse_params(name, args)

    def run(self, name: str, params: BaseModel) -> ToolResult:
        return self.toolkit.run(name, params)

    def invoke(self, name: str, args: dict[str, Any] | None = None) -> ToolResult:
        return self.toolkit.invoke(name, args)
