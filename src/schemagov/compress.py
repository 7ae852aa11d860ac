"""Token-efficient reshaping of SPARQL JSON results.

A SPARQL SELECT response repeats every variable name in every binding.
:func:`compress_result` picks one of three shapes depending only on the
number of bindings:

* no rows: :class:`Empty`, serialised as ``[]``;
* up to :data:`TABULAR_THRESHOLD` rows: :class:`RecordList`, one
  ``{variable: value}`` mapping per row, unbound variables omitted;
* more rows: :class:`Tabular`, a header list plus value lists aligned to
  it, unbound variables rendered as ``null``.

The header order comes from ``head.vars`` when the endpoint declares it,
otherwise from the keys of the first binding.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, Field

__all__ = [
    "TABULAR_THRESHOLD",
    "CompressedResult",
    "Empty",
    "Passthrough",
    "RecordList",
    "Tabular",
    "compress_result",
    "row_count",
]

TABULAR_THRESHOLD = 5


class Empty(BaseModel):
    """A result with no rows."""

    kind: Literal["empty"] = "empty"

    def to_payload(self) -> list[Any]:
        return []


class RecordList(BaseModel):
    """Small result: one mapping per row."""

    kind: Literal["records"] = "records"
    records: list[dict[str, str]]

    def to_payload(self) -> list[dict[str, str]]:
        return self.records


class Tabular(BaseModel):
    """Large result: shared headers plus aligned value rows."""

    kind: Literal["tabular"] = "tabular"
    headers: list[str]
    rows: list[list[str | None]]

    def to_payload(self) -> dict[str, Any]:
        return {"headers": self.headers, "rows": self.rows}


class Passthrough(BaseModel):
    """A payload without bindings (e.g. an ASK answer), returned untouched."""

    kind: Literal["raw"] = "raw"
    payload: Any = Field(default=None)

    def to_payload(self) -> Any:
        return self.payload


CompressedResult = Union[Empty, RecordList, Tabular, Passthrough]


def _bindings(result: Any) -> list[dict[str, Any]] | None:
    if not isinstance(result, dict):
        return None
    results = result.get("results")
    if not isinstance(results, dict):
        return None
    bindings = results.get("bindings")
    if not isinstance(bindings, list):
        return None
    return bindings


def row_count(result: Any) -> int:
    """Number of bindings in a SPARQL JSON result (0 when there are none)."""
    bindings = _bindings(result)
    return len(bindings) if bindings is not None else 0


def _value(cell: Any) -> str | None:
    if isinstance(cell, dict):
        return cell.get("value")
    return None


def compress_result(result: Any) -> CompressedResult:
    """Reshape a SPARQL JSON result into its most compact form.

    Parameters
    ----------
    result:
        Parsed ``application/sparql-results+json`` document.

    Returns
    -------
    CompressedResult
        :class:`Empty`, :class:`RecordList` or :class:`Tabular`;
        :class:`Passthrough` when *result* has no ``results.bindings``.
    """
    bindings = _bindings(result)
    if bindings is None:
        return Passthrough(payload=result)

    if not bindings:
        return Empty()

    if len(bindings) > TABULAR_THRESHOLD:
        headers: list[str] = (result.get("head") or {}).get("vars") or list(bindings[0])
        rows = [[_value(b.get(h)) for h in headers] for b in bindings]
        return Tabular(headers=headers, rows=rows)

    records = [
        {var: cell["value"] for var, cell in binding.items() if _value(cell) is not None}
        for binding in bindings
    ]
    return RecordList(records=records)
