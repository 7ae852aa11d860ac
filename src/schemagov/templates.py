"""SPARQL query templates: the rendering half of every catalogue operation.

A :class:`QueryTemplate` is a static body with ``${name}`` substitution
points.  Rendering prepends the shared :data:`PREFIXES` block and fills each
point with the caller's value:

* integers (limits, offsets) are written as bare numbers;
* strings (keywords, URIs) are written **verbatim**, without any escaping.

The second rule is a trust boundary: callers are expected to pass well-formed
fragments.  A keyword containing a double quote produces a malformed query
that the endpoint rejects; nothing is rejected locally.

Optional parameters never leave a hole in the query.  A template lists the
clause each optional parameter turns on (e.g. a ``FILTER``); when the value
is absent the clause renders as an empty string.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from string import Template
from typing import Any

from rdflib.namespace import DCAT, DCTERMS, FOAF, OWL, RDF, RDFS, SKOS, XSD

__all__ = [
    "PREFIXES",
    "QueryTemplate",
    "TemplateError",
    "with_prefixes",
]

DCATAPIT = "http://dati.gov.it/onto/dcatapit#"

_PREFIX_MAP: dict[str, str] = {
    "rdf": str(RDF),
    "rdfs": str(RDFS),
    "owl": str(OWL),
    "skos": str(SKOS),
    "dct": str(DCTERMS),
    "xsd": str(XSD),
    "dcat": str(DCAT),
    "foaf": str(FOAF),
}

PREFIXES = "\n".join(f"PREFIX {p}: <{ns}>" for p, ns in _PREFIX_MAP.items()) + "\n"


class TemplateError(ValueError):
    """Raised when a template is rendered without a required parameter."""


def with_prefixes(body: str) -> str:
    """Return *body* preceded by the shared prefix block."""
    return PREFIXES + "\n" + body


def _format_value(value: Any) -> str:
    # ints render bare, strings verbatim
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class QueryTemplate:
    """A named SPARQL body with ``${...}`` substitution points.

    Parameters
    ----------
    name:
        Identifier of the query, unique within its operation.
    body:
        SPARQL text without prefixes.
    params:
        Names of the caller parameters consumed by ``body``.
    clauses:
        Optional-parameter clauses: ``{param: fragment}``.  The fragment is
        itself a template and is substituted into ``body`` at ``${param}``
        only when the parameter is present; otherwise an empty string is
        used.
    """

    name: str
    body: str
    params: frozenset[str] = field(default_factory=frozenset)
    clauses: Mapping[str, str] = field(default_factory=dict)

    def render(self, **values: Any) -> str:
        """Render the full query (prefixes included)."""
        return with_prefixes(self.render_body(**values))

    def render_body(self, **values: Any) -> str:
        """Render the body only, without the prefix block."""
        subs: dict[str, str] = {}
        for param in self.params:
            value = values.get(param)
            if param in self.clauses:
                if value is None or value == "":
                    subs[param] = ""
                else:
                    clause = Template(self.clauses[param])
                    subs[param] = clause.substitute({param: _format_value(value)})
                continue
            if value is None:
                raise TemplateError(
                    f"Query '{self.name}' requires parameter '{param}'"
                )
            subs[param] = _format_value(value)
        return Template(self.body).substitute(subs)
