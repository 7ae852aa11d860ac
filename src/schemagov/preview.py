"""Preview of a distribution's first records."""

from __future__ import annotations

import json
from typing import Any

from schemagov.sparql_helper import FetchedDocument

JSON_PREVIEW_ITEMS = 10
TEXT_PREVIEW_LINES = 15
RAW_PREVIEW_CHARS = 2000


def _is_json(doc: FetchedDocument) -> bool:
    return "json" in doc.content_type.lower() or doc.url.endswith(".json")


def _records(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("results", "data"):
            if payload.get(key):
                value = payload[key]
                return value if isinstance(value, list) else [value]
    return [payload]


def render_preview(doc: FetchedDocument) -> str:
    """Truncated view of *doc*: first JSON records, else first text lines."""
    if _is_json(doc):
        try:
            payload = json.loads(doc.text)
        except json.JSONDecodeError:
            body = doc.text[:RAW_PREVIEW_CHARS] + "\n... (truncated)"
        else:
            body = json.dumps(_records(payload)[:JSON_PREVIEW_ITEMS], indent=2, ensure_ascii=False)
    else:
        # CSV or plain text; a few extra lines keep the header in view
        body = "\n".join(doc.text.split("\n")[:TEXT_PREVIEW_LINES])
    return f"Preview of {doc.url}:\n\n{body}"
