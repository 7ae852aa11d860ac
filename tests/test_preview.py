"""Tests for distribution previews."""

from __future__ import annotations

import json

from schemagov.preview import render_preview
from schemagov.sparql_helper import FetchedDocument


def test_json_array_truncated_to_ten():
    doc = FetchedDocument(
        url="http://example.org/api",
        content_type="application/json; charset=utf-8",
        text=json.dumps([{"id": i} for i in range(25)]),
    )
    text = render_preview(doc)
    header, body = text.split("\n\n", 1)
    assert header == "Preview of http://example.org/api:"
    assert json.loads(body) == [{"id": i} for i in range(10)]


def test_json_results_field_is_unwrapped():
    doc = FetchedDocument(
        url="http://example.org/dump.json",
        content_type="application/octet-stream",
        text=json.dumps({"results": [1, 2, 3], "data": [9]}),
    )
    body = render_preview(doc).split("\n\n", 1)[1]
    assert json.loads(body) == [1, 2, 3]


def test_json_data_field_is_unwrapped():
    doc = FetchedDocument(
        url="http://example.org/x.json",
        content_type="",
        text=json.dumps({"data": list(range(12))}),
    )
    body = render_preview(doc).split("\n\n", 1)[1]
    assert json.loads(body) == list(range(10))


def test_json_object_is_wrapped():
    doc = FetchedDocument(url="http://example.org/x.json", content_type="", text='{"a": 1}')
    body = render_preview(doc).split("\n\n", 1)[1]
    assert json.loads(body) == [{"a": 1}]


def test_invalid_json_falls_back_to_raw_text():
    doc = FetchedDocument(
        url="http://example.org/x.json", content_type="application/json", text="x" * 3000
    )
    body = render_preview(doc).split("\n\n", 1)[1]
    assert body == "x" * 2000 + "\n... (truncated)"


def test_text_truncated_to_fifteen_lines():
    lines = [f"row{i},value" for i in range(40)]
    doc = FetchedDocument(
        url="http://example.org/data.csv", content_type="text/csv", text="\n".join(lines)
    )
    body = render_preview(doc).split("\n\n", 1)[1]
    assert body.split("\n") == lines[:15]
