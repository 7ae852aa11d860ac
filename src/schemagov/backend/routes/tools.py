"""Tool catalogue routes: /api/tools/*."""

from __future__ import annotations

from flask import Blueprint, abort, current_app, jsonify, request
from pydantic import ValidationError

from schemagov.backend.services.tool_service import ToolService
from schemagov.operations import UnknownOperationError

tools_bp = Blueprint("tools", __name__)


def _get_svc() -> ToolService:
    return current_app.config["TOOLS"]


@tools_bp.route("/", methods=["GET"])
def list_tools():
    """Return every operation with its parameter schema."""
    return jsonify(_get_svc().catalogue())


@tools_bp.route("/<name>", methods=["POST"])
def invoke_tool(name: str):
    """Invoke one operation with the JSON body as its arguments.

    Operation failures are reported in the payload (``is_error``), not as
    HTTP errors; only unknown names and invalid arguments are.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        abort(400, description="Arguments must be a JSON object")

    svc = _get_svc()
    try:
        params = svc.parse_params(name, data)
    except UnknownOperationError:
        abort(404)
    except ValidationError as exc:
        return jsonify({"error": "Invalid arguments", "details": exc.errors(include_url=False)}), 400

    result = svc.run(name, params)
    return jsonify(result.model_dump())
