"""Flask application factory for the schemagov tool API."""

from __future__ import annotations

import logging

from flask import Flask, jsonify

from schemagov.backend.config import Config
from schemagov.backend.services.tool_service import ToolService

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Register consistent JSON error handlers."""

    @app.errorhandler(400)
    def bad_request(exc):
        return jsonify({"error": str(exc.description)}), 400

    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(exc):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(Exception)
    def unhandled(exc):
        app.logger.exception("Unhandled exception")
        return jsonify({"error": "Internal server error"}), 500


def create_app(
    config_class: type[Config] = Config,
    service: ToolService | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    config_class:
        Configuration class (default :class:`Config`).
    service:
        Pre-built :class:`ToolService`; built from *config_class* when
        omitted.

    Returns
    -------
    Flask
        Configured Flask application.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # ── Tools ─────────────────────────────────────────────────────────
    svc = service or ToolService.from_config(config_class)
    app.config["TOOLS"] = svc
    logger.info("Serving %d tools against %s", len(svc.catalogue()), config_class.SPARQL_ENDPOINT)

    # ── Blueprints ────────────────────────────────────────────────────
    from schemagov.backend.routes.tools import tools_bp

    app.register_blueprint(tools_bp, url_prefix="/api/tools")

    # ── Error handlers ────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Health check ──────────────────────────────────────────────────
    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"})

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
