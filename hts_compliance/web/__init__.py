"""
Flask application factory for the compliance desk.

    /api/gemini          classification gateway (POST, OPTIONS)
    /api/context         document context record
    /api/entries[/<id>]  manual override entries
"""

import logging

from flask import Flask, jsonify
from flask_cors import CORS

from hts_compliance import config
from hts_compliance.web.db import init_db

logger = logging.getLogger(__name__)

GATEWAY_EXTENSION = "classification_gateway"


def create_app(test_config=None, provider=None, enable_gateway=True):
    """
    Build the Flask app.

    Args:
        test_config: Config overrides applied before the database binds
        provider: ClassificationProvider to use; defaults to Gemini, which
                  requires GEMINI_API_KEY (missing key is fatal at startup)
        enable_gateway: False for record-only tooling that never calls the
                        provider (CLI context/entries commands)
    """
    app = Flask(__name__)
    app.config.from_mapping(
        SQLALCHEMY_DATABASE_URI=config.SQLALCHEMY_DATABASE_URI,
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        MAX_CONTENT_LENGTH=config.MAX_CONTENT_LENGTH_MB * 1024 * 1024,
        ALLOWED_ORIGIN=config.ALLOWED_ORIGIN,
        ADMIN_API_TOKEN=config.ADMIN_API_TOKEN,
    )
    if test_config:
        app.config.update(test_config)

    init_db(app)
    if enable_gateway:
        register_gateway(app, provider)
    register_blueprints(app)
    register_error_handlers(app)

    CORS(
        app,
        resources={r"/api/*": {"origins": [app.config["ALLOWED_ORIGIN"]]}},
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    return app


def register_gateway(app, provider=None):
    from hts_compliance.services.classification_gateway import (
        ClassificationGateway,
        GeminiProvider,
    )

    if provider is None:
        provider = GeminiProvider()
        logger.info(f"Classification provider: Gemini ({provider.model})")
    app.extensions[GATEWAY_EXTENSION] = ClassificationGateway(provider)


def register_blueprints(app):
    # Views import the record store, which imports web.db; load them after the package
    from hts_compliance.web.views import gateway_views, records_views

    app.register_blueprint(gateway_views.bp)
    app.register_blueprint(records_views.bp)


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({
            "error": f"Request body exceeds {config.MAX_CONTENT_LENGTH_MB} MB"
        }), 413
