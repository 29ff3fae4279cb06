import logging

import click
from flask import Flask, jsonify
from flask_cors import CORS

from line_dashboard.analysis.downtime import open_stop_policy
from line_dashboard.config import Config, coerce_integer_settings
from line_dashboard.domain.classifier import ClassificationPolicy
from line_dashboard.errors import ConfigurationError, LineDashboardError
from line_dashboard.models import db
from line_dashboard.repositories import CauseRepository
from line_dashboard.routes import api
from line_dashboard.services.causes import CauseService

logger = logging.getLogger(__name__)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    coerce_integer_settings(app.config)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    # Fail at startup rather than on the first stop written
    app.extensions["classification_policy"] = ClassificationPolicy.from_config(app.config)
    app.extensions["open_stop_policy"] = open_stop_policy(app.config.get("OPEN_STOP_POLICY"))

    db.init_app(app)
    CORS(app)

    app.register_blueprint(api)
    register_error_handlers(app)
    register_commands(app)

    # Create the database tables
    with app.app_context():
        db.create_all()

    return app


def register_error_handlers(app):

    @app.errorhandler(LineDashboardError)
    def handle_line_dashboard_error(error):
        if isinstance(error, ConfigurationError):
            logger.error("Configuration error: %s", error.message)
        else:
            logger.warning("%s: %s", error.__class__.__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"status": "error", "error": "NotFound", "message": "Resource not found"}), 404


def register_commands(app):

    @app.cli.command("init-db")
    def init_db():
        """Create tables and provision the reserved non-considered cause."""
        db.create_all()
        cause = CauseService(CauseRepository(), app.config["NON_CONSIDERED_CAUSE_CODE"]).ensure_cause(
            app.config["NON_CONSIDERED_CAUSE_CODE"],
            app.config["NON_CONSIDERED_CAUSE_NAME"]
        )
        click.echo(f"Database ready, reserved cause: {cause.code}")
