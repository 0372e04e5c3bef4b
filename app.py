# app.py: Flask app factory with config, extensions, blueprints, JSON errors and CLI
import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import Config
from errors import ServiceError, ValidationError
from extensions import db, limiter, migrate
from models.account import Role
from routes.auth import auth_bp
from routes.classes import classes_bp
from routes.controller import controller_bp
from routes.student import student_bp
from services import build_services, get_services
from services.schemas import ControllerProfile


def create_app(overrides=None, config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    if overrides:
        app.config.update(overrides)

    # -----------------------
    # Logging
    # -----------------------
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger("services").setLevel(level)
    logging.getLogger("models").setLevel(level)
    if app.config["SECRET_KEY"] == "dev-secret-change-me" and not app.config.get("TESTING"):
        app.logger.warning("FLASK_SECRET not set; using the development secret key")

    # -----------------------
    # Extensions
    # -----------------------
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    with app.app_context():
        app.extensions["school"] = build_services(app.config, db.session)
        if app.config.get("AUTO_CREATE_TABLES"):
            db.create_all()

    # -----------------------
    # Blueprints
    # -----------------------
    app.register_blueprint(auth_bp)
    app.register_blueprint(controller_bp)
    app.register_blueprint(student_bp)
    app.register_blueprint(classes_bp)

    register_error_handlers(app)
    register_commands(app)

    @app.route("/health")
    def health():
        return jsonify({"status": "OK", "message": f"{app.config['SCHOOL_NAME']} API is running"})

    app.logger.debug("App created with database %s", app.config["SQLALCHEMY_DATABASE_URI"])
    return app


# -----------------------
# Errors: every failure is a JSON body
# -----------------------
def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def handle_service_error(exc):
        if isinstance(exc, ValidationError):
            app.logger.debug("Validation failed: %s", exc.fields)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({"success": False, "error": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        app.logger.exception("Unhandled error")
        db.session.rollback()
        return jsonify({"success": False, "error": "Internal server error"}), 500


# -----------------------
# CLI: bootstrap the first controller
# -----------------------
def register_commands(app):
    @app.cli.command("create-controller")
    @click.option("--name", required=True)
    @click.option("--email", required=True)
    @click.option("--username", default="")
    @click.option("--password", default="", help="Leave empty to generate one.")
    def create_controller(name, email, username, password):
        """Create a controller account and print its credentials once."""
        try:
            profile = ControllerProfile.from_payload(
                {"name": name, "email": email, "username": username, "password": password}
            )
            issued = get_services().issuer.issue(Role.CONTROLLER, profile)
        except ServiceError as exc:
            details = getattr(exc, "fields", None)
            raise click.ClickException(f"{exc.message} {details}" if details else exc.message)
        account = issued.account
        click.echo(f"Controller created: {account.username} (id={account.id})")
        click.echo(f"Password: {issued.password}")
        click.echo(f"QR token: {account.qr_token}")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        app.logger.info("=== Registered routes ===")
        for rule in app.url_map.iter_rules():
            app.logger.info("%-30s -> %s", rule.endpoint, rule.rule)
    app.run(debug=True)
