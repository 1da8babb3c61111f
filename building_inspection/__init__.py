"""
Building Inspection Platform
Flask application factory.

    from building_inspection import create_app
    app = create_app()           # APP_ENV, else "development"
    app = create_app("testing")

Startup order: logging, extensions, checklist registry, request timing,
tables, blueprints, CLI, app-level error handlers.
"""

import logging
import os

from flask import Flask, request
from flask_cors import CORS
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event

from building_inspection.config import config
from building_inspection.middleware.logging_config import configure_logging
from building_inspection.middleware.timing import init_request_timing
from building_inspection.models import db
from building_inspection.services.checklist_registry import init_checklists

logger = logging.getLogger(__name__)

migrate = Migrate()


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _sqlite_foreign_keys(dbapi_conn, connection_record):
    # SQLite leaves foreign keys unenforced per connection unless enabled.
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _init_cors(app):
    origins = app.config.get("CORS_ORIGINS", "*")
    if not origins or origins == "*":
        CORS(app)
        return
    CORS(app, origins=[o.strip() for o in origins.split(",") if o.strip()])


def _create_tables(app):
    # Models must be imported before create_all and for Alembic autogenerate.
    from building_inspection.models import audit, document, inspection, project, review  # noqa: F401

    uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if uri.startswith("sqlite:///") and ":memory:" not in uri:
        os.makedirs(os.path.dirname(uri[len("sqlite:///"):]), exist_ok=True)

    with app.app_context():
        try:
            db.create_all()
            app.logger.info("Inspection schema ready (%s)", uri.split("://", 1)[0])
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)


def _register_blueprints(app):
    from building_inspection.blueprints.health_bp import health_bp
    from building_inspection.blueprints.inspection_bp import inspection_bp
    from building_inspection.blueprints.project_bp import project_bp

    for bp in (health_bp, inspection_bp, project_bp):
        app.register_blueprint(bp)


def _register_cli(app):
    @app.cli.command("seed-clauses")
    def seed_clauses_cmd():
        """Load building-code clauses from CLAUSES_SEED_FILE.

        Does nothing once any clause exists, even if seed codes are missing.
        """
        from building_inspection.services.clause_review_service import seed_clauses
        count = seed_clauses()
        logger.info("Seeded %s building code clauses.", count)


def create_app(config_name=None):
    """Build the Flask app for *config_name* ("development", "testing", "production")."""
    config_name = config_name or os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    cfg = config[config_name]
    # Production is instantiated so missing secrets fail here.
    app.config.from_object(cfg() if config_name == "production" else cfg)

    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    _init_cors(app)
    init_checklists(app)
    init_request_timing(app)

    _create_tables(app)
    _register_blueprints(app)
    _register_cli(app)

    @app.errorhandler(404)
    def not_found(e):
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed", "method": request.method}, 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error("Unhandled error on %s %s: %s", request.method, request.path, e, exc_info=True)
        return {"error": "Internal server error"}, 500

    return app
