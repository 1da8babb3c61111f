"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready   readiness probe, 200 while the process serves
    GET /api/v1/health/live    database round-trip plus reference-data status
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from building_inspection.models import db
from building_inspection.models.review import BuildingCodeClause
from building_inspection.services.checklist_registry import get_registry

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")


def _database_check() -> dict:
    t0 = time.perf_counter()
    clause_count = db.session.execute(select(func.count(BuildingCodeClause.id))).scalar_one()
    return {
        "status": "ok",
        "latency_ms": round((time.perf_counter() - t0) * 1000, 1),
        "building_code_clauses": clause_count,
    }


def _checklist_check() -> dict:
    registry = get_registry()
    available = registry.available_checklists()
    default = registry.get_default_checklist()
    return {
        "status": "ok" if available else "empty",
        "available": available,
        "default": default.id if default else None,
    }


@health_bp.route("/ready", methods=["GET"])
def ready():
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Database connectivity (503 when down) and reference-data status.

    An empty checklist directory or an unseeded clause table is reported
    but does not fail the probe.
    """
    checks = {}
    healthy = True

    try:
        checks["database"] = _database_check()
    except SQLAlchemyError as exc:
        db.session.rollback()
        checks["database"] = {"status": "error", "detail": str(exc)}
        healthy = False
        logger.error("Health check: database unavailable: %s", exc)

    checks["checklists"] = _checklist_check()
    checks["app"] = {"debug": current_app.debug, "testing": current_app.testing}

    return jsonify({
        "status": "healthy" if healthy else "degraded",
        "checks": checks,
    }), 200 if healthy else 503
