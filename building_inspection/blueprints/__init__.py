"""
Building Inspection Platform
Blueprint registry and shared error mapping.
"""

import logging

from flask import jsonify, request
from sqlalchemy.orm.exc import StaleDataError

from building_inspection.core.exceptions import (
    BoundaryError,
    ConflictError,
    InvalidSectionError,
    NotFoundError,
    ValidationError,
)
from building_inspection.models import db

logger = logging.getLogger(__name__)


def json_body() -> dict:
    """Request JSON as a dict; a missing or non-object body yields {}."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_error_handlers(bp):
    """Map the service-layer exception types to HTTP responses on *bp*."""

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return jsonify({"error": str(error)}), 404

    @bp.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        db.session.rollback()
        return jsonify({"error": str(error), "details": error.details}), 422

    @bp.errorhandler(InvalidSectionError)
    def _handle_invalid_section(error: InvalidSectionError):
        return jsonify({"error": str(error), "section": error.section_id}), 400

    @bp.errorhandler(BoundaryError)
    def _handle_boundary(error: BoundaryError):
        return jsonify({"error": str(error), "action": error.action,
                        "section": error.section_id}), 400

    @bp.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        db.session.rollback()
        return jsonify({"error": str(error)}), 409

    @bp.errorhandler(StaleDataError)
    def _handle_stale(error: StaleDataError):
        db.session.rollback()
        logger.warning("Concurrent update rejected endpoint=%s: %s", request.endpoint, error)
        return jsonify({"error": "Resource was modified by another request; reload and retry."}), 409

    @bp.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        db.session.rollback()
        logger.exception("Unexpected error in %s endpoint=%s", bp.name, request.endpoint)
        return jsonify({"error": "Internal server error"}), 500
