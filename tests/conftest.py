"""
Shared pytest fixtures for the Building Inspection Platform test suite.

Provides:
    - app: Flask application (session-scoped) with test checklists registered
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - project: Pre-created Project row
    - inspection: Inspection started on the three-section test checklist
"""

import pytest

from building_inspection import create_app
from building_inspection.models import db as _db
from building_inspection.services.checklist_registry import Checklist, Section

TEST_CHECKLIST_ID = "test-house"
EMPTY_CHECKLIST_ID = "test-empty"


def _test_checklists():
    return [
        Checklist(
            id=TEST_CHECKLIST_ID,
            name="Test House",
            sections=[
                Section("exterior", "Exterior", "Walk the perimeter.",
                        ["Cladding", "Windows", "Flashings", "Gutters"]),
                Section("interior", "Interior", "Room by room.",
                        ["Linings", "Floors"]),
                Section("roof", "Roof", "Check the roof.",
                        ["Covering", "Penetrations"]),
            ],
        ),
        Checklist(id=EMPTY_CHECKLIST_ID, name="Empty", sections=[]),
    ]


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    registry = application.extensions["checklist_registry"]
    for checklist in _test_checklists():
        registry.register(checklist)
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def project():
    """Create and return a Project row."""
    from building_inspection.models.project import Project
    p = Project(name="12 Harbour View", address="12 Harbour View Rd", client_name="J. Client")
    _db.session.add(p)
    _db.session.commit()
    return p


@pytest.fixture()
def inspection(project):
    """Start an inspection on the test checklist and return its dict."""
    from building_inspection.services.navigation_service import start_inspection
    return start_inspection({
        "project_id": project.id,
        "checklist_id": TEST_CHECKLIST_ID,
        "inspector_name": "Inspector",
    })
