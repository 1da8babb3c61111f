"""
Building Inspection Platform
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])

Environment:
    DATABASE_URL / TEST_DATABASE_URL   SQLAlchemy URL (postgres:// accepted)
    CHECKLISTS_DIR                     directory of checklist YAML files
    DEFAULT_CHECKLIST_ID               checklist used when none is requested
    CLAUSES_SEED_FILE                  building-code clause seed YAML
    LOG_LEVEL, LOG_FORMAT              see middleware/logging_config.py
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
_package_dir = os.path.abspath(os.path.dirname(__file__))

# Local SQLite fallback under instance/
_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'inspections_dev.db')}"

# Random per-process key for development; production must set SECRET_KEY
_DEV_SECRET = secrets.token_hex(32)


def _database_url(env_var: str, fallback: str | None) -> str | None:
    """Read a database URL, rewriting the legacy postgres:// scheme SQLAlchemy 2 rejects."""
    raw = os.getenv(env_var, "")
    if not raw:
        return fallback
    return raw.replace("postgres://", "postgresql://", 1)


class Config:
    """Settings shared by every environment."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True, "pool_recycle": 300}

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Checklist definitions: one YAML file per checklist, id = file name
    CHECKLISTS_DIR = os.getenv("CHECKLISTS_DIR", os.path.join(basedir, "checklists"))
    DEFAULT_CHECKLIST_ID = os.getenv("DEFAULT_CHECKLIST_ID", "nz-ppi")

    # Building-code clause reference data loaded by `flask seed-clauses`
    CLAUSES_SEED_FILE = os.getenv(
        "CLAUSES_SEED_FILE", os.path.join(_package_dir, "data", "building_code_clauses.yaml"),
    )

    # "json" | "readable"; unset picks by environment
    LOG_FORMAT = os.getenv("LOG_FORMAT")


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _database_url("DATABASE_URL", _SQLITE_DEV)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = _database_url("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS = {}


class ProductionConfig(Config):
    """Production settings; instantiated so missing secrets fail at startup."""

    SQLALCHEMY_DATABASE_URI = _database_url("DATABASE_URL", None)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,
        "pool_timeout": 20,
    }

    def __init__(self):
        missing = [name for name, ok in (
            ("DATABASE_URL", self.SQLALCHEMY_DATABASE_URI),
            ("SECRET_KEY", os.getenv("SECRET_KEY")),
        ) if not ok]
        if missing:
            raise RuntimeError(f"Production requires environment variable(s): {', '.join(missing)}")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
