"""
Building Inspection Platform
Model package — shared Flask-SQLAlchemy handle.

Usage:
    from building_inspection.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
