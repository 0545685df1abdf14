"""Shared SQLAlchemy handle for the models package."""
from .. import db
