"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from macconfigurator.db.models.application import ApplicationRow
