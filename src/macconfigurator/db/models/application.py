"""Applications table: one row per application, whole aggregate in ``document``."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from macconfigurator.db.base import Base


class ApplicationRow(Base):
    __tablename__ = "applications"

    application_id: Mapped[str] = mapped_column(String(256), primary_key=True)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    # Wire-shaped Application document; plain JSON (not JSONB) keeps namedConfigs order.
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
