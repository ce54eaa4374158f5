"""Fee schedule: amount owed per level, academic year and term."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, Numeric, String, text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class FeeSetting(Base):
    """
    Administrator-maintained fee amount. Historical rows are kept with active = false;
    at most one active row may exist per (level, academic_year, term).
    """

    __tablename__ = "fee_settings"
    __table_args__ = (
        Index(
            "uq_fee_setting_active_level_year_term",
            "level",
            "academic_year",
            "term",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active = 1"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    level = Column(String(20), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    academic_year = Column(String(20), nullable=False)
    term = Column(String(20), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
