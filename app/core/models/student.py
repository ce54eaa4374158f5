"""Student master as seen by the fee ledger: identity, class placement and fee level."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class Student(Base):
    """Enrolled student. Owned by the enrollment module; the ledger only reads it."""

    __tablename__ = "students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_number = Column(String(50), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    form = Column(String(20), nullable=False)  # e.g. "Form 5"
    section = Column(String(20), nullable=False)  # e.g. "B"
    level = Column(String(20), nullable=False)  # O_LEVEL | A_LEVEL
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def class_label(self) -> str:
        return f"{self.form} {self.section}"
