"""Student lookup schemas (read-only view used by the fee ledger)."""

from uuid import UUID

from pydantic import BaseModel


class StudentSummary(BaseModel):
    id: UUID
    student_number: str
    full_name: str
    class_label: str
    form: str
    section: str
    level: str

    class Config:
        from_attributes = True
