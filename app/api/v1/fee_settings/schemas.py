"""Fee setting schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class FeeSettingCreate(BaseModel):
    level: str = Field(..., max_length=20, description="O_LEVEL, A_LEVEL")
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    academic_year: str = Field(..., max_length=20)
    term: str = Field(..., max_length=20)
    active: bool = True


class FeeSettingUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    academic_year: Optional[str] = Field(None, max_length=20)
    term: Optional[str] = Field(None, max_length=20)
    active: Optional[bool] = None


class FeeSettingResponse(BaseModel):
    id: UUID
    level: str
    amount: Decimal
    academic_year: str
    term: str
    active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
