"""
Audit logging for fee ledger and fee schedule changes. Call on every mutation,
inside the same transaction as the change. Caller must commit.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import AuditAction
from app.core.models import FeeAuditLog


async def log_fee_audit(
    db: AsyncSession,
    reference_table: str,
    reference_id: UUID,
    action_type: AuditAction,
    old_value: Optional[dict],
    new_value: Optional[dict],
) -> None:
    db.add(
        FeeAuditLog(
            reference_table=reference_table,
            reference_id=reference_id,
            action_type=action_type.value,
            old_value=old_value,
            new_value=new_value,
        )
    )
