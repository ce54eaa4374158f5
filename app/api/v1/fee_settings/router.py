"""Fee settings router: administrator-maintained fee schedule."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import FeeSettingCreate, FeeSettingResponse, FeeSettingUpdate
from . import service

router = APIRouter(prefix="/api/v1/fee-settings", tags=["fee-settings"])


@router.get("", response_model=List[FeeSettingResponse])
async def list_fee_settings(
    active_only: bool = Query(False, description="Return only active settings"),
    db: AsyncSession = Depends(get_db),
) -> List[FeeSettingResponse]:
    return await service.list_fee_settings(db, active_only=active_only)


@router.get("/level/{level}", response_model=FeeSettingResponse)
async def get_fee_setting_by_level(
    level: str,
    academic_year: str = Query(...),
    term: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> FeeSettingResponse:
    try:
        return await service.get_fee_setting_by_level(db, level, academic_year, term)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{fee_setting_id}", response_model=FeeSettingResponse)
async def get_fee_setting(
    fee_setting_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> FeeSettingResponse:
    try:
        return await service.get_fee_setting(db, fee_setting_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("", response_model=FeeSettingResponse, status_code=status.HTTP_201_CREATED)
async def create_fee_setting(
    payload: FeeSettingCreate,
    db: AsyncSession = Depends(get_db),
) -> FeeSettingResponse:
    try:
        return await service.create_fee_setting(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{fee_setting_id}", response_model=FeeSettingResponse)
async def update_fee_setting(
    fee_setting_id: UUID,
    payload: FeeSettingUpdate,
    db: AsyncSession = Depends(get_db),
) -> FeeSettingResponse:
    try:
        return await service.update_fee_setting(db, fee_setting_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{fee_setting_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fee_setting(
    fee_setting_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await service.delete_fee_setting(db, fee_setting_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
