from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import client_ip, get_session
from app.api.schemas.availability import SlotPublic
from app.core.config import settings
from app.services.availability_service import get_available_slots, get_doctor

router = APIRouter(prefix="/availability", tags=["slots"])


@router.get("/doctors/{doctor_id}/slots", response_model=list[SlotPublic])
async def available_slots(
    doctor_id: Annotated[int, Path(gt=0)],
    date_param: date = Query(..., alias="date"),
    duree: int | None = Query(None, description="Slot length in minutes"),
    session: AsyncSession = Depends(get_session),
    ip: str | None = Depends(client_ip),
) -> list[SlotPublic]:
    """Free slots of the doctor on the given date, as HH:MM pairs. An empty list means fully booked."""
    if settings.reject_past_dates and date_param < date.today():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The date cannot be in the past",
        )
    if not await get_doctor(session, doctor_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    slot_length = duree if duree is not None else settings.slot_duration_minutes
    slots = await get_available_slots(session, doctor_id, date_param, slot_length, client_ip=ip)
    return [SlotPublic(**slot.to_json()) for slot in slots]
