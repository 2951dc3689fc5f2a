from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_session
from app.api.schemas.availability import (
    AvailabilityCreateRequest,
    AvailabilityPublic,
    AvailabilityUpdateRequest,
)
from app.models.availability import Availability, AvailabilityCreate, AvailabilityUpdate
from app.services.availability_service import (
    AvailabilityOverlapError,
    create_window,
    delete_window,
    get_doctor,
    list_windows_for_doctor,
    update_window,
)

router = APIRouter(prefix="/availability", tags=["availability"])


def _to_public(a: Availability) -> AvailabilityPublic:
    return AvailabilityPublic(
        id=a.id,
        doctor_id=a.doctor_id,
        day=a.day,
        start_time=a.start_time.strftime("%H:%M"),
        end_time=a.end_time.strftime("%H:%M"),
    )


@router.get("/doctors/{doctor_id}", response_model=list[AvailabilityPublic])
async def list_doctor_availability(
    doctor_id: Annotated[int, Path(gt=0)],
    session: AsyncSession = Depends(get_session),
) -> list[AvailabilityPublic]:
    if not await get_doctor(session, doctor_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    windows = await list_windows_for_doctor(session, doctor_id)
    return [_to_public(w) for w in windows]


@router.post("", response_model=AvailabilityPublic, status_code=status.HTTP_201_CREATED)
async def create_availability(
    body: AvailabilityCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> AvailabilityPublic:
    if not await get_doctor(session, body.doctor_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    data = AvailabilityCreate(
        doctor_id=body.doctor_id,
        day=body.day,
        start_time=body.start_time,
        end_time=body.end_time,
    )
    try:
        window = await create_window(session, data)
    except AvailabilityOverlapError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return _to_public(window)


@router.put("/{window_id}", response_model=AvailabilityPublic)
async def update_availability(
    window_id: Annotated[int, Path(gt=0)],
    body: AvailabilityUpdateRequest,
    session: AsyncSession = Depends(get_session),
) -> AvailabilityPublic:
    data = AvailabilityUpdate(day=body.day, start_time=body.start_time, end_time=body.end_time)
    try:
        window = await update_window(session, window_id, data)
    except AvailabilityOverlapError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    if not window:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Availability not found")
    return _to_public(window)


@router.delete("/{window_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_availability(
    window_id: Annotated[int, Path(gt=0)],
    session: AsyncSession = Depends(get_session),
) -> None:
    ok = await delete_window(session, window_id)
    if not ok:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Availability not found")
