"""Store opening status, weekly hours and special closures"""

from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from pizzeria_gateway.api.v1.schemas import (
    HoursResponse,
    OperatingHourSchema,
    OperatingHourUpdate,
    SpecialClosureCreate,
    SpecialClosureSchema,
    StoreStatusResponse,
)
from pizzeria_gateway.api.dependencies import get_store_now
from pizzeria_gateway.infrastructure.database.session import get_db
from pizzeria_gateway.infrastructure.database.repositories import OperatingHoursRepository, SettingsRepository
from pizzeria_gateway.domain.operating_hours import evaluate_store_status
from pizzeria_gateway.infrastructure.observability.metrics import record_store_status

router = APIRouter()


@router.get("/store/status", response_model=StoreStatusResponse)
def get_store_status(
    db: Session = Depends(get_db),
    now: datetime = Depends(get_store_now),
):
    """
    Whether the storefront accepts orders right now.

    Combines the manual open/closed switch with the weekly schedule and
    special closures. When closed, message tells customers when we open.
    """
    hours_repo = OperatingHoursRepository(db)
    store = SettingsRepository(db).get_settings()

    status = evaluate_store_status(
        hours_repo.list_hours(),
        now,
        hours_repo.list_closures(from_date=now.date()),
        manual_open=store.is_open,
    )
    record_store_status(status.accepting_orders)

    return StoreStatusResponse(
        accepting_orders=status.accepting_orders,
        open_by_schedule=status.open_by_schedule,
        manual_open=status.manual_open,
        message=status.message,
    )


@router.get("/store/hours", response_model=HoursResponse)
def get_hours(db: Session = Depends(get_db)):
    """Weekly hours and all special closures"""
    repo = OperatingHoursRepository(db)
    return HoursResponse(
        hours=[
            OperatingHourSchema(day_of_week=h.day, open_time=h.open, close_time=h.close, is_open=h.enabled)
            for h in repo.list_hours()
        ],
        closures=[
            SpecialClosureSchema(id=c.id, closure_date=c.closure_date, reason=c.reason)
            for c in repo.list_closures()
        ],
    )


@router.put("/store/hours/{day_of_week}", response_model=OperatingHourSchema)
def update_hour(
    body: OperatingHourUpdate,
    day_of_week: int = Path(..., ge=0, le=6, description="0=Sunday .. 6=Saturday"),
    db: Session = Depends(get_db),
):
    hour = OperatingHoursRepository(db).upsert_hour(day_of_week, body.open_time, body.close_time, body.is_open)
    db.commit()
    return OperatingHourSchema(day_of_week=hour.day, open_time=hour.open, close_time=hour.close, is_open=hour.enabled)


@router.post("/store/closures", response_model=SpecialClosureSchema, status_code=201)
def add_closure(body: SpecialClosureCreate, db: Session = Depends(get_db)):
    closure = OperatingHoursRepository(db).add_closure(body.closure_date, body.reason)
    if closure is None:
        raise HTTPException(status_code=409, detail="Closure already exists for this date")

    db.commit()
    return SpecialClosureSchema(id=closure.id, closure_date=closure.closure_date, reason=closure.reason)


@router.delete("/store/closures/{closure_id}", status_code=204)
def remove_closure(closure_id: int, db: Session = Depends(get_db)):
    if not OperatingHoursRepository(db).remove_closure(closure_id):
        raise HTTPException(status_code=404, detail="Closure not found")
    db.commit()
