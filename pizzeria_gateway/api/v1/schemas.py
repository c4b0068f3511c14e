"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class PixRequest(BaseModel):
    """Request body for POST /v1/pix"""

    order_id: str = Field(..., min_length=1, description="Order identifier (UUID)")
    customer_name: Optional[str] = Field(None, max_length=200, description="Payer display name")
    amount: Optional[float] = Field(
        None, description="Ignored; the persisted order total is always charged"
    )


class PixResponse(BaseModel):
    """Response for POST /v1/pix"""

    pix_code: str
    tx_id: str
    amount: float
    provider: str
    pix_key: str


class StoreStatusResponse(BaseModel):
    """Response for GET /v1/store/status"""

    accepting_orders: bool
    open_by_schedule: bool
    manual_open: bool
    message: Optional[str] = None


class OperatingHourSchema(BaseModel):
    """Opening window for one weekday (0=Sunday)"""

    day_of_week: int = Field(..., ge=0, le=6)
    open_time: str
    close_time: str
    is_open: bool


class OperatingHourUpdate(BaseModel):
    """Request body for PUT /v1/store/hours/{day_of_week}"""

    open_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM, 24h")
    close_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM, 24h")
    is_open: bool = True


class SpecialClosureSchema(BaseModel):
    """Date on which the store stays closed"""

    id: int
    closure_date: date
    reason: Optional[str] = None


class SpecialClosureCreate(BaseModel):
    """Request body for POST /v1/store/closures"""

    closure_date: date
    reason: Optional[str] = Field(None, max_length=200)


class HoursResponse(BaseModel):
    """Response for GET /v1/store/hours"""

    hours: List[OperatingHourSchema]
    closures: List[SpecialClosureSchema]
