"""Data access layer for orders, store settings and opening hours"""

import uuid
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from pizzeria_gateway.infrastructure.database.models import (
    Order,
    PizzeriaSettings,
    OperatingHourRecord,
    SpecialClosureRecord,
)
from pizzeria_gateway.domain.models import OperatingHour, SpecialClosure, StoreSettings
from pizzeria_gateway.domain.exceptions import InvalidOrderError, OrderNotFoundError, OrderStorageError


class OrderRepository:
    """Repository for orders"""

    def __init__(self, db: Session):
        self.db = db

    def get_order_total(self, order_id: uuid.UUID) -> Decimal:
        """
        Read the persisted order total; the only trusted amount for a charge.

        Raises:
            OrderNotFoundError: No order with this id
            InvalidOrderError: Total is missing or not a number
            OrderStorageError: Database read failed
        """
        try:
            order = self.db.query(Order).filter(Order.id == order_id).first()
        except SQLAlchemyError as e:
            raise OrderStorageError(f"Failed to read order {order_id}: {e}") from e

        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        if order.total is None:
            raise InvalidOrderError(f"Order {order_id} has no total")

        try:
            total = Decimal(str(order.total))
        except InvalidOperation as e:
            raise InvalidOrderError(f"Order {order_id} total is unreadable: {order.total!r}") from e
        if not total.is_finite():
            raise InvalidOrderError(f"Order {order_id} total is unreadable: {order.total!r}")
        return total

    def set_pix_transaction_id(self, order_id: uuid.UUID, tx_id: str) -> None:
        """Record the PIX txid on the order for later reconciliation"""
        try:
            self.db.query(Order).filter(Order.id == order_id).update(
                {Order.pix_transaction_id: tx_id}, synchronize_session=False
            )
            self.db.flush()
        except SQLAlchemyError as e:
            raise OrderStorageError(f"Failed to save txid for order {order_id}: {e}") from e


class SettingsRepository:
    """Repository for the store settings row"""

    def __init__(self, db: Session):
        self.db = db

    def get_settings(self) -> StoreSettings:
        """Return store settings, or defaults when the row is absent"""
        row = self.db.query(PizzeriaSettings).order_by(PizzeriaSettings.id).first()
        if row is None:
            return StoreSettings()
        return StoreSettings(
            name=row.name,
            pix_key=row.pix_key,
            pix_name=row.pix_name,
            is_open=bool(row.is_open),
        )


class OperatingHoursRepository:
    """Repository for weekly hours and special closures"""

    def __init__(self, db: Session):
        self.db = db

    def list_hours(self) -> List[OperatingHour]:
        rows = self.db.query(OperatingHourRecord).order_by(OperatingHourRecord.day_of_week).all()
        return [
            OperatingHour(day=r.day_of_week, open=r.open_time, close=r.close_time, enabled=bool(r.is_open))
            for r in rows
        ]

    def upsert_hour(self, day_of_week: int, open_time: str, close_time: str, enabled: bool) -> OperatingHour:
        """Create or replace the window for a weekday"""
        row = (
            self.db.query(OperatingHourRecord)
            .filter(OperatingHourRecord.day_of_week == day_of_week)
            .first()
        )
        if row is None:
            row = OperatingHourRecord(day_of_week=day_of_week)
            self.db.add(row)

        row.open_time = open_time
        row.close_time = close_time
        row.is_open = enabled
        self.db.flush()
        return OperatingHour(day=row.day_of_week, open=row.open_time, close=row.close_time, enabled=row.is_open)

    def list_closures(self, from_date: date | None = None) -> List[SpecialClosure]:
        query = self.db.query(SpecialClosureRecord)
        if from_date is not None:
            query = query.filter(SpecialClosureRecord.closure_date >= from_date)
        rows = query.order_by(SpecialClosureRecord.closure_date).all()
        return [SpecialClosure(closure_date=r.closure_date, reason=r.reason, id=r.id) for r in rows]

    def add_closure(self, closure_date: date, reason: str | None = None) -> Optional[SpecialClosure]:
        """Add a closure date; returns None if that date is already closed"""
        existing = (
            self.db.query(SpecialClosureRecord)
            .filter(SpecialClosureRecord.closure_date == closure_date)
            .first()
        )
        if existing is not None:
            return None

        row = SpecialClosureRecord(closure_date=closure_date, reason=reason)
        self.db.add(row)
        self.db.flush()  # Get ID without committing
        return SpecialClosure(closure_date=row.closure_date, reason=row.reason, id=row.id)

    def remove_closure(self, closure_id: int) -> bool:
        row = self.db.query(SpecialClosureRecord).filter(SpecialClosureRecord.id == closure_id).first()
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        return True
