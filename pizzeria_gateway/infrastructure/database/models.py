"""SQLAlchemy ORM models for orders, store settings and opening hours"""

import uuid
from sqlalchemy import Column, Boolean, Date, DateTime, Integer, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Order(Base):
    """Customer order; only the fields the payment flow reads or writes"""

    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_name = Column(Text, nullable=True)
    total = Column(Numeric(10, 2), nullable=True)
    payment_method = Column(Text, nullable=False, default="pix")
    status = Column(Text, nullable=False, default="pending")
    pix_transaction_id = Column(Text, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PizzeriaSettings(Base):
    """Single-row store configuration"""

    __tablename__ = "pizzeria_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=True)
    pix_key = Column(Text, nullable=True)
    pix_name = Column(Text, nullable=True)
    is_open = Column(Boolean, nullable=False, default=True)


class OperatingHourRecord(Base):
    """Weekly opening window, one row per weekday (0=Sunday)"""

    __tablename__ = "operating_hours"

    id = Column(Integer, primary_key=True, autoincrement=True)
    day_of_week = Column(Integer, nullable=False, unique=True)
    open_time = Column(Text, nullable=False)
    close_time = Column(Text, nullable=False)
    is_open = Column(Boolean, nullable=False, default=True)


class SpecialClosureRecord(Base):
    """Date on which the store is closed regardless of weekly hours"""

    __tablename__ = "special_closures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    closure_date = Column(Date, nullable=False, unique=True)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
