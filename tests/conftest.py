"""Pytest fixtures for testing"""

import uuid
import pytest
from datetime import datetime
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from pizzeria_gateway.api.main import create_app
from pizzeria_gateway.api.dependencies import get_pix_provider, get_store_now
from pizzeria_gateway.infrastructure.database.models import Base, Order, PizzeriaSettings, OperatingHourRecord
from pizzeria_gateway.infrastructure.database.session import build_engine, get_db, init_db
from pizzeria_gateway.domain.models import OperatingHour, PixMerchantConfig


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Wednesday 2026-10-21, 19:30
STORE_NOW = datetime(2026, 10, 21, 19, 30)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    init_db(engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(db: Session):
    """App wired to the test database, no payment provider and a fixed clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_pix_provider] = lambda: None
    app.dependency_overrides[get_store_now] = lambda: STORE_NOW
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def merchant() -> PixMerchantConfig:
    return PixMerchantConfig()


@pytest.fixture
def order(db: Session) -> Order:
    """Persisted order worth R$ 23,50"""
    order = Order(id=uuid.UUID("3f2b8c1e-9a4d-4e6f-8b7a-1c2d3e4f5a6b"), customer_name="Maria", total=Decimal("23.50"))
    db.add(order)
    db.commit()
    return order


@pytest.fixture
def store_settings(db: Session) -> PizzeriaSettings:
    row = PizzeriaSettings(name="Pizzaria Bella Nápoli", pix_key="loja@pizzaria.com.br", pix_name="Bella Nápoli", is_open=True)
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def weekly_schedule() -> list[OperatingHour]:
    """Open 18:00-23:00 Tuesday to Sunday, closed Mondays"""
    return [
        OperatingHour(day=day, open="18:00", close="23:00", enabled=day != 1)
        for day in range(7)
    ]


@pytest.fixture
def stored_schedule(db: Session, weekly_schedule: list[OperatingHour]) -> list[OperatingHour]:
    for h in weekly_schedule:
        db.add(OperatingHourRecord(day_of_week=h.day, open_time=h.open, close_time=h.close, is_open=h.enabled))
    db.commit()
    return weekly_schedule
