"""Integration tests for API endpoints"""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from pizzeria_gateway.api.dependencies import get_pix_provider
from pizzeria_gateway.domain.brcode import parse_pix_payload
from pizzeria_gateway.domain.exceptions import PaymentProviderError
from pizzeria_gateway.infrastructure.clients.efipay import EfiPayClient
from pizzeria_gateway.infrastructure.database.models import Order, PizzeriaSettings


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, order: Order):
    """Test Prometheus metrics endpoint"""
    client.post("/v1/pix", json={"order_id": str(order.id)})

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "pizzeria_pix_generated_total" in response.text


def test_request_id_header(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_malformed_request_id_is_replaced(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "bad id\"}"})

    assert response.headers["X-Request-ID"] != "bad id\"}"
    assert uuid.UUID(response.headers["X-Request-ID"])


def test_request_metrics_labelled_by_route_template(client: TestClient):
    client.delete("/v1/store/closures/987")
    client.get("/no-such-page")

    text = client.get("/metrics").text
    assert 'endpoint="/v1/store/closures/{closure_id}"' in text
    assert 'endpoint="unmatched"' in text
    assert "/v1/store/closures/987" not in text


def test_generate_pix_static(client: TestClient, order: Order, store_settings, db: Session):
    """Test POST /v1/pix without a configured provider"""
    response = client.post("/v1/pix", json={"order_id": str(order.id), "customer_name": "Maria"})

    assert response.status_code == 200
    data = response.json()
    assert data["provider"] == "static"
    assert data["amount"] == 23.5
    assert data["tx_id"] == "PED3f2b8c1e9a4d4e6f8b7a"
    assert data["pix_key"] == "loja****"

    parsed = parse_pix_payload(data["pix_code"])
    assert parsed.crc_valid is True
    assert parsed.amount == "23.50"
    assert parsed.pix_key == "loja@pizzaria.com.br"
    assert parsed.merchant_name == "BELLA NAPOLI"
    assert parsed.tx_id == data["tx_id"]

    db.expire_all()
    assert db.get(Order, order.id).pix_transaction_id == data["tx_id"]


def test_generate_pix_ignores_client_amount(client: TestClient, order: Order):
    response = client.post("/v1/pix", json={"order_id": str(order.id), "amount": 0.01})

    assert response.status_code == 200
    assert response.json()["amount"] == 23.5
    assert parse_pix_payload(response.json()["pix_code"]).amount == "23.50"


def test_generate_pix_provider_fallback(app, order: Order):
    """Provider failure degrades to a static code, not an error"""
    provider = AsyncMock()
    provider.request_dynamic_charge.side_effect = PaymentProviderError("auth", "EfiPay error: 503")
    app.dependency_overrides[get_pix_provider] = lambda: provider

    response = TestClient(app).post("/v1/pix", json={"order_id": str(order.id)})

    assert response.status_code == 200
    assert response.json()["provider"] == "static_fallback"
    assert parse_pix_payload(response.json()["pix_code"]).crc_valid is True


@patch("pizzeria_gateway.infrastructure.clients.efipay.EfiPayClient.request_dynamic_charge")
def test_generate_pix_efipay(mock_charge: AsyncMock, app, order: Order):
    mock_charge.return_value = "000201DYNAMIC"
    app.dependency_overrides[get_pix_provider] = lambda: EfiPayClient(client_id="a", client_secret="b")

    response = TestClient(app).post("/v1/pix", json={"order_id": str(order.id), "customer_name": "Maria"})

    assert response.status_code == 200
    assert response.json()["provider"] == "efipay"
    assert response.json()["pix_code"] == "000201DYNAMIC"
    assert mock_charge.await_args.args[0] == Decimal("23.50")


def test_generate_pix_invalid_order_id(client: TestClient):
    response = client.post("/v1/pix", json={"order_id": "not-a-uuid"})
    assert response.status_code == 400


def test_generate_pix_unknown_order(client: TestClient):
    response = client.post("/v1/pix", json={"order_id": str(uuid.uuid4())})
    assert response.status_code == 404


def test_generate_pix_order_without_total(client: TestClient, db: Session):
    order = Order(customer_name="Maria", total=None)
    db.add(order)
    db.commit()

    response = client.post("/v1/pix", json={"order_id": str(order.id)})
    assert response.status_code == 422


def test_store_status_open(client: TestClient, stored_schedule):
    """Fixed clock: Wednesday 19:30"""
    response = client.get("/v1/store/status")

    assert response.status_code == 200
    data = response.json()
    assert data["accepting_orders"] is True
    assert data["message"] is None


def test_store_status_manual_switch(client: TestClient, stored_schedule, db: Session):
    db.add(PizzeriaSettings(name="Pizzaria", is_open=False))
    db.commit()

    data = client.get("/v1/store/status").json()
    assert data["accepting_orders"] is False
    assert data["open_by_schedule"] is True
    assert data["message"] == "Estamos temporariamente fechados."


def test_store_status_special_closure(client: TestClient, stored_schedule):
    response = client.post("/v1/store/closures", json={"closure_date": "2026-10-21", "reason": "Feriado"})
    assert response.status_code == 201

    data = client.get("/v1/store/status").json()
    assert data["accepting_orders"] is False
    assert data["message"] == "Abrimos amanhã às 18:00."


def test_store_status_without_schedule(client: TestClient):
    data = client.get("/v1/store/status").json()
    assert data["accepting_orders"] is False
    assert data["message"] == "Estamos fechados no momento. Confira nossos horários de funcionamento."


def test_update_and_list_hours(client: TestClient, stored_schedule):
    response = client.put("/v1/store/hours/1", json={"open_time": "19:00", "close_time": "22:30", "is_open": True})
    assert response.status_code == 200
    assert response.json() == {"day_of_week": 1, "open_time": "19:00", "close_time": "22:30", "is_open": True}

    hours = client.get("/v1/store/hours").json()["hours"]
    assert len(hours) == 7
    assert hours[1]["open_time"] == "19:00"
    assert hours[1]["is_open"] is True


def test_update_hours_rejects_bad_input(client: TestClient):
    assert client.put("/v1/store/hours/7", json={"open_time": "18:00", "close_time": "23:00"}).status_code == 422
    assert client.put("/v1/store/hours/3", json={"open_time": "6pm", "close_time": "23:00"}).status_code == 422
    assert client.put("/v1/store/hours/3", json={"open_time": "18:00", "close_time": "24:00"}).status_code == 422


def test_closures_lifecycle(client: TestClient):
    created = client.post("/v1/store/closures", json={"closure_date": "2026-12-25", "reason": "Natal"})
    assert created.status_code == 201
    closure_id = created.json()["id"]

    duplicate = client.post("/v1/store/closures", json={"closure_date": "2026-12-25"})
    assert duplicate.status_code == 409

    closures = client.get("/v1/store/hours").json()["closures"]
    assert closures == [{"id": closure_id, "closure_date": "2026-12-25", "reason": "Natal"}]

    assert client.delete(f"/v1/store/closures/{closure_id}").status_code == 204
    assert client.delete(f"/v1/store/closures/{closure_id}").status_code == 404
