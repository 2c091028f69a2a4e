import pytest
import httpx
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.dependencies.rates import get_http_client
from backend.app.main import app
from backend.app.models.invoice_item import InvoiceItem
from backend.app.schemas.exchange_rate import ExchangeRateRecord
from backend.app.services.rate_store import ExchangeRateStore

NBS_PAYLOAD = {
    "exchangeRateListModels": [
        {"currencyCode": "EUR", "currencyNameSerLatin": "Evro", "middleRate": "117,1732", "unit": 1},
        {"currencyCode": "USD", "currencyNameSerLatin": "Americki dolar", "middleRate": "107,0", "unit": 1},
    ]
}


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def nbs_requests():
    seen = []

    def handler(request):
        seen.append(request.url.params["date"])
        return httpx.Response(200, json=NBS_PAYLOAD)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_http_client] = lambda: client
    yield seen
    app.dependency_overrides.pop(get_http_client, None)
    client.close()


def login(client: TestClient) -> dict:
    resp = client.post("/auth/login", json={"password": "admin123"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def create_customer(client: TestClient, headers: dict, name: str = "Acme d.o.o.") -> int:
    resp = client.post(
        "/customers/",
        json={"name": name, "address": "Knez Mihailova 1", "city": "Beograd"},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def invoice_payload(customer_id: int, number: str = "001/2024", **overrides) -> dict:
    payload = {
        "invoice_number": number,
        "invoice_date": "2024-01-05",
        "trading_date": "2024-01-05",
        "customer_id": customer_id,
        "items": [{"description": "Development", "quantity": "2", "price": "100", "discount": "10"}],
    }
    payload.update(overrides)
    return payload


def test_create_rsd_invoice_computes_totals():
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)

    resp = client.post("/invoices/", json=invoice_payload(customer_id), headers=headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "draft"
    assert data["currency"] == "RSD"
    assert data["payment_deadline"] == 30
    assert Decimal(data["exchange_rate"]) == Decimal("1")
    assert Decimal(data["total_rsd"]) == Decimal("180")
    assert data["customer_name"] == "Acme d.o.o."
    assert len(data["items"]) == 1
    item = data["items"][0]
    assert item["unit"] == "kom"
    assert Decimal(item["total"]) == Decimal("180")

    totals = client.get(f"/invoices/{data['id']}/totals", headers=headers).json()
    assert Decimal(totals["subtotal"]) == Decimal("200")
    assert Decimal(totals["discount_total"]) == Decimal("20")
    assert Decimal(totals["total"]) == Decimal("180")
    assert Decimal(totals["total_rsd"]) == Decimal("180")


def test_create_foreign_invoice_with_manual_rate(nbs_requests):
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)

    resp = client.post(
        "/invoices/",
        json=invoice_payload(customer_id, currency="eur", exchange_rate="117.5"),
        headers=headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["currency"] == "EUR"
    assert Decimal(data["exchange_rate"]) == Decimal("117.5")
    assert Decimal(data["total_rsd"]) == Decimal("21150.00")
    assert nbs_requests == []


def test_create_foreign_invoice_snapshots_resolved_rate(nbs_requests):
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)

    resp = client.post("/invoices/", json=invoice_payload(customer_id, currency="EUR"), headers=headers)
    assert resp.status_code == 201
    data = resp.json()
    assert nbs_requests == ["2024-01-05"]
    assert Decimal(data["exchange_rate"]) == Decimal("117.1732")
    assert Decimal(data["total_rsd"]) == Decimal("21091.18")


def test_total_rsd_is_frozen_when_stored_rates_change(nbs_requests):
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)
    invoice = client.post("/invoices/", json=invoice_payload(customer_id, currency="EUR"), headers=headers).json()

    db = SessionLocal()
    try:
        ExchangeRateStore(db).upsert_rates(
            [ExchangeRateRecord(currency_code="EUR", currency_name="Evro", middle_rate=Decimal("130"), rate_date=date(2024, 1, 5))]
        )
    finally:
        db.close()

    fetched = client.get(f"/invoices/{invoice['id']}", headers=headers).json()
    assert Decimal(fetched["exchange_rate"]) == Decimal("117.1732")
    assert Decimal(fetched["total_rsd"]) == Decimal("21091.18")

    refreshed = client.post(f"/invoices/{invoice['id']}/refresh-rate", headers=headers).json()
    assert Decimal(refreshed["exchange_rate"]) == Decimal("130")
    assert Decimal(refreshed["total_rsd"]) == Decimal("23400.00")


def test_update_replaces_items_and_recomputes_total():
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)
    invoice = client.post("/invoices/", json=invoice_payload(customer_id), headers=headers).json()

    payload = invoice_payload(
        customer_id,
        status="sent",
        notes="Updated",
        items=[
            {"description": "Design", "quantity": "1", "price": "500"},
            {"description": "Hosting", "unit": "mes", "quantity": "3", "price": "20"},
        ],
    )
    resp = client.put(f"/invoices/{invoice['id']}", json=payload, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "sent"
    assert data["notes"] == "Updated"
    assert Decimal(data["total_rsd"]) == Decimal("560")
    assert [item["description"] for item in data["items"]] == ["Design", "Hosting"]

    db = SessionLocal()
    try:
        assert db.query(InvoiceItem).filter(InvoiceItem.invoice_id == invoice["id"]).count() == 2
    finally:
        db.close()


def test_update_keeps_rate_snapshot_unless_currency_changes(nbs_requests):
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)
    invoice = client.post(
        "/invoices/", json=invoice_payload(customer_id, currency="EUR", exchange_rate="118"), headers=headers
    ).json()

    same_currency = client.put(
        f"/invoices/{invoice['id']}", json=invoice_payload(customer_id, currency="EUR"), headers=headers
    ).json()
    assert Decimal(same_currency["exchange_rate"]) == Decimal("118")
    assert nbs_requests == []

    new_currency = client.put(
        f"/invoices/{invoice['id']}", json=invoice_payload(customer_id, currency="USD"), headers=headers
    ).json()
    assert Decimal(new_currency["exchange_rate"]) == Decimal("107")
    assert Decimal(new_currency["total_rsd"]) == Decimal("19260.00")


def test_duplicate_invoice_number_conflicts():
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)
    assert client.post("/invoices/", json=invoice_payload(customer_id), headers=headers).status_code == 201

    resp = client.post("/invoices/", json=invoice_payload(customer_id), headers=headers)
    assert resp.status_code == 409


def test_unknown_customer_is_rejected():
    client = TestClient(app)
    headers = login(client)
    resp = client.post("/invoices/", json=invoice_payload(999), headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Customer not found"


def test_item_validation():
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)
    payload = invoice_payload(customer_id, items=[{"description": "x", "quantity": "1", "price": "1", "discount": "150"}])
    assert client.post("/invoices/", json=payload, headers=headers).status_code == 422


def test_next_invoice_number_follows_highest_for_year():
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)
    year = date.today().year

    assert client.get("/invoices/next-number", headers=headers).json() == {"invoice_number": f"001/{year}"}

    for number in (f"002/{year}", f"010/{year}", "099/2001"):
        client.post("/invoices/", json=invoice_payload(customer_id, number=number), headers=headers)

    assert client.get("/invoices/next-number", headers=headers).json() == {"invoice_number": f"011/{year}"}


def test_status_patch_does_not_touch_totals():
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)
    invoice = client.post("/invoices/", json=invoice_payload(customer_id), headers=headers).json()

    resp = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"
    assert Decimal(resp.json()["total_rsd"]) == Decimal("180")

    bad = client.patch(f"/invoices/{invoice['id']}/status", json={"status": "archived"}, headers=headers)
    assert bad.status_code == 422


def test_list_get_items_and_delete():
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)
    first = client.post("/invoices/", json=invoice_payload(customer_id), headers=headers).json()
    second = client.post(
        "/invoices/", json=invoice_payload(customer_id, number="002/2024", invoice_date="2024-02-01"), headers=headers
    ).json()

    listed = client.get("/invoices/", headers=headers).json()
    assert [inv["id"] for inv in listed] == [second["id"], first["id"]]

    items = client.get(f"/invoices/{first['id']}/items", headers=headers).json()
    assert len(items) == 1 and items[0]["description"] == "Development"

    assert client.delete(f"/invoices/{first['id']}", headers=headers).status_code == 204
    assert client.get(f"/invoices/{first['id']}", headers=headers).status_code == 404

    db = SessionLocal()
    try:
        assert db.query(InvoiceItem).filter(InvoiceItem.invoice_id == first["id"]).count() == 0
    finally:
        db.close()


def test_invoices_require_token():
    client = TestClient(app)
    assert client.get("/invoices/").status_code == 401


def test_update_without_status_keeps_current_status():
    client = TestClient(app)
    headers = login(client)
    customer_id = create_customer(client, headers)
    invoice = client.post("/invoices/", json=invoice_payload(customer_id), headers=headers).json()
    client.patch(f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=headers)

    resp = client.put(
        f"/invoices/{invoice['id']}",
        json=invoice_payload(customer_id, notes="Updated notes"),
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"
    assert resp.json()["notes"] == "Updated notes"

    book = client.get(
        "/reports/kpo", params={"from_date": "2024-01-01", "to_date": "2024-12-31"}, headers=headers
    ).json()
    assert book["count"] == 1

    sent = client.put(
        f"/invoices/{invoice['id']}", json=invoice_payload(customer_id, status="sent"), headers=headers
    )
    assert sent.json()["status"] == "sent"
