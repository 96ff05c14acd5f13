"""
Tests for the HTTP endpoints.
"""
import pytest


@pytest.fixture
def trip_id(client):
    response = client.post(
        "/api/trips",
        json={
            "name": "Orlando 2026",
            "destination": "Orlando",
            "start_date": "2026-12-01",
            "end_date": "2026-12-15",
            "participants": ["Juan", "Vale"]
        }
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def roster(client, trip_id):
    """Participant ids by name."""
    response = client.get(f"/api/trips/{trip_id}/participants")
    return {p["name"]: p["id"] for p in response.json()}


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_trip(client):
    response = client.post(
        "/api/trips",
        json={
            "name": "Bariloche",
            "start_date": "2027-07-01",
            "end_date": "2027-07-10",
            "participants": ["Juan", "Vale", "Ana"]
        }
    )
    assert response.status_code == 201
    data = response.json()
    assert [p["name"] for p in data["participants"]] == ["Juan", "Vale", "Ana"]
    assert data["status"] == "upcoming"


def test_trip_dates_validated(client):
    response = client.post(
        "/api/trips",
        json={"name": "Backwards", "start_date": "2027-07-10", "end_date": "2027-07-01"}
    )
    assert response.status_code == 400


def test_update_trip_with_nulls(client, trip_id):
    response = client.put(f"/api/trips/{trip_id}", json={"start_date": None, "name": None, "emoji": None})
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Orlando 2026"
    assert data["start_date"] == "2026-12-01"
    assert data["emoji"] is None


def test_missing_trip(client):
    assert client.get("/api/trips/999").status_code == 404
    assert client.get("/api/expenses/999").status_code == 404
    assert client.get("/api/balance/999").status_code == 404


def test_add_duplicate_participant(client, trip_id):
    response = client.post(f"/api/trips/{trip_id}/participants", json={"name": "Juan"})
    assert response.status_code == 400


def test_expense_validation(client, trip_id, roster):
    base = {"date": "2026-12-02", "description": "Lunch", "currency": "USD", "payer_id": roster["Juan"]}

    assert client.post(f"/api/expenses/{trip_id}", json={**base, "amount": 0}).status_code == 422
    assert client.post(f"/api/expenses/{trip_id}", json={**base, "amount": 10, "description": "  "}).status_code == 422
    assert client.post(f"/api/expenses/{trip_id}", json={**base, "amount": 10, "currency": "EUR"}).status_code == 422
    assert client.post(
        f"/api/expenses/{trip_id}", json={**base, "amount": 10, "payer_id": None}
    ).status_code == 400


def test_balance_two_single_payments(client, trip_id, roster):
    for amount, payer in ((100, "Juan"), (50, "Vale")):
        response = client.post(
            f"/api/expenses/{trip_id}",
            json={
                "date": "2026-12-02",
                "description": "Park tickets",
                "category": "parks",
                "amount": amount,
                "currency": "USD",
                "payer_id": roster[payer]
            }
        )
        assert response.status_code == 201

    response = client.get(f"/api/balance/{trip_id}")
    assert response.status_code == 200
    usd = response.json()["by_currency"]["USD"]
    assert float(usd["paid_by"]["Juan"]) == 100
    assert float(usd["paid_by"]["Vale"]) == 50
    assert float(usd["difference"]) == 25
    assert usd["debtor"] == "Vale"
    assert usd["transfers"][0]["from_name"] == "Vale"
    assert usd["transfers"][0]["to_name"] == "Juan"


def test_installment_expense_flow(client, trip_id, roster):
    response = client.post(
        f"/api/expenses/{trip_id}",
        json={
            "date": "2026-12-02",
            "description": "Cruise",
            "amount": 300,
            "currency": "USD",
            "installments_total": 3
        }
    )
    assert response.status_code == 201
    expense_id = response.json()["id"]

    for number, payer in ((1, "Juan"), (2, "Vale")):
        response = client.post(
            f"/api/expenses/{trip_id}/{expense_id}/installments",
            json={"installment_number": number, "amount": 100, "payer_id": roster[payer]}
        )
        assert response.status_code == 201

    expense = client.get(f"/api/expenses/{trip_id}/{expense_id}").json()
    assert float(expense["total_paid"]) == 200
    assert float(expense["remaining"]) == 100
    assert expense["progress"] == 67
    assert expense["installments_paid"] == 2

    next_installment = client.get(f"/api/expenses/{trip_id}/{expense_id}/next-installment").json()
    assert next_installment["installment_number"] == 3
    assert float(next_installment["amount"]) == 100

    balance = client.get(f"/api/balance/{trip_id}").json()
    assert balance["by_currency"]["USD"]["debtor"] is None


def test_delete_expense_is_idempotent(client, trip_id):
    assert client.delete(f"/api/expenses/{trip_id}/12345").status_code == 200


def test_payment_plan_flow(client, trip_id, roster):
    response = client.post(
        f"/api/payment-plans/{trip_id}",
        json={"name": "Hotel", "category": "hotel", "currency": "USD", "total_amount": 1000, "installments_total": 4}
    )
    assert response.status_code == 201
    plan_id = response.json()["id"]

    response = client.post(
        f"/api/payment-plans/{trip_id}/{plan_id}/payments",
        json={"installment_number": 1, "amount": 250, "payer_id": roster["Vale"]}
    )
    assert response.status_code == 201

    summary = client.get(f"/api/payment-plans/{trip_id}/summary").json()
    assert summary["plan_count"] == 1
    assert float(summary["total_paid"]) == 250
    assert summary["progress"] == 25

    grand = client.get(f"/api/balance/{trip_id}").json()["grand_total"]
    assert float(grand["plans"]["paid_by"]["Vale"]) == 250
    assert grand["debtor"] == "Juan"


def test_manual_rate_and_conversion(client, trip_id):
    response = client.put("/api/fx-rates/manual", json={"rate": 1000})
    assert response.status_code == 200
    assert response.json()["source"] == "manual"

    latest = client.get("/api/fx-rates/latest").json()
    assert float(latest["rate"]) == 1000
    assert latest["expired"] is False

    converted = client.get("/api/fx-rates/convert", params={"amount": 5000}).json()
    assert float(converted["converted"]) == 5
    assert converted["display"] == "US$5.00"

    assert client.delete("/api/fx-rates/cache").status_code == 200
    fallback = client.get("/api/fx-rates/latest", params={"trip_id": trip_id}).json()
    assert float(fallback["rate"]) == 1200
    assert fallback["source"] is None


def test_manual_rate_must_be_positive(client):
    assert client.put("/api/fx-rates/manual", json={"rate": 0}).status_code == 422


def test_itinerary_places_notes_documents(client, trip_id):
    client.post(f"/api/itinerary/{trip_id}", json={"date": "2026-12-02", "title": "Epcot"})
    client.post(f"/api/itinerary/{trip_id}", json={"date": "2026-12-01", "title": "Arrival"})
    itinerary = client.get(f"/api/itinerary/{trip_id}").json()
    assert [day["date"] for day in itinerary["days"]] == ["2026-12-01", "2026-12-02"]

    place = client.post(f"/api/places/{trip_id}", json={"name": "Ohana", "kind": "restaurant"}).json()
    toggled = client.post(f"/api/places/{trip_id}/{place['id']}/toggle-visited").json()
    assert toggled["visited"] is True
    places = client.get(f"/api/places/{trip_id}").json()
    assert places["visited"] == 1
    assert places["pending"] == 0
    assert len(places["by_kind"]["restaurant"]) == 1

    response = client.post(f"/api/notes/{trip_id}", json={"title": "Buy", "kind": "buy"})
    assert response.status_code == 201
    assert client.get(f"/api/notes/{trip_id}").json()["by_kind"]["buy"][0]["title"] == "Buy"

    response = client.post(
        f"/api/documents/{trip_id}",
        json={"name": "Insurance", "category": "insurance", "file_url": "https://files.example.com/i.pdf"}
    )
    assert response.status_code == 201
    assert client.delete(f"/api/documents/{trip_id}/{response.json()['id']}").status_code == 200


def test_remove_participant_with_payments(client, trip_id, roster):
    client.post(
        f"/api/expenses/{trip_id}",
        json={"date": "2026-12-02", "description": "Taxi", "amount": 20, "payer_id": roster["Juan"]}
    )
    assert client.delete(f"/api/trips/{trip_id}/participants/{roster['Juan']}").status_code == 409
    assert client.delete(f"/api/trips/{trip_id}/participants/{roster['Vale']}").status_code == 200


def test_quick_stats(client, trip_id, roster):
    client.post(
        f"/api/expenses/{trip_id}",
        json={"date": "2026-12-02", "description": "Taxi", "amount": 20, "payer_id": roster["Juan"]}
    )
    stats = client.get(f"/api/trips/{trip_id}/stats").json()
    assert float(stats["total_spent_base"]) == 20
    assert stats["debtor"] == "Vale"


def test_content_updates(client, trip_id):
    first = client.post(f"/api/itinerary/{trip_id}", json={"date": "2026-12-02", "title": "Magic Kingdom"}).json()
    client.post(f"/api/itinerary/{trip_id}", json={"date": "2026-12-03", "title": "Epcot"})

    response = client.put(f"/api/itinerary/{trip_id}/{first['id']}", json={"date": "2026-12-03", "title": None})
    assert response.status_code == 200
    assert response.json()["title"] == "Magic Kingdom"
    days = client.get(f"/api/itinerary/{trip_id}").json()["days"]
    assert [(day["date"], [i["title"] for i in day["items"]]) for day in days] == [
        ("2026-12-03", ["Epcot", "Magic Kingdom"])
    ]

    place = client.post(f"/api/places/{trip_id}", json={"name": "Ohana", "kind": "restaurant"}).json()
    response = client.put(f"/api/places/{trip_id}/{place['id']}", json={"name": None})
    assert response.status_code == 200
    assert response.json()["name"] == "Ohana"

    assert client.put(f"/api/places/{trip_id}/999", json={"name": "x"}).status_code == 404
    assert client.post(f"/api/places/{trip_id}/999/toggle-visited").status_code == 404
    assert client.put(f"/api/notes/{trip_id}/999", json={"title": "x"}).status_code == 404
    assert client.put(f"/api/itinerary/{trip_id}/999", json={"title": "x"}).status_code == 404
