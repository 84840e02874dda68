"""Integration tests for API endpoints"""

import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient


@pytest.fixture
def coffee_records():
    """Saturday latte for six weeks before 2024-06-15, plus one corrupt row"""
    now = datetime(2024, 6, 15, 8, 0)
    records = [
        {
            "id": f"coffee_{week}",
            "amount": 500,
            "category": "Food",
            "date": (now - timedelta(weeks=week)).replace(hour=9).isoformat(),
            "description": "Starbucks Latte",
            "type": "expense",
        }
        for week in range(1, 7)
    ]
    records.append({"id": "broken", "amount": "n/a", "category": "Food", "date": "2024-06-01", "type": "expense"})
    return records


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "# TYPE smartspend_simulation counter" in response.text


def test_request_id_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_simulate_endpoint(client: TestClient):
    """Single card: 12 months, 7800 interest"""
    response = client.post(
        "/v1/debts/simulate",
        json={
            "debts": [{"id": "card", "balance": 120000, "annual_rate": 12, "minimum_payment": 10000}],
            "strategy": "avalanche",
            "start_date": "2024-01-15",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["warning"] is None
    assert data["months"] == 12
    assert data["payoff_date"] == "2025-01-15"
    assert data["payoff_date_label"] == "January 2025"
    assert data["total_interest_paid"] == 7800
    assert data["per_debt"]["card"]["payoff_month"] == 12


def test_simulate_endpoint_budget_warning(client: TestClient):
    """Zero budget is a business outcome, not an HTTP error"""
    response = client.post(
        "/v1/debts/simulate",
        json={
            "debts": [{"id": "card", "balance": 5000, "annual_rate": 15}],
            "strategy": "snowball",
            "start_date": "2024-01-15",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["warning"] == "Set monthly payments to project payoff"
    assert data["months"] is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"extra_principal_budget": -100},
        {"max_months": 0},
        {"strategy": "fastest"},
    ],
)
def test_simulate_endpoint_rejects_invalid_invocation(client: TestClient, overrides):
    body = {
        "debts": [{"id": "card", "balance": 5000, "minimum_payment": 100}],
        "strategy": "avalanche",
        "start_date": "2024-01-15",
    }
    body.update(overrides)

    response = client.post("/v1/debts/simulate", json=body)

    assert response.status_code == 422


def test_projections_endpoint(client: TestClient):
    response = client.post(
        "/v1/debts/projections",
        json={
            "debts": [
                {"id": "loan", "balance": 1000, "minimum_payment": 100},
                {"id": "card", "balance": 100000, "annual_rate": 24, "minimum_payment": 1500},
                {"id": "friend", "balance": 3000},
            ],
            "start_date": "2024-01-15",
        },
    )

    assert response.status_code == 200
    projections = {p["debt_id"]: p for p in response.json()["projections"]}
    assert projections["loan"]["status"] == "ok"
    assert projections["loan"]["payoff_date"] == "2024-11-15"
    assert projections["card"]["status"] == "interest_exceeds_payment"
    assert projections["friend"]["status"] == "no_payment"


def test_detect_and_list_habits(client: TestClient, coffee_records):
    response = client.post("/v1/habits/detect", json={"transactions": coffee_records, "now": "2024-06-15T08:00:00"})

    assert response.status_code == 200
    data = response.json()
    assert data["skipped_transactions"] == 1
    assert len(data["patterns"]) == 1
    pattern = data["patterns"][0]
    assert pattern["habit_id"] == "uuij7b"
    assert pattern["interval_type"] == "weekly"
    assert pattern["dow_prob"][6] == 0.75

    listed = client.get("/v1/habits").json()["patterns"]
    assert [p["habit_id"] for p in listed] == ["uuij7b"]


def test_detect_skips_loosely_typed_records(client: TestClient, coffee_records):
    """Odd field types are intake problems, not request validation errors"""
    good = [r for r in coffee_records if r["id"] != "broken"]
    good[0] = dict(good[0], id=7, description=None)
    odd = [
        dict(good[1], id="epoch", date=1718000000000),
        dict(good[1], id="unknown_category", category="Coffee"),
        dict(good[1], id="no_date", date=None),
    ]

    response = client.post(
        "/v1/habits/detect",
        json={"transactions": good + odd, "now": "2024-06-15T08:00:00"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["skipped_transactions"] == 3
    # id 7 survives; without a description it joins the 500 amount bucket instead
    assert [p["habit_id"] for p in data["patterns"]] == ["uuij7b"]


def test_reminder_skips_loosely_typed_records(client: TestClient, coffee_records):
    client.post("/v1/habits/detect", json={"transactions": coffee_records, "now": "2024-06-15T08:00:00"})
    records = coffee_records + [{"id": 99, "amount": None, "description": None, "date": 5}]

    response = client.post("/v1/habits/reminder", json={"transactions": records, "now": "2024-06-15T13:00:00"})

    assert response.status_code == 200
    assert response.json()["reminder"]["habit_id"] == "uuij7b"


def test_detect_twice_upserts(client: TestClient, coffee_records):
    body = {"transactions": coffee_records, "now": "2024-06-15T08:00:00"}
    client.post("/v1/habits/detect", json=body)
    client.post("/v1/habits/detect", json=body)

    assert len(client.get("/v1/habits").json()["patterns"]) == 1


def test_reminder_flow(client: TestClient, coffee_records):
    client.post("/v1/habits/detect", json={"transactions": coffee_records, "now": "2024-06-15T08:00:00"})
    reminder_body = {"transactions": coffee_records, "now": "2024-06-15T13:00:00"}

    response = client.post("/v1/habits/reminder", json=reminder_body)

    assert response.status_code == 200
    reminder = response.json()["reminder"]
    assert reminder["habit_id"] == "uuij7b"
    assert reminder["cadence_hint"] == "this week"
    assert reminder["amount"] == 500

    shown = client.post("/v1/habits/uuij7b/reminded", json={"today": "2024-06-15"})
    assert shown.status_code == 200
    assert shown.json()["last_reminded_date"] == "2024-06-15"

    # Already reminded today
    assert client.post("/v1/habits/reminder", json=reminder_body).json()["reminder"] is None


def test_snooze_and_dismiss(client: TestClient, coffee_records):
    client.post("/v1/habits/detect", json={"transactions": coffee_records, "now": "2024-06-15T08:00:00"})

    snoozed = client.post("/v1/habits/uuij7b/snooze", json={"until": "2024-06-22"})
    assert snoozed.status_code == 200
    assert snoozed.json()["snoozed_until"] == "2024-06-22"

    dismissed = client.post("/v1/habits/uuij7b/dismiss", json={"today": "2024-06-15"})
    assert dismissed.json()["dismiss_count_recent"] == 1
    assert dismissed.json()["snoozed_until"] == "2024-06-22"

    reminder = client.post(
        "/v1/habits/reminder",
        json={"transactions": coffee_records, "now": "2024-06-20T13:00:00"},
    ).json()["reminder"]
    assert reminder is None


def test_reminder_actions_unknown_habit(client: TestClient):
    response = client.post("/v1/habits/nope/snooze", json={"until": "2024-06-22"})
    assert response.status_code == 404
