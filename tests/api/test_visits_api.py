"""
Tests for the visit and payment API endpoints.
"""

from sqlalchemy.exc import OperationalError

from clinic_cash.services.ledger_service import LedgerService

DAY = "2026-03-10"


def register(client, *payments):
    return client.post("/visits", json={
        "visit_date": DAY,
        "chart_number": "C-200",
        "patient_name": "Park",
        "treatment_type": "Checkup",
        "payments": list(payments),
    })


def records(client):
    return client.get("/ledger", params={"date": DAY}).json()


class TestRegisterVisit:

    def test_returns_201_with_payments(self, client):
        response = register(
            client,
            {"amount": 30_000, "method": "CASH"},
            {"amount": 20_000, "method": "CARD", "card_company": "KB"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["chart_number"] == "C-200"
        assert [p["method"] for p in data["payments"]] == ["CASH", "CARD"]
        assert data["payments"][0]["date"] == DAY

    def test_only_cash_reaches_the_drawer(self, client):
        register(
            client,
            {"amount": 30_000, "method": "CASH"},
            {"amount": 20_000, "method": "TRANSFER"},
        )

        rows = records(client)
        assert len(rows) == 1
        assert rows[0]["kind"] == "INCOME"
        assert rows[0]["is_editable"] is False

    def test_missing_patient_returns_422(self, client):
        response = client.post("/visits", json={
            "visit_date": DAY, "chart_number": "C-1",
        })
        assert response.status_code == 422

    def test_list_by_date(self, client):
        register(client)

        response = client.get("/visits", params={"date": DAY})

        assert response.status_code == 200
        assert len(response.json()) == 1


class TestPayments:

    def test_add_payment(self, client):
        visit_id = register(client).json()["id"]

        response = client.post(f"/visits/{visit_id}/payments", json={
            "amount": 15_000, "method": "CASH",
        })

        assert response.status_code == 201
        assert [r["amount"] for r in records(client)] == [15_000]

    def test_update_payment_moves_record(self, client):
        payment = register(
            client, {"amount": 30_000, "method": "CASH"}
        ).json()["payments"][0]

        response = client.put(f"/visits/payments/{payment['id']}", json={
            "amount": 25_000,
        })

        assert response.status_code == 200
        assert [r["amount"] for r in records(client)] == [25_000]

    def test_switch_to_card_drops_record(self, client):
        payment = register(
            client, {"amount": 30_000, "method": "CASH"}
        ).json()["payments"][0]

        client.put(f"/visits/payments/{payment['id']}", json={
            "method": "CARD",
        })

        assert records(client) == []

    def test_delete_payment(self, client):
        payment = register(
            client, {"amount": 30_000, "method": "CASH"}
        ).json()["payments"][0]

        response = client.delete(f"/visits/payments/{payment['id']}")

        assert response.status_code == 204
        assert records(client) == []

    def test_missing_visit_returns_404(self, client):
        response = client.post("/visits/999/payments", json={
            "amount": 1_000, "method": "CASH",
        })
        assert response.status_code == 404


class TestDeleteVisit:

    def test_delete_visit_removes_cash_records(self, client):
        visit_id = register(
            client, {"amount": 30_000, "method": "CASH"}
        ).json()["id"]

        response = client.delete(f"/visits/{visit_id}")

        assert response.status_code == 204
        assert records(client) == []
        assert client.get(f"/visits/{visit_id}").status_code == 404


class TestPartialConsistency:

    def test_failed_cash_record_returns_500_and_saves_nothing(
        self, client, monkeypatch
    ):
        def broken_sync(self, *args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("locked"))

        monkeypatch.setattr(LedgerService, "sync_visit_payment", broken_sync)

        response = register(client, {"amount": 30_000, "method": "CASH"})

        assert response.status_code == 500
        assert response.json()["error_code"] == "ERR_PARTIAL_CONSISTENCY"
        monkeypatch.undo()
        assert client.get("/visits", params={"date": DAY}).json() == []
