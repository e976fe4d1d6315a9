"""
API Integration Tests
End-to-end request flows through the HTTP layer
"""

import csv
import io
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from medstock.models.audit import TransferRec
from tests.conftest import APITestHelper, DatabaseTestHelper, TEST_PASSWORD

API = "/api/v1"


def add_stock(client, headers, location, name, quantity, category=None):
    return client.post(
        f"{API}/storage/{location}",
        json={"name": name, "quantity": quantity, "category": category},
        headers=headers,
    )


def medication_payload(**overrides):
    payload = {
        "name": "Amoxicillin 500mg",
        "lot": "AMX-001",
        "quantity": 50,
        "expiration_date": (date.today() + timedelta(days=365)).isoformat(),
        "minimum_stock": 10,
    }
    payload.update(overrides)
    return payload


class TestSystemEndpoints:

    def test_health_check(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] in ("healthy", "degraded")

    def test_info(self, client: TestClient):
        data = client.get("/info").json()

        assert data["api_version"] == "v1"
        assert data["transfer_zero_stock_policy"] == "keep"
        assert data["expiry_warning_days"] == 30


class TestAuthentication:

    def test_login_success(self, client: TestClient, test_user):
        response = client.post(
            f"{API}/auth/login",
            data={"username": test_user.username, "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["username"] == test_user.username
        assert data["access_token"]

    def test_login_wrong_password(self, client: TestClient, test_user):
        response = client.post(
            f"{API}/auth/login",
            data={"username": test_user.username, "password": "wrong"},
        )

        APITestHelper.assert_error_response(response, 401, "Incorrect username or password")

    def test_register_and_me(self, client: TestClient):
        response = client.post(
            f"{API}/auth/register", json={"username": "pharmacist", "password": "secret123"}
        )
        assert response.status_code == 201

        token = response.json()["access_token"]
        me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert me.status_code == 200
        assert me.json()["username"] == "pharmacist"

    def test_register_duplicate(self, client: TestClient, test_user):
        response = client.post(
            f"{API}/auth/register", json={"username": test_user.username, "password": "secret123"}
        )

        APITestHelper.assert_error_response(response, 400, "already exists")

    @pytest.mark.parametrize("path", [
        "/storage/principal",
        "/storage/secondary",
        "/medications",
        "/medications/alerts",
        "/withdrawals",
        "/transfers",
        "/export/principal",
    ])
    def test_protected_endpoints_require_token(self, client: TestClient, path):
        assert client.get(f"{API}{path}").status_code == 401

    def test_invalid_token_rejected(self, client: TestClient):
        response = client.get(
            f"{API}/storage/principal", headers={"Authorization": "Bearer invalid"}
        )

        assert response.status_code == 401


class TestStorageEndpoints:

    def test_add_then_merge(self, client: TestClient, auth_headers):
        first = add_stock(client, auth_headers, "principal", "gauze", 10, "dressings")
        assert first.status_code == 201
        assert first.json()["message"] == "Product added"
        assert first.json()["data"]["quantity"] == 10

        second = add_stock(client, auth_headers, "principal", "gauze", 5)
        assert second.status_code == 200
        assert second.json()["message"] == "Quantity updated"
        assert second.json()["data"]["quantity"] == 15
        assert second.json()["data"]["id"] == first.json()["data"]["id"]

        listing = client.get(f"{API}/storage/principal", headers=auth_headers).json()
        assert len(listing) == 1

    def test_name_is_trimmed(self, client: TestClient, auth_headers):
        response = add_stock(client, auth_headers, "secondary", "  tape  ", 2)

        assert response.json()["data"]["name"] == "tape"

    @pytest.mark.parametrize("payload", [
        {"name": "gauze", "quantity": 0},
        {"name": "gauze", "quantity": -3},
        {"name": "", "quantity": 3},
        {"name": "   ", "quantity": 3},
        {"quantity": 3},
    ])
    def test_invalid_add_rejected(self, client: TestClient, auth_headers, payload):
        response = client.post(f"{API}/storage/principal", json=payload, headers=auth_headers)

        assert response.status_code == 422

    def test_update_and_delete(self, client: TestClient, auth_headers):
        record_id = add_stock(client, auth_headers, "secondary", "masks", 20).json()["data"]["id"]

        updated = client.put(
            f"{API}/storage/secondary/{record_id}",
            json={"name": "masks FFP2", "quantity": 0, "category": "ppe"},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["name"] == "masks FFP2"
        assert updated.json()["quantity"] == 0

        deleted = client.delete(f"{API}/storage/secondary/{record_id}", headers=auth_headers)
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Product deleted"

        missing = client.delete(f"{API}/storage/secondary/{record_id}", headers=auth_headers)
        APITestHelper.assert_error_response(missing, 404)

    def test_update_to_taken_name(self, client: TestClient, auth_headers):
        add_stock(client, auth_headers, "principal", "gauze", 1)
        other_id = add_stock(client, auth_headers, "principal", "tape", 1).json()["data"]["id"]

        response = client.put(
            f"{API}/storage/principal/{other_id}",
            json={"name": "gauze", "quantity": 1},
            headers=auth_headers,
        )

        APITestHelper.assert_error_response(response, 400, "already exists")


class TestTransferFlow:

    def test_transfer_scenario(self, client: TestClient, auth_headers, db_session: Session):
        record_id = add_stock(client, auth_headers, "principal", "alcohol", 100).json()["data"]["id"]

        response = client.post(
            f"{API}/storage/principal/transfer",
            json={"stock_record_id": record_id, "quantity": 30},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Transfer completed"
        assert data["principal"]["quantity"] == 70
        assert data["secondary"]["quantity"] == 30
        assert data["transfer"]["product_name"] == "alcohol"

        rejected = client.post(
            f"{API}/storage/principal/transfer",
            json={"stock_record_id": record_id, "quantity": 80},
            headers=auth_headers,
        )
        APITestHelper.assert_error_response(rejected, 400, "Insufficient quantity")

        principal = client.get(f"{API}/storage/principal", headers=auth_headers).json()
        secondary = client.get(f"{API}/storage/secondary", headers=auth_headers).json()
        assert principal[0]["quantity"] == 70
        assert secondary[0]["quantity"] == 30
        assert DatabaseTestHelper.count_records(db_session, TransferRec) == 1

        history = client.get(f"{API}/transfers", headers=auth_headers).json()
        assert len(history) == 1
        assert history[0]["quantity"] == 30

    def test_transfer_unknown_record(self, client: TestClient, auth_headers):
        response = client.post(
            f"{API}/storage/principal/transfer",
            json={"stock_record_id": 999, "quantity": 1},
            headers=auth_headers,
        )

        APITestHelper.assert_error_response(response, 404)

    def test_transfer_non_positive_quantity(self, client: TestClient, auth_headers):
        record_id = add_stock(client, auth_headers, "principal", "alcohol", 10).json()["data"]["id"]

        response = client.post(
            f"{API}/storage/principal/transfer",
            json={"stock_record_id": record_id, "quantity": 0},
            headers=auth_headers,
        )

        assert response.status_code == 422

    def test_transfer_replay(self, client: TestClient, auth_headers):
        record_id = add_stock(client, auth_headers, "principal", "alcohol", 10).json()["data"]["id"]
        body = {"stock_record_id": record_id, "quantity": 4, "request_key": "tx-42"}

        client.post(f"{API}/storage/principal/transfer", json=body, headers=auth_headers)
        again = client.post(f"{API}/storage/principal/transfer", json=body, headers=auth_headers)

        assert again.json()["replayed"] is True
        assert again.json()["message"] == "Transfer already applied"
        assert again.json()["principal"]["quantity"] == 6

    def test_transfer_key_reused_for_other_product(self, client: TestClient, auth_headers):
        alcohol_id = add_stock(client, auth_headers, "principal", "alcohol", 10).json()["data"]["id"]
        gauze_id = add_stock(client, auth_headers, "principal", "gauze", 50).json()["data"]["id"]
        client.post(
            f"{API}/storage/principal/transfer",
            json={"stock_record_id": alcohol_id, "quantity": 4, "request_key": "tx-7"},
            headers=auth_headers,
        )

        response = client.post(
            f"{API}/storage/principal/transfer",
            json={"stock_record_id": gauze_id, "quantity": 4, "request_key": "tx-7"},
            headers=auth_headers,
        )

        APITestHelper.assert_error_response(response, 400, "already used for a different transfer")


class TestMedicationEndpoints:

    def test_create_and_list(self, client: TestClient, auth_headers):
        response = client.post(f"{API}/medications", json=medication_payload(), headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["lot"] == "AMX-001"

        listing = client.get(f"{API}/medications", headers=auth_headers).json()
        assert [m["lot"] for m in listing] == ["AMX-001"]

    def test_duplicate_lot(self, client: TestClient, auth_headers):
        client.post(f"{API}/medications", json=medication_payload(), headers=auth_headers)

        response = client.post(
            f"{API}/medications", json=medication_payload(name="Other"), headers=auth_headers
        )

        APITestHelper.assert_error_response(response, 400, "AMX-001")
        assert len(client.get(f"{API}/medications", headers=auth_headers).json()) == 1

    def test_invalid_date_rejected(self, client: TestClient, auth_headers):
        response = client.post(
            f"{API}/medications",
            json=medication_payload(expiration_date="31/12/2026"),
            headers=auth_headers,
        )

        assert response.status_code == 422

    def test_update_and_delete(self, client: TestClient, auth_headers):
        medication_id = client.post(
            f"{API}/medications", json=medication_payload(), headers=auth_headers
        ).json()["id"]

        updated = client.put(
            f"{API}/medications/{medication_id}",
            json=medication_payload(quantity=0, minimum_stock=0),
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["quantity"] == 0

        assert client.delete(f"{API}/medications/{medication_id}", headers=auth_headers).status_code == 200
        missing = client.put(
            f"{API}/medications/{medication_id}", json=medication_payload(), headers=auth_headers
        )
        APITestHelper.assert_error_response(missing, 404)

    def test_alerts(self, client: TestClient, auth_headers):
        today = date.today()
        client.post(f"{API}/medications", headers=auth_headers, json=medication_payload(
            lot="OLD-1", expiration_date=(today - timedelta(days=1)).isoformat()))
        client.post(f"{API}/medications", headers=auth_headers, json=medication_payload(
            lot="SOON-1", expiration_date=(today + timedelta(days=10)).isoformat()))
        client.post(f"{API}/medications", headers=auth_headers, json=medication_payload(
            lot="LOW-1", quantity=2, minimum_stock=10))
        client.post(f"{API}/medications", headers=auth_headers, json=medication_payload(lot="OK-1"))

        alerts = client.get(f"{API}/medications/alerts", headers=auth_headers).json()

        assert {a["lot"]: a["kind"] for a in alerts} == {
            "OLD-1": "expired",
            "SOON-1": "expiring_soon",
            "LOW-1": "low_stock",
        }


class TestWithdrawalEndpoints:

    def test_withdraw_and_history(self, client: TestClient, auth_headers):
        medication_id = client.post(
            f"{API}/medications", json=medication_payload(), headers=auth_headers
        ).json()["id"]

        response = client.post(
            f"{API}/withdrawals",
            json={"medication_id": medication_id, "quantity_withdrawn": 8, "note": "ward 2"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["medication"]["quantity"] == 42
        assert response.json()["withdrawal"]["medication_name"] == "Amoxicillin 500mg"

        history = client.get(f"{API}/withdrawals", headers=auth_headers).json()
        assert len(history) == 1
        assert history[0]["note"] == "ward 2"

    def test_excess_withdrawal(self, client: TestClient, auth_headers):
        medication_id = client.post(
            f"{API}/medications", json=medication_payload(), headers=auth_headers
        ).json()["id"]

        response = client.post(
            f"{API}/withdrawals",
            json={"medication_id": medication_id, "quantity_withdrawn": 51},
            headers=auth_headers,
        )

        APITestHelper.assert_error_response(response, 400, "Insufficient quantity")
        assert client.get(f"{API}/withdrawals", headers=auth_headers).json() == []

    def test_replay_after_medication_deleted(self, client: TestClient, auth_headers):
        medication_id = client.post(
            f"{API}/medications", json=medication_payload(), headers=auth_headers
        ).json()["id"]
        body = {"medication_id": medication_id, "quantity_withdrawn": 5, "request_key": "wd-1"}
        client.post(f"{API}/withdrawals", json=body, headers=auth_headers)
        client.delete(f"{API}/medications/{medication_id}", headers=auth_headers)

        response = client.post(f"{API}/withdrawals", json=body, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["replayed"] is True
        assert response.json()["medication"] is None
        assert response.json()["withdrawal"]["quantity_withdrawn"] == 5

    def test_unknown_medication(self, client: TestClient, auth_headers):
        response = client.post(
            f"{API}/withdrawals",
            json={"medication_id": 12345, "quantity_withdrawn": 1},
            headers=auth_headers,
        )

        APITestHelper.assert_error_response(response, 404)


class TestExportEndpoints:

    def test_secondary_csv(self, client: TestClient, auth_headers):
        add_stock(client, auth_headers, "secondary", "tape", 4)
        add_stock(client, auth_headers, "secondary", "alcohol", 9, "antiseptics")

        response = client.get(f"{API}/export/secondary", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "secondary.csv" in response.headers["content-disposition"]

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["Name", "Quantity", "Category", "Entry Date"]
        assert [r[0] for r in rows[1:]] == ["alcohol", "tape"]

    def test_empty_principal_csv(self, client: TestClient, auth_headers):
        response = client.get(f"{API}/export/principal", headers=auth_headers)

        assert response.text.strip() == "Name,Quantity,Category,Entry Date"
