import json
import os

import pytest
from starlette.testclient import TestClient

from conftest import make_settings
from service_desk.adapters.sms import SMSAdapter
from service_desk.config import Settings
from service_desk.server import create_app, nest_form_fields

APPOINTMENT = {
    "name": "Ravi",
    "phone": "9876543210",
    "address": "12 MG Road",
    "vehicle": "Swift",
    "issue": "Brake noise",
}


@pytest.fixture
def client(settings, sms_adapter):
    app = create_app(settings, sms_adapter)
    with TestClient(app) as test_client:
        yield test_client


def _read_collection(settings, name):
    with open(f"{settings.DATA_DIR}/{name}.json", encoding="utf-8") as f:
        return json.load(f)


class TestHealthAndLogin:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_login_with_default_credentials(self, client):
        response = client.post("/api/login", json={"username": "admin", "password": "admin123"})
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_login_defaults_when_not_overridden(self, tmp_path, monkeypatch, sms_adapter):
        monkeypatch.delenv("ADMIN_USER", raising=False)
        monkeypatch.delenv("ADMIN_PASS", raising=False)
        settings = Settings(_env_file=None, DATA_DIR=str(tmp_path / "data"), STATIC_DIR=str(tmp_path / "public"))

        with TestClient(create_app(settings, sms_adapter)) as test_client:
            ok = test_client.post("/api/login", json={"username": "admin", "password": "admin123"})
            bad = test_client.post("/api/login", json={"username": "admin", "password": "admin"})

        assert ok.status_code == 200
        assert ok.json() == {"ok": True}
        assert bad.status_code == 401

    def test_login_mismatch(self, client):
        response = client.post("/api/login", json={"username": "admin", "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"ok": False, "message": "Invalid credentials."}

    def test_login_missing_fields(self, client):
        response = client.post("/api/login", json={"username": "admin"})
        assert response.status_code == 400
        assert response.json() == {"ok": False, "message": "Missing username or password."}

    def test_login_with_form_body(self, client):
        response = client.post("/api/login", data={"username": "admin", "password": "admin123"})
        assert response.status_code == 200


class TestSubmissionsApi:

    def test_appointment_creates_matching_records(self, client, settings):
        response = client.post("/api/appointments", json=APPOINTMENT)

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        record = body["record"]
        assert record["vehicle"] == "Swift"
        assert record["type"] == "Appointment"

        appointments = _read_collection(settings, "appointments")
        customers = _read_collection(settings, "customer-records")
        assert [item["id"] for item in appointments] == [record["id"]]
        assert [item["id"] for item in customers] == [record["id"]]

    def test_appointment_missing_field(self, client, settings):
        payload = dict(APPOINTMENT)
        del payload["vehicle"]

        response = client.post("/api/appointments", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["ok"] is False
        assert "vehicle" in body["message"]
        assert not os.path.exists(f"{settings.DATA_DIR}/appointments.json")
        assert not os.path.exists(f"{settings.DATA_DIR}/customer-records.json")

    def test_empty_and_malformed_bodies(self, client):
        assert client.post("/api/appointments").status_code == 400
        response = client.post(
            "/api/appointments", content=b"{broken", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    def test_appointment_form_encoded(self, client):
        response = client.post("/api/appointments", data=APPOINTMENT)
        assert response.status_code == 200
        assert response.json()["record"]["issue"] == "Brake noise"

    def test_spares_form_encoded_with_bracketed_parts(self, client, settings):
        response = client.post("/api/spares", data={
            "name": "Meena",
            "phone": "9123456780",
            "address": "4 Lake View",
            "parts[0][name]": "Brake Pad",
            "parts[0][qty]": "2",
            "parts[1][name]": "Oil Filter",
            "total": "1000",
        })

        assert response.status_code == 200
        assert response.json()["record"]["details"] == (
            "Brake Pad | Qty: 2 | Amount: 0 | Oil Filter | Qty: 1 | Amount: 0 | Total: 1000"
        )
        assert _read_collection(settings, "spares")[0]["parts"] == [
            {"name": "Brake Pad", "qty": "2"},
            {"name": "Oil Filter"},
        ]

    def test_spares_scenario(self, client):
        response = client.post("/api/spares", json={
            "name": "Meena",
            "phone": "9123456780",
            "address": "4 Lake View",
            "parts": [{"name": "Brake Pad", "qty": 2, "amount": 500}],
            "total": 1000,
        })

        assert response.status_code == 200
        record = response.json()["record"]
        assert "Brake Pad | Qty: 2 | Amount: 500 | Total: 1000" in record["details"]

        listing = client.get("/api/customer-records").json()
        assert listing["ok"] is True
        assert [(item["id"], item["type"]) for item in listing["records"]] == [(record["id"], "Spare Parts")]

    def test_spares_empty_parts(self, client):
        response = client.post("/api/spares", json={
            "name": "Meena", "phone": "9123456780", "address": "4 Lake View", "parts": [],
        })
        assert response.status_code == 400

    @pytest.mark.parametrize("rating", [0, -1, "abc", 10**400])
    def test_feedback_rejects_bad_rating(self, client, settings, rating):
        response = client.post("/api/feedback", json={"name": "Asha", "message": "Nice", "rating": rating})
        assert response.status_code == 400
        assert not os.path.exists(f"{settings.DATA_DIR}/feedback.json")

    def test_feedback_accepts_decimal_rating(self, client, settings):
        response = client.post("/api/feedback", json={"name": "Asha", "message": "Nice", "rating": 4.5})

        assert response.status_code == 200
        assert response.json()["record"]["rating"] == 4.5
        assert _read_collection(settings, "feedback")[0]["rating"] == 4.5

    def test_feedback_listing_starts_empty(self, client, settings):
        assert not os.path.exists(f"{settings.DATA_DIR}/feedback.json")

        response = client.get("/api/feedback")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "records": []}
        assert _read_collection(settings, "feedback") == []

    def test_contact_returns_ack_only(self, client, settings):
        response = client.post("/api/contact", json={"name": "Asha", "phone": "9000000000", "message": "Hi"})

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert len(_read_collection(settings, "contacts")) == 1

    def test_contact_missing_message(self, client):
        response = client.post("/api/contact", json={"name": "Asha", "phone": "9000000000"})
        assert response.status_code == 400

    def test_notification_failure_still_succeeds(self, client, twilio_client):
        twilio_client.messages.create.side_effect = RuntimeError("provider unreachable")

        response = client.post("/api/appointments", json=APPOINTMENT)

        assert response.status_code == 200
        assert twilio_client.messages.create.call_count == 2

    def test_sms_disabled(self, tmp_path, twilio_client):
        settings = make_settings(tmp_path, TWILIO_PHONE=None)
        app = create_app(settings, SMSAdapter(settings, client=twilio_client))
        with TestClient(app) as test_client:
            response = test_client.post("/api/appointments", json=APPOINTMENT)
        assert response.status_code == 200
        twilio_client.messages.create.assert_not_called()


class TestCustomerRecordsApi:

    def test_delete_existing_record(self, client):
        first = client.post("/api/appointments", json=APPOINTMENT).json()["record"]
        second = client.post("/api/appointments", json=dict(APPOINTMENT, name="Kiran")).json()["record"]
        third = client.post("/api/appointments", json=dict(APPOINTMENT, name="Lata")).json()["record"]

        response = client.delete(f"/api/customer-records/{second['id']}")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        remaining = client.get("/api/customer-records").json()["records"]
        assert [item["id"] for item in remaining] == [first["id"], third["id"]]

    def test_delete_absent_record(self, client):
        client.post("/api/appointments", json=APPOINTMENT)

        response = client.delete("/api/customer-records/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"ok": False, "message": "Record not found."}
        assert len(client.get("/api/customer-records").json()["records"]) == 1


class TestPeripheralRoutes:

    def test_unknown_api_route(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["ok"] is False

    def test_cors_preflight(self, client):
        response = client.options(
            "/api/appointments",
            headers={"Origin": "http://shop.example", "Access-Control-Request-Method": "POST"},
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_spare_form_post_redirects(self, client):
        response = client.post("/spare.html", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/spare.html"

    def test_login_page_missing(self, client):
        response = client.get("/")
        assert response.status_code == 404

    def test_login_page_and_static_assets(self, tmp_path, sms_adapter):
        public = tmp_path / "public"
        public.mkdir()
        (public / "Login.html").write_text("<h1>Admin login</h1>", encoding="utf-8")
        (public / "spare.html").write_text("<h1>Spare parts</h1>", encoding="utf-8")
        settings = make_settings(tmp_path)

        with TestClient(create_app(settings, sms_adapter)) as test_client:
            assert "Admin login" in test_client.get("/").text
            assert "Spare parts" in test_client.get("/spare.html").text
            assert test_client.get("/api/health").json() == {"ok": True}


class TestFormFields:
    """Bracketed form keys"""

    def test_nested_and_list_keys(self):
        fields = nest_form_fields([
            ("name", "Meena"),
            ("parts[1][name]", "Oil Filter"),
            ("parts[0][name]", "Brake Pad"),
            ("tags[]", "urgent"),
            ("tags[]", "cash"),
        ])

        assert fields == {
            "name": "Meena",
            "parts": [{"name": "Brake Pad"}, {"name": "Oil Filter"}],
            "tags": ["urgent", "cash"],
        }

    def test_plain_and_malformed_keys_kept_flat(self):
        assert nest_form_fields([("0", "a"), ("parts[0", "b")]) == {"0": "a", "parts[0": "b"}
