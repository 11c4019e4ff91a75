from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from nursery.db import get_store
from nursery.errors import StoreUnavailableError
from nursery.main import app
from nursery.services.identity import get_identity
from tests.conftest import invoice_node

ADMIN = {"Authorization": "Bearer admin-token"}
STAFF = {"Authorization": "Bearer staff-token"}
PARENT = {"Authorization": "Bearer parent-token"}


@pytest.fixture
def client(store, identity, monkeypatch):
    monkeypatch.setattr("nursery.api.deps.local_today", lambda: date(2024, 5, 10))
    monkeypatch.setattr("nursery.api.scan.local_now", lambda: datetime(2024, 5, 10, 8, 30))
    identity.tokens = {
        "admin-token": {"uid": "uid-admin", "email": "admin@example.com"},
        "staff-token": {"uid": "uid-sara", "email": "sara@example.com"},
        "parent-token": {"uid": "uid-parent", "email": "lina.mom@example.com"},
    }
    store.data["users"] = {
        "uid-admin": {"role": "admin", "linkId": ""},
        "uid-sara": {"role": "staff", "linkId": "s1"},
        "uid-parent": {"role": "parent", "linkId": "c1"},
    }
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity] = lambda: identity
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_requires_token(client):
    assert client.get("/api/children/").status_code == 401
    assert client.get("/api/children/", headers={"Authorization": "Bearer bogus"}).status_code == 401


def test_account_without_profile_is_forbidden(client, identity):
    identity.tokens["orphan"] = {"uid": "uid-orphan", "email": ""}
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer orphan"})
    assert resp.status_code == 403


def test_parent_cannot_manage_children(client):
    assert client.get("/api/children/", headers=PARENT).status_code == 403
    assert client.post("/api/invoices/mark-paid", json={"ids": ["x"]}, headers=PARENT).status_code == 403


def test_create_child_assigns_qr_code(client, store):
    body = {
        "name": "Yara",
        "age": 3,
        "guardian": {"name": "Adel", "relation": "father", "email": "adel@example.com", "accountId": "forged"},
    }
    resp = client.post("/api/children/", json=body, headers=ADMIN)
    assert resp.status_code == 201
    created = resp.json()
    node = store.data["children"][created["id"]]
    assert node["qrCodeId"] == created["qrCodeId"]
    assert node["guardian"]["accountId"] is None

    qr = client.get(f"/api/children/{created['id']}/qr", headers=ADMIN).json()
    assert qr["payload"] == '{"type": "child", "id": "%s"}' % created["qrCodeId"]


def test_update_child_keeps_qr_code(client, store):
    resp = client.patch("/api/children/c1", json={"name": "Lina M."}, headers=ADMIN)
    assert resp.status_code == 200
    assert store.data["children"]["c1"]["name"] == "Lina M."
    assert store.data["children"]["c1"]["qrCodeId"] == "qr-lina"


def test_admin_scan_checks_child_in(client, store):
    resp = client.post("/api/scan/", json={"code": '{"type": "child", "id": "qr-lina"}'}, headers=ADMIN)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Lina checked in successfully.", "accepted": True, "action": "check-in"}
    (record,) = store.data["attendance"].values()
    assert record["checkIn"] == "08:30"

    again = client.post("/api/scan/", json={"code": '{"type": "child", "id": "qr-lina"}'}, headers=ADMIN)
    assert again.json()["accepted"] is False


def test_staff_self_check_in(client, store):
    resp = client.post("/api/scan/", json={"code": '{"type": "nursery-check-in"}'}, headers=STAFF)
    assert resp.json()["accepted"] is True
    (record,) = store.data["staffAttendance"].values()
    assert record["staffId"] == "s1"

    portal = client.get("/api/portal/staff", headers=STAFF).json()
    assert portal["today"]["checkIn"] == "08:30"
    assert portal["check_in_window"] == ["07:00", "10:00"]


def test_parent_cannot_scan(client):
    resp = client.post("/api/scan/", json={"code": '{"type": "child", "id": "qr-lina"}'}, headers=PARENT)
    assert resp.status_code == 403


def test_mark_paid_endpoint(client, store):
    store.data["invoices"] = {
        "A": invoice_node("c1", "2024-05-31"),
        "B": invoice_node("c1", "2024-04-30", "Paid"),
    }
    resp = client.post("/api/invoices/mark-paid", json={"ids": ["A", "B"]}, headers=ADMIN)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "partial"
    assert body["paid_ids"] == ["A"]
    (successor_id,) = body["successor_ids"]
    assert store.data["invoices"][successor_id]["dueDate"] == "2024-06-01"
    assert store.data["invoices"]["A"]["paymentDate"] == "2024-05-10"
    assert store.data["invoices"]["B"] == invoice_node("c1", "2024-04-30", "Paid")

    noop = client.post("/api/invoices/mark-paid", json={"ids": ["A"]}, headers=ADMIN).json()
    assert noop["status"] == "noop"


def test_invoice_list_promotes_overdue(client, store):
    store.data["invoices"] = {"A": invoice_node("c1", "2024-05-01")}
    items = client.get("/api/invoices/", headers=ADMIN).json()
    assert items[0]["status"] == "Overdue"
    assert store.data["invoices"]["A"]["status"] == "Overdue"


def test_parent_portal(client, store):
    store.data["invoices"] = {"A": invoice_node("c1", "2024-06-01"), "Z": invoice_node("c2", "2024-06-01")}
    body = client.get("/api/portal/parent", headers=PARENT).json()
    assert body["child"]["id"] == "c1"
    assert [i["id"] for i in body["invoices"]] == ["A"]


def test_settings_roundtrip_and_validation(client, store):
    resp = client.get("/api/settings/", headers=ADMIN)
    assert resp.json()["checkInStartTime"] == "07:00"

    new = {
        "checkInStartTime": "06:30",
        "checkInEndTime": "09:30",
        "checkOutStartTime": "12:00",
        "checkOutEndTime": "17:00",
        "nextDueDateStrategy": "last_day_next_month",
    }
    assert client.put("/api/settings/", json=new, headers=ADMIN).status_code == 200
    assert store.data["settings"]["nursery"] == new

    bad = dict(new, checkInStartTime="11:00")
    assert client.put("/api/settings/", json=bad, headers=ADMIN).status_code == 422


def test_staff_accounts_endpoint(client, store, identity):
    resp = client.post("/api/staff/accounts", json={"ids": ["s1", "s2"]}, headers=ADMIN)
    assert resp.status_code == 200
    body = resp.json()
    assert [c["record_id"] for c in body["credentials"]] == ["s2"]
    assert body["skipped_ids"] == ["s1"]

    none_left = client.post("/api/staff/accounts", json={"ids": ["s1"]}, headers=ADMIN)
    assert none_left.status_code == 400


def test_attendance_sheet_and_export(client, store):
    store.data["attendance"] = {
        "a1": {"childId": "c1", "childName": "Lina", "date": "2024-05-10", "checkIn": "13:05", "status": "Present"}
    }
    sheet = client.get("/api/attendance/children", headers=ADMIN).json()
    rows = {r["subject_id"]: r for r in sheet["rows"]}
    assert rows["c1"]["check_in_display"] == "01:05 PM"
    assert rows["c2"]["status"] == "Absent"

    csv = client.get(
        "/api/attendance/report",
        params={"from_date": "2024-05-01", "to_date": "2024-05-31"},
        headers=ADMIN,
    )
    assert csv.status_code == 200
    assert "Lina" in csv.text


def test_store_outage_returns_503_with_retry(client, store):
    store.fail_with = StoreUnavailableError("offline")
    resp = client.get("/api/dashboard/stats", headers=ADMIN)
    assert resp.status_code == 503
    assert resp.json()["retry"] is True


def test_invalid_stored_settings_return_502_until_saved(client, store):
    store.data["settings"]["nursery"]["checkInStartTime"] = "11:00"
    resp = client.get("/api/children/", headers=ADMIN)
    assert resp.status_code == 502
    assert resp.json()["retry"] is False

    scan = client.post("/api/scan/", json={"code": '{"type": "child", "id": "qr-lina"}'}, headers=ADMIN)
    assert scan.status_code == 200
    assert scan.json()["accepted"] is False

    fixed = dict(store.data["settings"]["nursery"], checkInStartTime="07:00")
    assert client.put("/api/settings/", json=fixed, headers=ADMIN).status_code == 200
    assert client.get("/api/children/", headers=ADMIN).status_code == 200


def _attendance(subject_key, subject_id, day, status="Present"):
    return {subject_key: subject_id, "date": day, "checkIn": "08:00" if status == "Present" else None, "status": status}


def test_parent_portal_period_summaries(client, store):
    store.data["attendance"] = {
        "a1": _attendance("childId", "c1", "2024-05-03"),
        "a2": _attendance("childId", "c1", "2024-04-20"),
        "a3": _attendance("childId", "c1", "2024-04-21", "Absent"),
        "a4": _attendance("childId", "c1", "2024-03-01"),
        "a5": _attendance("childId", "c2", "2024-05-03"),
    }
    store.data["invoices"] = {
        "may": dict(invoice_node("c1", "2024-06-01", "Paid", 1500.0), issueDate="2024-05-01"),
        "apr": dict(invoice_node("c1", "2024-05-01", "Paid", 1200.0), issueDate="2024-04-01"),
        "open": dict(invoice_node("c1", "2024-06-15", "Unpaid", 300.0), issueDate="2024-04-15"),
        "other": dict(invoice_node("c2", "2024-06-01", "Paid", 900.0), issueDate="2024-05-01"),
    }

    this_month = client.get("/api/portal/parent", params={"period": "this_month"}, headers=PARENT).json()
    assert this_month["days_present"] == 1
    assert this_month["total_paid"] == 1500.0
    assert [i["id"] for i in this_month["invoices"]] == ["may"]

    last_month = client.get("/api/portal/parent", params={"period": "last_month"}, headers=PARENT).json()
    assert last_month["days_present"] == 1
    assert [a["id"] for a in last_month["attendance"]] == ["a3", "a2"]
    assert last_month["total_paid"] == 1200.0
    assert {i["id"] for i in last_month["invoices"]} == {"apr", "open"}

    all_time = client.get("/api/portal/parent", headers=PARENT).json()
    assert all_time["period"] == "all_time"
    assert all_time["days_present"] == 3
    assert all_time["total_paid"] == 2700.0

    bad = client.get("/api/portal/parent", params={"period": "last_year"}, headers=PARENT)
    assert bad.status_code == 422


def test_staff_portal_period_summaries(client, store):
    store.data["staffAttendance"] = {
        "t1": _attendance("staffId", "s1", "2024-05-10"),
        "t2": _attendance("staffId", "s1", "2024-04-30"),
        "t3": _attendance("staffId", "s1", "2024-04-02"),
        "t4": _attendance("staffId", "s2", "2024-05-10"),
    }
    body = client.get("/api/portal/staff", params={"period": "last_month"}, headers=STAFF).json()
    assert body["days_present"] == 2
    assert [a["id"] for a in body["attendance"]] == ["t2", "t3"]
    assert body["today"]["id"] == "t1"

    this_month = client.get("/api/portal/staff", params={"period": "this_month"}, headers=STAFF).json()
    assert this_month["days_present"] == 1
