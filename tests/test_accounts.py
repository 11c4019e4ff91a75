import asyncio
import string
from datetime import date

from nursery.services.accounts import generate_password, provision_parent_accounts, provision_staff_accounts
from nursery.services.snapshot import load_snapshot
from tests.conftest import FakeIdentity, InMemoryStore, staff_node


def test_generate_password_alphabet_and_length():
    allowed = set(string.ascii_letters + string.digits)
    for length in (8, 12):
        password = generate_password(length)
        assert len(password) == length
        assert set(password) <= allowed
    assert len(generate_password()) == 8


def test_duplicate_email_does_not_block_other_staff():
    store = InMemoryStore(
        {
            "staff": {
                "s1": staff_node("Huda", "qr-1", email="taken@example.com"),
                "s2": staff_node("Rana", "qr-2", email="rana@example.com"),
            }
        }
    )
    identity = FakeIdentity(taken=("taken@example.com",))
    snapshot = asyncio.run(load_snapshot(store, date(2024, 5, 10)))

    report = asyncio.run(provision_staff_accounts(store, identity, snapshot, ["s1", "s2"]))

    assert [f.record_id for f in report.failures] == ["s1"]
    assert report.failures[0].reason == "Email is already in use."
    assert [c.record_id for c in report.credentials] == ["s2"]
    credential = report.credentials[0]
    assert credential.email == "rana@example.com"
    assert len(credential.password) == 8

    assert len(store.updates) == 1
    assert store.updates[0] == {
        "staff/s2/accountId": credential.account_id,
        f"users/{credential.account_id}": {"role": "staff", "linkId": "s2"},
    }
    assert "accountId" not in store.data["staff"]["s1"]


def test_staff_without_email_or_already_linked_are_skipped(store, identity):
    store.data["staff"]["s3"] = staff_node("Noor", "qr-3")
    snapshot = asyncio.run(load_snapshot(store, date(2024, 5, 10)))

    report = asyncio.run(provision_staff_accounts(store, identity, snapshot, ["s1", "s3", "unknown"]))

    assert report.eligible == 0
    assert report.skipped_ids == ["s1", "s3", "unknown"]
    assert identity.created == []
    assert store.updates == []


def test_parent_accounts_link_guardian(store, identity):
    snapshot = asyncio.run(load_snapshot(store, date(2024, 5, 10)))

    report = asyncio.run(provision_parent_accounts(store, identity, snapshot, ["c1", "c2"]))

    assert report.skipped_ids == ["c2"]
    assert [c.record_id for c in report.credentials] == ["c1"]
    uid = report.credentials[0].account_id
    assert store.data["children"]["c1"]["guardian"]["accountId"] == uid
    assert store.data["users"][uid] == {"role": "parent", "linkId": "c1"}
    assert identity.created[0][0] == "lina.mom@example.com"
