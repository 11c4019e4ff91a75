from __future__ import annotations

import copy
import os
from typing import Any, Optional

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("NURSERY_TIMEZONE", "UTC")

import pytest

from nursery.errors import AuthError, StoreError


class InMemoryStore:
    """DataStore over a nested dict, recording every write call."""

    def __init__(self, data: Optional[dict] = None):
        self.data: dict = copy.deepcopy(data or {})
        self.sets: list[tuple[str, Any]] = []
        self.updates: list[dict[str, Any]] = []
        self.fail_with: Optional[StoreError] = None
        self._counter = 0

    @staticmethod
    def _parts(path: str) -> list[str]:
        return [p for p in path.strip("/").split("/") if p]

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _write(self, path: str, value: Any):
        parts = self._parts(path)
        node = self.data
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        if value is None:
            node.pop(parts[-1], None)
        else:
            node[parts[-1]] = copy.deepcopy(value)

    async def get(self, path: str) -> Any:
        self._check()
        node: Any = self.data
        for part in self._parts(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    async def set(self, path: str, value: Any) -> None:
        self._check()
        self.sets.append((path, copy.deepcopy(value)))
        self._write(path, value)

    async def update(self, updates: dict[str, Any]) -> None:
        self._check()
        self.updates.append(copy.deepcopy(updates))
        for path, value in updates.items():
            self._write(path, value)

    async def push(self, path: str) -> str:
        self._counter += 1
        return f"new{self._counter:03d}"

    async def delete(self, paths: list[str]) -> None:
        await self.update({p: None for p in paths})


class FakeIdentity:
    """IdentityProvider that hands out uid-1, uid-2, ... and rejects taken emails."""

    def __init__(self, taken: tuple[str, ...] = ()):
        self.taken = set(taken)
        self.created: list[tuple[str, str]] = []
        self.tokens: dict[str, dict] = {}
        self.signed_out: list[str] = []

    async def create_identity(self, email: str, password: str) -> str:
        if email in self.taken:
            raise AuthError("email-in-use", f"{email} is already registered")
        self.taken.add(email)
        self.created.append((email, password))
        return f"uid-{len(self.created)}"

    async def verify_token(self, id_token: str) -> dict:
        if id_token not in self.tokens:
            raise AuthError("invalid-credential")
        return self.tokens[id_token]

    async def sign_in(self, email: str, password: str) -> dict:
        raise AuthError("invalid-credential")

    async def sign_out(self, uid: str) -> None:
        self.signed_out.append(uid)

    async def get_uid_by_email(self, email: str) -> Optional[str]:
        return None


def child_node(name: str, qr: str, email: str = "", account_id: Optional[str] = None) -> dict:
    guardian = {"name": f"{name}'s mother", "relation": "mother", "phone": "0100", "email": email}
    if account_id:
        guardian["accountId"] = account_id
    return {"name": name, "age": 4, "address": "", "healthStatus": "", "guardian": guardian, "qrCodeId": qr}


def staff_node(name: str, qr: str, email: str = "", account_id: Optional[str] = None) -> dict:
    node = {"name": name, "role": "teacher", "phone": "0200", "email": email, "qrCodeId": qr}
    if account_id:
        node["accountId"] = account_id
    return node


def invoice_node(child_id: str, due: str, status: str = "Unpaid", amount: float = 1500.0) -> dict:
    return {
        "childId": child_id,
        "childName": "Lina",
        "amount": amount,
        "issueDate": "2024-01-01",
        "dueDate": due,
        "status": status,
        "paymentDate": None,
    }


SETTINGS_NODE = {
    "checkInStartTime": "07:00",
    "checkInEndTime": "10:00",
    "checkOutStartTime": "13:00",
    "checkOutEndTime": "16:00",
    "nextDueDateStrategy": "first_day_next_month",
}


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(
        {
            "settings": {"nursery": dict(SETTINGS_NODE)},
            "children": {
                "c1": child_node("Lina", "qr-lina", email="lina.mom@example.com"),
                "c2": child_node("Omar", "qr-omar"),
            },
            "staff": {
                "s1": staff_node("Sara", "qr-sara", email="sara@example.com", account_id="uid-sara"),
                "s2": staff_node("Mona", "qr-mona", email="mona@example.com"),
            },
        }
    )


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()
