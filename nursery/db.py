"""Firebase Realtime Database connection and the data store boundary."""
import asyncio
import logging
import secrets
import time
from typing import Any, Optional, Protocol

import firebase_admin
from firebase_admin import credentials, db, exceptions

from nursery.config import settings
from nursery.errors import StoreError, StoreUnavailableError

logger = logging.getLogger(__name__)

# Same alphabet and layout as Firebase client push ids: 8 chars of millisecond
# timestamp followed by 12 random chars, so keys sort by creation time.
PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"


def generate_push_key(now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    stamp = []
    for _ in range(8):
        stamp.append(PUSH_CHARS[now_ms % 64])
        now_ms //= 64
    tail = "".join(secrets.choice(PUSH_CHARS) for _ in range(12))
    return "".join(reversed(stamp)) + tail


class DataStore(Protocol):
    """Path-addressed JSON store. `update` applies every path in one atomic write."""

    async def get(self, path: str) -> Any: ...

    async def set(self, path: str, value: Any) -> None: ...

    async def update(self, updates: dict[str, Any]) -> None: ...

    async def push(self, path: str) -> str: ...

    async def delete(self, paths: list[str]) -> None: ...


class FirebaseStore:
    """DataStore backed by firebase_admin.db; blocking calls run in a worker thread."""

    def __init__(self, app: firebase_admin.App):
        self._app = app

    def _ref(self, path: str):
        return db.reference("/" + path.strip("/"), app=self._app)

    async def _call(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except (exceptions.UnavailableError, exceptions.DeadlineExceededError) as e:
            raise StoreUnavailableError(str(e)) from e
        except exceptions.FirebaseError as e:
            raise StoreError(str(e)) from e

    async def get(self, path: str) -> Any:
        return await self._call(self._ref(path).get)

    async def set(self, path: str, value: Any) -> None:
        await self._call(self._ref(path).set, value)

    async def update(self, updates: dict[str, Any]) -> None:
        if not updates:
            return
        payload = {k.strip("/"): v for k, v in updates.items()}
        await self._call(self._ref("").update, payload)

    async def push(self, path: str) -> str:
        # Nothing is written here; the caller includes the key in its own update.
        return generate_push_key()

    async def delete(self, paths: list[str]) -> None:
        await self.update({p: None for p in paths})


_app: Optional[firebase_admin.App] = None
_store: Optional[FirebaseStore] = None


def get_firebase_app() -> firebase_admin.App:
    """Initialize (once) and return the Firebase app used for database and auth."""
    global _app
    if _app is not None:
        return _app
    options = {"databaseURL": settings.firebase_database_url}
    if settings.firebase_credentials_path:
        cred = credentials.Certificate(settings.firebase_credentials_path)
    else:
        logger.warning("FIREBASE_CREDENTIALS_PATH not set. Using application default credentials.")
        cred = credentials.ApplicationDefault()
    _app = firebase_admin.initialize_app(cred, options)
    return _app


async def db_startup():
    """Connect to Firebase and create the process-wide store."""
    global _store
    _store = FirebaseStore(get_firebase_app())


async def db_shutdown():
    """Release the Firebase app."""
    global _app, _store
    if _app is not None:
        firebase_admin.delete_app(_app)
        _app = None
    _store = None


def get_store() -> DataStore:
    if _store is None:
        raise StoreUnavailableError("Data store is not initialized")
    return _store
