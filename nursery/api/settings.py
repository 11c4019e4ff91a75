"""Nursery settings: scan windows and the next due date strategy."""
from fastapi import APIRouter

from nursery.api.deps import Store
from nursery.models.settings import SETTINGS_PATH, NurserySettings
from nursery.services.snapshot import load_settings

router = APIRouter()


@router.get("/")
async def get_settings(store: Store):
    settings = await load_settings(store)
    return settings.to_api()


@router.put("/")
async def update_settings(data: NurserySettings, store: Store):
    await store.set(SETTINGS_PATH, data.to_store())
    return data.to_api()
