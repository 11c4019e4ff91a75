"""Grant the configured admin identity its admin profile if not present."""
import logging

from nursery.config import settings
from nursery.db import DataStore
from nursery.models.user import UserProfile, UserRole
from nursery.services.identity import IdentityProvider

logger = logging.getLogger(__name__)


async def seed_admin(store: DataStore, identity: IdentityProvider):
    if not settings.admin_email:
        return
    uid = await identity.get_uid_by_email(settings.admin_email)
    if not uid:
        logger.warning("ADMIN_EMAIL %s has no Firebase account; no admin profile seeded", settings.admin_email)
        return
    existing = await store.get(f"users/{uid}")
    if existing:
        return
    await store.set(f"users/{uid}", UserProfile(role=UserRole.ADMIN).to_store())
    logger.info("Seeded admin profile for %s", settings.admin_email)
