"""Create login accounts for staff and guardians and link them to their records."""
import logging
import secrets
import string
from dataclasses import dataclass, field

from nursery.db import DataStore
from nursery.errors import AuthError
from nursery.models.user import UserProfile, UserRole
from nursery.services.identity import IdentityProvider
from nursery.services.snapshot import NurserySnapshot

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_password(length: int = 8) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


@dataclass
class Credential:
    """One-time credentials for a new account; the password is not stored anywhere."""

    record_id: str
    name: str
    email: str
    password: str
    phone: str = ""
    account_id: str = ""


@dataclass
class ProvisioningFailure:
    record_id: str
    name: str
    email: str
    reason: str


@dataclass
class ProvisioningReport:
    credentials: list[Credential] = field(default_factory=list)
    failures: list[ProvisioningFailure] = field(default_factory=list)
    skipped_ids: list[str] = field(default_factory=list)

    @property
    def eligible(self) -> int:
        return len(self.credentials) + len(self.failures)


@dataclass(frozen=True)
class _Candidate:
    record_id: str
    name: str
    email: str
    phone: str
    account_path: str


async def _provision(
    store: DataStore,
    identity: IdentityProvider,
    role: UserRole,
    candidates: list[_Candidate],
    report: ProvisioningReport,
) -> ProvisioningReport:
    updates: dict[str, object] = {}
    for candidate in candidates:
        password = generate_password()
        try:
            uid = await identity.create_identity(candidate.email, password)
        except AuthError as e:
            logger.warning("Failed to create account for %s: %s", candidate.name, e)
            reason = "Email is already in use." if e.code == "email-in-use" else "Account could not be created."
            report.failures.append(ProvisioningFailure(candidate.record_id, candidate.name, candidate.email, reason))
            continue
        updates[candidate.account_path] = uid
        updates[f"users/{uid}"] = UserProfile(role=role, link_id=candidate.record_id).to_store()
        report.credentials.append(
            Credential(candidate.record_id, candidate.name, candidate.email, password, candidate.phone, uid)
        )

    if updates:
        await store.update(updates)
        logger.info("Linked %d new %s account(s)", len(report.credentials), role.value)
    return report


async def provision_staff_accounts(
    store: DataStore,
    identity: IdentityProvider,
    snapshot: NurserySnapshot,
    staff_ids: list[str],
) -> ProvisioningReport:
    """
    Create staff logins for the selected staff that have an email and no
    account yet. Others are skipped. One failed identity does not stop the
    rest; every successful link is written in one atomic update.
    """
    report = ProvisioningReport()
    candidates: list[_Candidate] = []
    for staff_id in dict.fromkeys(staff_ids):
        member = snapshot.staff_member(staff_id)
        if not member or member.account_id or not member.email:
            report.skipped_ids.append(staff_id)
            continue
        candidates.append(
            _Candidate(member.id, member.name, member.email, member.phone, f"staff/{member.id}/accountId")
        )
    return await _provision(store, identity, UserRole.STAFF, candidates, report)


async def provision_parent_accounts(
    store: DataStore,
    identity: IdentityProvider,
    snapshot: NurserySnapshot,
    child_ids: list[str],
) -> ProvisioningReport:
    """Same as provision_staff_accounts, for each selected child's guardian."""
    report = ProvisioningReport()
    candidates: list[_Candidate] = []
    for child_id in dict.fromkeys(child_ids):
        child = snapshot.child(child_id)
        if not child or child.guardian.account_id or not child.guardian.email:
            report.skipped_ids.append(child_id)
            continue
        candidates.append(
            _Candidate(
                child.id,
                child.guardian.name,
                child.guardian.email,
                child.guardian.phone,
                f"children/{child.id}/guardian/accountId",
            )
        )
    return await _provision(store, identity, UserRole.PARENT, candidates, report)
