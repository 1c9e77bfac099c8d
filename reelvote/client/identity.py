"""Device and voter identity."""
import re
import uuid
from typing import Optional

from reelvote.client.storage import LocalStorage
from reelvote.client.store import HttpStore
from reelvote.core.constants import DEVICE_ID_KEY, DEVICE_ID_PREFIX, VOTER_ID_KEY
from reelvote.core.errors import LinkConflict, StoreError
from reelvote.core.logging_config import get_logger
from reelvote.schemas import VoterIdentityUpdate, VoterRead, VoterUpsert
from reelvote.schemas.events import PageRole

logger = get_logger(__name__)

_MOBILE_UA = re.compile(r"mobile|android|iphone|ipad|ipod|blackberry|windows phone")
_TABLET_UA = re.compile(r"tablet|ipad")


def detect_device_type(user_agent: str) -> str:
    """Classify a user-agent string as ``mobile``, ``tablet`` or ``desktop``."""
    ua = (user_agent or "").lower()
    if _MOBILE_UA.search(ua):
        return "tablet" if _TABLET_UA.search(ua) else "mobile"
    return "desktop"


def detect_page_role(path: str) -> PageRole:
    """Page role from a URL path; anything unrecognized is audience."""
    path = (path or "").lower()
    if "control" in path:
        return PageRole.CONTROL
    if "judge" in path:
        return PageRole.JUDGE
    if "results" in path:
        return PageRole.RESULTS
    return PageRole.AUDIENCE


class DeviceManager:
    """
    Owns this client's device id and the voter id the service assigned to it.

    The device id is created on first use and never reissued for the same
    storage profile. Nothing here talks to the network except the explicit
    ``register`` / ``link_email`` / ``recover_from_email`` calls.
    """

    def __init__(self, storage: LocalStorage, user_agent: str = ""):
        self.storage = storage
        self.device_id = self.get_or_create_device_id()
        self.device_type = detect_device_type(user_agent)
        self._voter_id: Optional[str] = storage.get(VOTER_ID_KEY)

    def get_or_create_device_id(self) -> str:
        device_id = self.storage.get(DEVICE_ID_KEY)
        if not device_id:
            device_id = f"{DEVICE_ID_PREFIX}{uuid.uuid4()}"
            self.storage.set(DEVICE_ID_KEY, device_id)
            logger.info("device_created", device_id=device_id)
        return device_id

    def get_voter_id(self) -> Optional[str]:
        return self._voter_id or self.storage.get(VOTER_ID_KEY)

    def set_voter_id(self, voter_id: str) -> None:
        self._voter_id = voter_id
        self.storage.set(VOTER_ID_KEY, voter_id)

    async def register(
        self,
        store: HttpStore,
        is_judge: bool = False,
        judge_name: Optional[str] = None,
        name: Optional[str] = None,
        token_id: Optional[int] = None,
    ) -> Optional[VoterRead]:
        """Upsert the voter row for this device. Returns None if the store refused."""
        payload = VoterUpsert(
            device_id=self.device_id,
            device_type=self.device_type,
            is_judge=is_judge,
            judge_name=judge_name,
            name=name,
            token_id=token_id,
        )
        try:
            voter = await store.upsert_voter(payload)
        except StoreError as e:
            logger.error("device_registration_failed", device_id=self.device_id, error=e.message)
            return None

        self.set_voter_id(voter.id)
        return voter

    async def link_email(
        self,
        store: HttpStore,
        email: str,
        auth_user_id: Optional[str] = None,
        email_verified: bool = False,
    ) -> Optional[VoterRead]:
        """
        Attach an email to the registered voter.

        Failure is never fatal: a conflict or store error is logged and
        answered with None.
        """
        voter_id = self.get_voter_id()
        if not voter_id:
            return None

        identity = VoterIdentityUpdate(email=email, email_verified=email_verified, auth_user_id=auth_user_id)
        try:
            return await store.link_identity(voter_id, identity)
        except LinkConflict:
            logger.warning("email_link_conflict", voter_id=voter_id)
        except StoreError as e:
            logger.error("email_link_failed", voter_id=voter_id, error=e.message)
        return None

    async def recover_from_email(self, store: HttpStore, email: str) -> Optional[VoterRead]:
        """Adopt the voter previously linked to ``email`` on this device."""
        try:
            voter = await store.find_voter_by_email(email)
        except StoreError as e:
            logger.error("voter_recovery_failed", error=e.message)
            return None

        if voter is None:
            logger.info("voter_recovery_no_match")
            return None

        self.set_voter_id(voter.id)
        logger.info("voter_recovered", voter_id=voter.id, device_id=self.device_id)
        return voter
