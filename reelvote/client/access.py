"""Access control: token redemption and external-identity sign-in.

Both strategies end with a voter registered for this device. Registration
failure is fatal to the sign-in; linking an email is not.
"""
import asyncio
from typing import Optional

from pydantic import BaseModel

from reelvote.client.identity import DeviceManager
from reelvote.client.storage import LocalStorage
from reelvote.client.store import HttpStore
from reelvote.core.constants import IDENTITY_SESSION_KEY, TOKEN_DATA_KEY, TOKEN_KEY
from reelvote.core.errors import (
    InvalidToken,
    RegistrationFailed,
    StoreError,
    StoreUnavailable,
    TokenBoundElsewhere,
    TokenLookupTimeout,
)
from reelvote.core.logging_config import get_logger
from reelvote.core.sanitization import normalize_token
from reelvote.schemas import TokenRead, TokenValidation, VoterRead

logger = get_logger(__name__)

EMPTY_TOKEN_MESSAGE = "Please enter a token"


def _rejected(error: str) -> TokenValidation:
    return TokenValidation(valid=False, error=error)


class TokenAuthManager:
    """Redeems one-time tokens and keeps the redeemed token as the session."""

    def __init__(
        self,
        devices: DeviceManager,
        storage: LocalStorage,
        store: Optional[HttpStore],
        lookup_timeout: float = 8.0,
    ):
        self.devices = devices
        self.storage = storage
        self.store = store
        self.lookup_timeout = lookup_timeout
        self._authenticated = False
        self._token_data: Optional[TokenRead] = None

    async def validate_token(self, token_string: str) -> TokenValidation:
        """
        Redeem ``token_string`` for this device.

        A token already bound to this device is accepted again, which is how
        ``restore_session`` works. When two devices race for an unused token
        the store's conditional claim picks one; the other is told the token
        is used elsewhere.
        """
        if self.store is None:
            return _rejected(StoreUnavailable.message)

        if not token_string or not token_string.strip():
            return _rejected(EMPTY_TOKEN_MESSAGE)
        try:
            code = normalize_token(token_string)
        except ValueError as e:
            logger.info("token_malformed", reason=str(e))
            return _rejected(InvalidToken.message)

        try:
            token = await asyncio.wait_for(self.store.get_token(code), timeout=self.lookup_timeout)
        except asyncio.TimeoutError:
            logger.warning("token_lookup_timeout", timeout=self.lookup_timeout)
            return _rejected(TokenLookupTimeout.message)
        except StoreUnavailable as e:
            return _rejected(e.message)
        except StoreError as e:
            logger.error("token_lookup_failed", error=e.message)
            return _rejected(InvalidToken.message)

        if token is None:
            return _rejected(InvalidToken.message)

        device_id = self.devices.device_id
        if token.is_used and token.device_id and token.device_id != device_id:
            logger.info("token_bound_elsewhere", token_id=token.id)
            return _rejected(TokenBoundElsewhere.message)

        try:
            if not token.is_used:
                claimed = await self.store.claim_token(token.id, device_id)
                if claimed is None:
                    return _rejected(InvalidToken.message)
                if claimed.device_id != device_id:
                    logger.info("token_claim_lost", token_id=token.id)
                    return _rejected(TokenBoundElsewhere.message)
                token = claimed
        except StoreError as e:
            logger.error("token_claim_failed", token_id=token.id, error=e.message)
            return _rejected(e.message)

        is_judge = token.token_type == "judge"
        voter = await self.devices.register(
            self.store,
            is_judge=is_judge,
            judge_name=token.person_name if is_judge else None,
            name=token.person_name,
            token_id=token.id,
        )
        if voter is None:
            return _rejected(RegistrationFailed.message)

        if token.voter_id != voter.id:
            token = await self._link_voter(token, voter) or token

        self._authenticated = True
        self._token_data = token
        self.storage.set(TOKEN_KEY, code)
        self.storage.set_json(TOKEN_DATA_KEY, token.model_dump(mode="json"))
        logger.info("token_redeemed", token_id=token.id, token_type=token.token_type, voter_id=voter.id)
        return TokenValidation(valid=True, token_data=token)

    async def _link_voter(self, token: TokenRead, voter: VoterRead) -> Optional[TokenRead]:
        try:
            return await self.store.attach_voter(token.id, voter.id)
        except StoreError as e:
            # The voter row already carries token_id; the back-link is best effort
            logger.warning("token_voter_link_failed", token_id=token.id, error=e.message)
            return None

    async def restore_session(self) -> bool:
        """Silently re-redeem the saved token, if any."""
        saved = self.storage.get(TOKEN_KEY)
        if not saved:
            return False
        result = await self.validate_token(saved)
        if not result.valid:
            logger.info("token_session_not_restored", error=result.error)
        return result.valid

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated

    @property
    def token_data(self) -> Optional[TokenRead]:
        return self._token_data

    @property
    def person_name(self) -> Optional[str]:
        return self._token_data.person_name if self._token_data else None

    @property
    def category(self) -> Optional[str]:
        return self._token_data.category if self._token_data else None

    @property
    def token_type(self) -> Optional[str]:
        return self._token_data.token_type if self._token_data else None

    def logout(self) -> None:
        self._authenticated = False
        self._token_data = None
        self.storage.remove(TOKEN_KEY)
        self.storage.remove(TOKEN_DATA_KEY)


class ExternalIdentity(BaseModel):
    """A user already verified by an OAuth or magic-link provider."""

    user_id: str
    email: str
    email_verified: bool = True


class IdentityAuthManager:
    """Signs in with an external identity and links it onto this device's voter."""

    def __init__(self, devices: DeviceManager, storage: LocalStorage, store: Optional[HttpStore]):
        self.devices = devices
        self.storage = storage
        self.store = store
        self.current_user: Optional[ExternalIdentity] = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    async def sign_in(self, identity: ExternalIdentity) -> Optional[VoterRead]:
        """
        Make sure this device has a voter, then link the identity onto it.

        Raises:
            StoreUnavailable: no store is configured
            RegistrationFailed: no voter id could be obtained
        """
        if self.store is None:
            raise StoreUnavailable()

        voter_id = self.devices.get_voter_id()
        if not voter_id:
            voter = await self.devices.register(self.store)
            if voter is None:
                raise RegistrationFailed()
            voter_id = voter.id

        self.current_user = identity
        self.storage.set_json(IDENTITY_SESSION_KEY, identity.model_dump())

        try:
            existing = await self.store.get_voter(voter_id)
        except StoreError as e:
            logger.warning("voter_lookup_failed", voter_id=voter_id, error=e.message)
            existing = None

        if existing is not None and existing.email == identity.email.strip().lower():
            return existing

        linked = await self.devices.link_email(
            self.store,
            identity.email,
            auth_user_id=identity.user_id,
            email_verified=identity.email_verified,
        )
        logger.info("identity_signed_in", voter_id=voter_id, linked=linked is not None)
        return linked or existing

    async def restore_session(self) -> bool:
        saved = self.storage.get_json(IDENTITY_SESSION_KEY)
        if not saved:
            return False
        try:
            await self.sign_in(ExternalIdentity.model_validate(saved))
        except (RegistrationFailed, StoreUnavailable) as e:
            logger.error("identity_session_not_restored", error=e.message)
            self.current_user = None
            return False
        return True

    def sign_out(self) -> None:
        self.current_user = None
        self.storage.remove(IDENTITY_SESSION_KEY)

    def can_vote(self) -> bool:
        return self.is_authenticated and self.devices.get_voter_id() is not None

    async def verify_setup(self) -> bool:
        """True when this device's voter row exists in the store."""
        voter_id = self.devices.get_voter_id()
        if not voter_id or self.store is None:
            return False
        try:
            return await self.store.get_voter(voter_id) is not None
        except StoreError as e:
            logger.error("voter_verification_failed", voter_id=voter_id, error=e.message)
            return False
