"""Async HTTP client for the backing service."""
from typing import Any, List, Optional

import httpx

from reelvote.core.errors import LinkConflict, StoreError, StoreUnavailable
from reelvote.core.logging_config import get_logger
from reelvote.schemas import (
    AggregateRead,
    Reel,
    TokenRead,
    VoteRead,
    VoteUpsert,
    VoterIdentityUpdate,
    VoterRead,
    VoterUpsert,
)

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class HttpStore:
    """
    Typed access to the ``/api/v1`` surface.

    Point lookups answer ``None`` on 404. Any other non-2xx status raises
    ``StoreError`` carrying the server's ``detail``; transport failures raise
    ``StoreUnavailable``. Pass ``client`` to reuse a configured
    ``httpx.AsyncClient`` (tests hand in one on ``httpx.ASGITransport``).
    """

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
        not_found_ok: bool = False,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, json=json, params=params)
        except httpx.TransportError as e:
            logger.warning("store_unreachable", method=method, path=path, error=str(e))
            raise StoreUnavailable() from e

        if response.status_code == 404 and not_found_ok:
            return None
        if response.is_error:
            detail = _error_detail(response)
            if response.status_code == 409:
                raise LinkConflict(detail)
            raise StoreError(detail, status_code=response.status_code)
        return response.json()

    # Reference data

    async def list_reels(self) -> List[Reel]:
        data = await self._request("GET", "/reels")
        return [Reel.model_validate(item) for item in data]

    # Voters

    async def upsert_voter(self, payload: VoterUpsert) -> VoterRead:
        data = await self._request("POST", "/voters", json=payload.model_dump(mode="json"))
        return VoterRead.model_validate(data)

    async def get_voter(self, voter_id: str) -> Optional[VoterRead]:
        data = await self._request("GET", f"/voters/{voter_id}", not_found_ok=True)
        return VoterRead.model_validate(data) if data is not None else None

    async def find_voter_by_email(self, email: str) -> Optional[VoterRead]:
        data = await self._request("GET", "/voters", params={"email": email}, not_found_ok=True)
        return VoterRead.model_validate(data) if data is not None else None

    async def link_identity(self, voter_id: str, identity: VoterIdentityUpdate) -> Optional[VoterRead]:
        """Raises ``LinkConflict`` when the email belongs to another voter."""
        data = await self._request(
            "PATCH", f"/voters/{voter_id}/identity", json=identity.model_dump(mode="json"), not_found_ok=True
        )
        return VoterRead.model_validate(data) if data is not None else None

    # Tokens

    async def get_token(self, code: str) -> Optional[TokenRead]:
        data = await self._request("GET", f"/tokens/{code}", not_found_ok=True)
        return TokenRead.model_validate(data) if data is not None else None

    async def claim_token(self, token_id: int, device_id: str) -> Optional[TokenRead]:
        data = await self._request(
            "POST", f"/tokens/{token_id}/claim", json={"device_id": device_id}, not_found_ok=True
        )
        return TokenRead.model_validate(data) if data is not None else None

    async def attach_voter(self, token_id: int, voter_id: str) -> Optional[TokenRead]:
        data = await self._request(
            "PUT", f"/tokens/{token_id}/voter", json={"voter_id": voter_id}, not_found_ok=True
        )
        return TokenRead.model_validate(data) if data is not None else None

    # Votes and aggregates

    async def upsert_vote(self, vote: VoteUpsert) -> VoteRead:
        data = await self._request("PUT", "/votes", json=vote.model_dump(mode="json"))
        return VoteRead.model_validate(data)

    async def get_vote(self, reel_id: str, voter_id: str) -> Optional[VoteRead]:
        data = await self._request("GET", f"/votes/{reel_id}/{voter_id}", not_found_ok=True)
        return VoteRead.model_validate(data) if data is not None else None

    async def get_aggregate(self, reel_id: str) -> Optional[AggregateRead]:
        data = await self._request("GET", f"/stats/{reel_id}", not_found_ok=True)
        return AggregateRead.model_validate(data) if data is not None else None

    async def list_aggregates(self) -> List[AggregateRead]:
        data = await self._request("GET", "/stats")
        return [AggregateRead.model_validate(item) for item in data]

    # Admin

    async def admin_login(self, password: str) -> None:
        """Log in as organizer; the session cookie stays on the client."""
        await self._request("POST", "/auth/admin/login", json={"password": password})

    async def clear_votes(self) -> int:
        data = await self._request("DELETE", "/admin/votes")
        return data.get("deleted", 0)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    return f"HTTP {response.status_code}"
