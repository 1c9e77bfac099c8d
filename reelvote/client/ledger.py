"""Vote ledger: the client's write and read paths for votes and stats."""
from typing import Any, Callable, List, Optional

from reelvote.client.catalog import ReelCatalog
from reelvote.client.channel import RealtimeChannel
from reelvote.client.identity import DeviceManager
from reelvote.client.store import HttpStore
from reelvote.core.cache import TTLCache
from reelvote.core.errors import NotRegistered, StoreError, StoreUnavailable
from reelvote.core.logging_config import get_logger
from reelvote.schemas import ReelStats, ReelWithStats, VoteRead, VoteUpsert, merge_reel_stats
from reelvote.schemas.events import EventType, VoteEvent
from reelvote.schemas.vote import VoterType

logger = get_logger(__name__)


class VoteLedger:
    """
    One vote per (reel, voter), cached locally under ``reel_id:voter_id``.

    Preconditions (no store, no voter id) raise. Store failures on the write
    path are logged and answered with None; read paths degrade to "not voted"
    or all-zero stats.
    """

    def __init__(
        self,
        store: Optional[HttpStore],
        devices: DeviceManager,
        catalog: ReelCatalog,
        channel: Optional[RealtimeChannel] = None,
    ):
        self.store = store
        self.devices = devices
        self.catalog = catalog
        self.channel = channel
        self._cache = TTLCache(max_size=1000)
        self._listeners: List[Callable[[], Any]] = []

    def on_change(self, listener: Callable[[], Any]) -> None:
        """Called after this voter's votes change (a saved vote or a clear)."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    @staticmethod
    def _key(reel_id: str, voter_id: str) -> str:
        return f"{reel_id}:{voter_id}"

    async def save_vote(
        self,
        reel_id: str,
        score: int,
        voter_type: VoterType = "audience",
        voter_name: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Optional[VoteRead]:
        """
        Record this voter's score for ``reel_id``; re-voting overwrites.

        On success the score is cached and a ``vote`` event is broadcast
        without waiting for delivery.

        Raises:
            StoreUnavailable: no store is configured
            NotRegistered: this device has no voter id yet
        """
        if self.store is None:
            raise StoreUnavailable()
        voter_id = self.devices.get_voter_id()
        if not voter_id:
            raise NotRegistered()

        vote = VoteUpsert(
            reel_id=reel_id,
            voter_id=voter_id,
            score=score,
            voter_type=voter_type,
            voter_name=voter_name,
            category=category,
        )
        try:
            row = await self.store.upsert_vote(vote)
        except StoreError as e:
            logger.error("vote_save_failed", reel_id=reel_id, voter_id=voter_id, error=e.message)
            return None

        self._cache.set(self._key(reel_id, voter_id), row.score)
        if self.channel is not None:
            self.channel.broadcast(
                EventType.VOTE,
                VoteEvent(reel_id=reel_id, score=row.score, voter_type=voter_type, voter_id=voter_id),
            )
        self._notify()
        return row

    async def get_my_vote(self, reel_id: str) -> Optional[int]:
        """This voter's score for ``reel_id``, or None if not voted."""
        voter_id = self.devices.get_voter_id()
        if not voter_id:
            return None

        key = self._key(reel_id, voter_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if self.store is None:
            return None
        try:
            row = await self.store.get_vote(reel_id, voter_id)
        except StoreError as e:
            logger.error("vote_lookup_failed", reel_id=reel_id, error=e.message)
            return None

        if row is None:
            return None
        self._cache.set(key, row.score)
        return row.score

    async def has_voted(self, reel_id: str) -> bool:
        return await self.get_my_vote(reel_id) is not None

    async def get_reel_stats(self, reel_id: str) -> ReelStats:
        if self.store is None:
            return ReelStats()
        try:
            aggregate = await self.store.get_aggregate(reel_id)
        except StoreError as e:
            logger.error("reel_stats_failed", reel_id=reel_id, error=e.message)
            return ReelStats()
        return ReelStats.from_aggregate(aggregate)

    async def get_all_stats(self, category: Optional[str] = None) -> List[ReelWithStats]:
        """Catalog reels with their stats, best final score first."""
        if self.store is None:
            return []
        try:
            aggregates = await self.store.list_aggregates()
        except StoreError as e:
            logger.error("all_stats_failed", error=e.message)
            return []
        return merge_reel_stats(self.catalog.reels, aggregates, category)

    async def clear_all(self) -> int:
        """
        Delete every vote and aggregate. Needs an admin session on the store.

        Raises:
            StoreUnavailable: no store is configured
            StoreError: the service refused (e.g. not logged in as admin)
        """
        if self.store is None:
            raise StoreUnavailable()
        deleted = await self.store.clear_votes()
        self._cache.clear()
        self._notify()
        logger.warning("votes_cleared", deleted=deleted)
        return deleted
