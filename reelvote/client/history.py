"""Per-client voting history up to the current reel."""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from reelvote.client.ledger import VoteLedger
from reelvote.schemas import Reel


@dataclass
class HistoryEntry:
    reel: Reel
    score: Optional[int]
    is_current: bool

    @property
    def voted(self) -> bool:
        return self.score is not None


@dataclass
class HistorySummary:
    entries: List[HistoryEntry]
    voted_count: int
    missed_count: int


class VoteHistory:
    """
    Which reels this voter scored, up to and including the current one.

    Results are cached until the current reel changes or ``invalidate`` is
    called. Only reels before the current one can count as missed; when the
    current reel is unknown nothing is visible or missed.
    """

    def __init__(self, ledger: VoteLedger, reels: Sequence[Reel]):
        self.ledger = ledger
        self.reels = list(reels)
        self.current_reel_id: Optional[str] = None
        self._cached: Optional[List[HistoryEntry]] = None

    def set_reels(self, reels: Sequence[Reel]) -> None:
        self.reels = list(reels)
        self._cached = None

    def set_current_reel(self, reel_id: Optional[str]) -> None:
        if reel_id != self.current_reel_id:
            self._cached = None
        self.current_reel_id = reel_id

    def invalidate(self) -> None:
        self._cached = None

    def _current_index(self) -> int:
        for index, reel in enumerate(self.reels):
            if reel.id == self.current_reel_id:
                return index
        return -1

    async def fetch(self) -> List[HistoryEntry]:
        if self._cached is not None:
            return self._cached

        current_index = self._current_index()
        reels = self.reels[: current_index + 1] if current_index >= 0 else self.reels
        history = []
        for reel in reels:
            history.append(
                HistoryEntry(
                    reel=reel,
                    score=await self.ledger.get_my_vote(reel.id),
                    is_current=reel.id == self.current_reel_id,
                )
            )
        self._cached = history
        return history

    async def summary(self) -> HistorySummary:
        history = await self.fetch()
        voted_count = sum(1 for entry in history if entry.voted)

        current_index = next((i for i, entry in enumerate(history) if entry.is_current), -1)
        if current_index < 0:
            return HistorySummary(entries=[], voted_count=voted_count, missed_count=0)

        missed_count = sum(1 for entry in history[:current_index] if not entry.voted)
        return HistorySummary(
            entries=history[: current_index + 1],
            voted_count=voted_count,
            missed_count=missed_count,
        )
