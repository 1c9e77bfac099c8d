"""Reel reference data held by a client."""
from typing import Iterable, Iterator, List, Optional

from reelvote.client.store import HttpStore
from reelvote.core.errors import StoreError
from reelvote.core.logging_config import get_logger
from reelvote.schemas import Reel

logger = get_logger(__name__)


class ReelCatalog:
    """
    Ordered reel list with derived categories.

    Either loaded from the store or built from a static dataset with
    ``from_records``; both produce the same object.
    """

    def __init__(self, reels: Iterable[Reel] = ()):
        self._reels: List[Reel] = []
        self.replace(reels)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "ReelCatalog":
        return cls(Reel.model_validate(record) for record in records)

    async def load(self, store: HttpStore) -> int:
        """Replace the contents with the store's active reels; keeps them on failure."""
        try:
            reels = await store.list_reels()
        except StoreError as e:
            logger.error("reel_catalog_load_failed", error=e.message)
            return len(self._reels)
        self.replace(reels)
        logger.info("reel_catalog_loaded", reels=len(self._reels), categories=len(self.categories))
        return len(self._reels)

    def replace(self, reels: Iterable[Reel]) -> None:
        self._reels = list(reels)
        self.categories: List[str] = []
        for reel in self._reels:
            if reel.category not in self.categories:
                self.categories.append(reel.category)

    @property
    def reels(self) -> List[Reel]:
        return list(self._reels)

    def find(self, reel_id: str) -> Optional[Reel]:
        for reel in self._reels:
            if reel.id == reel_id:
                return reel
        return None

    def first(self) -> Optional[Reel]:
        return self._reels[0] if self._reels else None

    def in_category(self, category: Optional[str]) -> List[Reel]:
        if category is None:
            return self.reels
        return [reel for reel in self._reels if reel.category == category]

    def __len__(self) -> int:
        return len(self._reels)

    def __iter__(self) -> Iterator[Reel]:
        return iter(list(self._reels))
