"""Application context: builds and owns every client component."""
from typing import Any, Callable, Iterable, List, Optional

from reelvote.client.access import IdentityAuthManager, TokenAuthManager
from reelvote.client.catalog import ReelCatalog
from reelvote.client.channel import RealtimeChannel
from reelvote.client.history import VoteHistory
from reelvote.client.identity import DeviceManager, detect_page_role
from reelvote.client.ledger import VoteLedger
from reelvote.client.reconciler import LiveStateReconciler
from reelvote.client.storage import JsonFileStorage, LocalStorage
from reelvote.client.store import HttpStore
from reelvote.client.transport import Transport, WebSocketTransport
from reelvote.core.config import Settings
from reelvote.core.logging_config import get_logger
from reelvote.schemas import Reel
from reelvote.schemas.events import LiveState, PageRole

logger = get_logger(__name__)


class AppContext:
    """
    One client session: identity, access control, channel, reconciler,
    ledger, catalog and history, wired once and handed out explicitly.

    ``store`` and ``transport`` are optional so a client can run with a
    static catalog and no network; the accessors then answer None / empty
    rather than raising.
    """

    def __init__(
        self,
        storage: LocalStorage,
        store: Optional[HttpStore] = None,
        transport: Optional[Transport] = None,
        page_role: PageRole = PageRole.AUDIENCE,
        user_agent: str = "",
        reels: Optional[Iterable[Reel]] = None,
        state_request_delay: float = 0.5,
        token_lookup_timeout: float = 8.0,
    ):
        self.storage = storage
        self.store = store
        self.page_role = page_role
        self._static_catalog = reels is not None

        self.devices = DeviceManager(storage, user_agent=user_agent)
        self.catalog = ReelCatalog(reels or [])

        self.channel: Optional[RealtimeChannel] = None
        self.reconciler: Optional[LiveStateReconciler] = None
        if transport is not None:
            self.channel = RealtimeChannel(transport, self.devices.device_id, page_role)
            self.reconciler = LiveStateReconciler(
                self.channel,
                page_role,
                requester_id=self.devices.device_id,
                state_request_delay=state_request_delay,
            )

        self.tokens = TokenAuthManager(self.devices, storage, store, lookup_timeout=token_lookup_timeout)
        self.identity = IdentityAuthManager(self.devices, storage, store)
        self.ledger = VoteLedger(store, self.devices, self.catalog, self.channel)
        self.history = VoteHistory(self.ledger, self.catalog.reels)
        self.ledger.on_change(self.history.invalidate)
        if self.reconciler is not None:
            self.history.set_current_reel(self.reconciler.state.reel_id)
            self.reconciler.on_change(lambda state: self.history.set_current_reel(state.reel_id))

        self.ready = False
        self._ready_listeners: List[Callable[["AppContext"], Any]] = []

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        page_path: str = "/",
        user_agent: str = "",
    ) -> "AppContext":
        """Networked client using the configured service URLs and storage file."""
        return cls(
            storage=JsonFileStorage(settings.CLIENT_STORAGE_PATH),
            store=HttpStore(settings.API_BASE_URL),
            transport=WebSocketTransport(settings.REALTIME_URL, reconnect_delay=settings.RECONNECT_DELAY),
            page_role=detect_page_role(page_path),
            user_agent=user_agent,
            state_request_delay=settings.STATE_REQUEST_DELAY,
            token_lookup_timeout=settings.TOKEN_LOOKUP_TIMEOUT,
        )

    def on_ready(self, listener: Callable[["AppContext"], Any]) -> None:
        self._ready_listeners.append(listener)

    async def start(self) -> None:
        """
        Connect and bootstrap.

        Order: join the channel, register this device, restore a saved token
        session, load reels (unless a static dataset was supplied), then mark
        the context ready.
        """
        if self.channel is not None:
            await self.channel.connect()

        if self.store is not None:
            await self.devices.register(self.store)
            await self.tokens.restore_session()
            if not self._static_catalog:
                await self.catalog.load(self.store)
                self.history.set_reels(self.catalog.reels)

        self.ready = True
        logger.info(
            "client_ready",
            device_id=self.devices.device_id,
            page_role=self.page_role.value,
            reels=len(self.catalog),
            categories=len(self.catalog.categories),
        )
        for listener in list(self._ready_listeners):
            listener(self)

    async def close(self) -> None:
        if self.reconciler is not None:
            self.reconciler.close()
        if self.channel is not None:
            await self.channel.close()
        if self.store is not None:
            await self.store.aclose()

    # Optional accessors

    @property
    def voter_id(self) -> Optional[str]:
        return self.devices.get_voter_id()

    @property
    def live_state(self) -> Optional[LiveState]:
        return self.reconciler.state if self.reconciler is not None else None

    @property
    def connected_devices(self) -> Optional[int]:
        return self.channel.connected_devices if self.channel is not None else None

    def current_reel(self) -> Optional[Reel]:
        if self.reconciler is None:
            return self.catalog.first()
        return self.reconciler.current_reel(self.catalog)

    def find_reel(self, reel_id: str) -> Optional[Reel]:
        return self.catalog.find(reel_id)
