"""Client core: identity, access control, realtime sync and the vote ledger."""
from reelvote.client.access import ExternalIdentity, IdentityAuthManager, TokenAuthManager
from reelvote.client.catalog import ReelCatalog
from reelvote.client.channel import RealtimeChannel
from reelvote.client.context import AppContext
from reelvote.client.history import HistoryEntry, HistorySummary, VoteHistory
from reelvote.client.identity import DeviceManager, detect_device_type, detect_page_role
from reelvote.client.ledger import VoteLedger
from reelvote.client.reconciler import LiveStateReconciler, SyncPhase
from reelvote.client.storage import JsonFileStorage, LocalStorage, MemoryStorage
from reelvote.client.store import HttpStore
from reelvote.client.transport import LocalTransport, Transport, WebSocketTransport

__all__ = [
    "AppContext",
    "DeviceManager",
    "ExternalIdentity",
    "HistoryEntry",
    "HistorySummary",
    "HttpStore",
    "IdentityAuthManager",
    "JsonFileStorage",
    "LiveStateReconciler",
    "LocalStorage",
    "LocalTransport",
    "MemoryStorage",
    "RealtimeChannel",
    "ReelCatalog",
    "SyncPhase",
    "TokenAuthManager",
    "Transport",
    "VoteHistory",
    "VoteLedger",
    "WebSocketTransport",
    "detect_device_type",
    "detect_page_role",
]
