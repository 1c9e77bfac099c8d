from .hub import BroadcastHub, Connection, realtime_hub

__all__ = ["BroadcastHub", "Connection", "realtime_hub"]
