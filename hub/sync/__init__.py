from __future__ import annotations

from .coordinator import Renderer, SyncCoordinator
from .room_watcher import RoomSubscriptionManager
from .round_watcher import RoundSubscriptionManager
from .subscription import Subscription, SubscriptionSlot

__all__ = [
    "Renderer",
    "SyncCoordinator",
    "RoomSubscriptionManager",
    "RoundSubscriptionManager",
    "Subscription",
    "SubscriptionSlot",
]
