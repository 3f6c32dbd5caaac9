"""
nspass.collection - Collection state orchestration and notifications.
"""

from nspass.collection.notifications import (
    Notification,
    NotificationCenter,
    NotificationLevel,
)
from nspass.collection.orchestrator import CollectionOrchestrator
from nspass.collection.state import CancelToken, CollectionState, reduce

__all__ = [
    "CancelToken",
    "CollectionOrchestrator",
    "CollectionState",
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
    "reduce",
]
