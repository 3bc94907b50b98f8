"""Kinds of events pushed to subscribers."""

from enum import Enum


class BroadcastKind(str, Enum):
    """Broadcast event kinds; values double as the websocket ``action`` names."""

    ARTIFACT_CHANGED = "update-content"

    LISTING_CHANGED = "update-sidebar"

    EXIT = "exit"
