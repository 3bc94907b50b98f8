"""fanout"""

from .subscriber_fanout import SubscriberFanout, iter_events

__all__ = [
    "SubscriberFanout",
    "iter_events",
]
