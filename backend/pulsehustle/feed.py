"""
Change Feed - in-process realtime change notifications

The persistence gateway publishes one ``ChangeEvent`` per inserted, updated
or deleted row once the surrounding transaction has committed. Subscribers
register per table, optionally narrowed to one event type and to rows where
a column equals a value (the equivalent of ``user_id=eq.<id>`` filters on a
hosted change feed).

Callbacks may be plain functions or coroutines. A callback that raises is
logged and skipped; it never prevents delivery to other subscribers.
"""

import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from pulsehustle.database import utcnow

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
ANY_EVENT = "*"


@dataclass
class ChangeEvent:
    table: str
    type: str
    new: Optional[Dict[str, Any]] = None
    old: Optional[Dict[str, Any]] = None
    committed_at: datetime = field(default_factory=utcnow)

    @property
    def record(self) -> Dict[str, Any]:
        """The row the event is about (new values, or old values for deletes)."""
        return self.new if self.new is not None else (self.old or {})


class Subscription:
    """Handle returned by ``ChangeFeed.subscribe``."""

    def __init__(
        self,
        feed: "ChangeFeed",
        table: str,
        callback: Callable[[ChangeEvent], Any],
        event: str = ANY_EVENT,
        column_filter: Optional[Tuple[str, Any]] = None,
    ):
        self.feed = feed
        self.table = table
        self.callback = callback
        self.event = event
        self.column_filter = column_filter
        self.active = True

    def matches(self, change: ChangeEvent) -> bool:
        if not self.active or change.table != self.table:
            return False
        if self.event != ANY_EVENT and change.type != self.event:
            return False
        if self.column_filter is not None:
            column, value = self.column_filter
            return change.record.get(column) == value
        return True

    def unsubscribe(self) -> None:
        self.active = False
        self.feed.remove(self)


class ChangeFeed:
    def __init__(self):
        self._subscriptions: List[Subscription] = []

    def subscribe(
        self,
        table: str,
        callback: Callable[[ChangeEvent], Any],
        *,
        event: str = ANY_EVENT,
        filter: Optional[Tuple[str, Any]] = None,
    ) -> Subscription:
        subscription = Subscription(self, table, callback, event=event, column_filter=filter)
        self._subscriptions.append(subscription)
        return subscription

    def remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    async def publish(self, change: ChangeEvent) -> int:
        """
        Deliver a change to every matching subscriber.

        Returns:
            Number of callbacks that completed without raising
        """
        delivered = 0
        for subscription in list(self._subscriptions):
            if not subscription.matches(change):
                continue
            try:
                result = subscription.callback(change)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:
                logger.exception(f"Change feed callback failed for {change.table} {change.type}")
        return delivered
