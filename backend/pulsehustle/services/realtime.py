"""
Realtime Notification Relay

Thin layer over the change feed that wires per-user callbacks:

    initialize_user_subscriptions(user_id, on_gig_update, on_new_match, on_payment_update)
        gigs            any change to rows with user_id = <user>
        ai_matching_jobs INSERT for a gig owned by <user>
        payments        any change to rows with user_id = <user>
    subscribe_to_stats(callback)      stats UPDATEs, callback gets the new row
    broadcast_admin_notification()    fan-out to subscribe_admin() listeners

Events are delivered only after the writing transaction committed.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from pulsehustle.feed import ANY_EVENT, INSERT, UPDATE, ChangeEvent, Subscription
from pulsehustle.models import Gig

logger = logging.getLogger(__name__)

ADMIN_CHANNEL = "admin_notifications"
BROADCAST = "BROADCAST"


async def _call(callback: Callable, *args: Any) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


@dataclass
class UserSubscriptions:
    gig_subscription: Subscription
    match_subscription: Subscription
    payment_subscription: Subscription

    def unsubscribe_all(self) -> None:
        self.gig_subscription.unsubscribe()
        self.match_subscription.unsubscribe()
        self.payment_subscription.unsubscribe()


class RealtimeRelay:
    def __init__(self, gateway, operations):
        self.gateway = gateway
        self.operations = operations
        self.feed = gateway.feed

    async def initialize_user_subscriptions(
        self,
        user_id: str,
        on_gig_update: Optional[Callable[[ChangeEvent], Any]] = None,
        on_new_match: Optional[Callable[[ChangeEvent], Any]] = None,
        on_payment_update: Optional[Callable[[ChangeEvent], Any]] = None,
    ) -> UserSubscriptions:
        await self.operations.log("init_realtime", "subscriptions", {"user_id": user_id}, user_id=user_id)

        async def gig_changed(change: ChangeEvent) -> None:
            if on_gig_update:
                await _call(on_gig_update, change)

        async def job_created(change: ChangeEvent) -> None:
            gig = await self.gateway.get(Gig, change.record.get("gig_id"))
            if gig and gig.user_id == user_id and on_new_match:
                await _call(on_new_match, change)

        async def payment_changed(change: ChangeEvent) -> None:
            if on_payment_update:
                await _call(on_payment_update, change)

        return UserSubscriptions(
            gig_subscription=self.feed.subscribe("gigs", gig_changed, filter=("user_id", user_id)),
            match_subscription=self.feed.subscribe("ai_matching_jobs", job_created, event=INSERT),
            payment_subscription=self.feed.subscribe("payments", payment_changed, filter=("user_id", user_id)),
        )

    def subscribe_to_stats(self, callback: Callable[[Dict[str, Any]], Any]) -> Subscription:
        async def stats_changed(change: ChangeEvent) -> None:
            await _call(callback, change.new)

        return self.feed.subscribe("stats", stats_changed, event=UPDATE)

    def subscribe_admin(self, callback: Callable[[str, Dict[str, Any]], Any]) -> Subscription:
        """Listen for admin broadcasts; callback gets (event, payload)."""
        async def broadcast_received(change: ChangeEvent) -> None:
            await _call(callback, change.new["event"], change.new["payload"])

        return self.feed.subscribe(ADMIN_CHANNEL, broadcast_received, event=ANY_EVENT)

    async def broadcast_admin_notification(self, event: str, payload: Optional[Dict[str, Any]] = None) -> int:
        """Returns the number of admin listeners that received the broadcast."""
        await self.operations.log("broadcast", ADMIN_CHANNEL, {"event": event})

        delivered = await self.feed.publish(
            ChangeEvent(ADMIN_CHANNEL, BROADCAST, new={"event": event, "payload": payload or {}})
        )
        logger.info(f"Admin broadcast {event} delivered to {delivered} listener(s)")
        return delivered
