"""
Contact Service - contact form queue

Messages are stored ``queued`` and worked off by an admin, who marks each
one ``processed``. Nothing is emailed from here.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import select

from pulsehustle.database import utcnow
from pulsehustle.errors import NotFoundError, ValidationError
from pulsehustle.models import ContactMessage

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, gateway, operations):
        self.gateway = gateway
        self.operations = operations

    async def queue_contact_message(self, data: Dict[str, Any]) -> ContactMessage:
        email = (data.get("email") or "").strip()
        if not email:
            raise ValidationError("Email is required")

        await self.operations.log("queue_contact", "contact_messages", {"email": email})

        return await self.gateway.insert(
            ContactMessage,
            email=email,
            name=data.get("name") or "",
            message=data.get("message") or "",
            status="queued",
        )

    async def get_unprocessed_messages(self) -> List[ContactMessage]:
        """Queued messages, oldest first."""
        await self.operations.log("get_messages", "contact_messages", {})

        return await self.gateway.all(
            select(ContactMessage)
            .where(ContactMessage.status == "queued")
            .order_by(ContactMessage.created_at.asc())
        )

    async def mark_message_processed(self, message_id: str) -> ContactMessage:
        await self.operations.log("mark_processed", "contact_messages", {"message_id": message_id})

        message = await self.gateway.update(
            ContactMessage, message_id, status="processed", processed_at=utcnow()
        )
        if not message:
            raise NotFoundError(f"Contact message with ID {message_id} not found")
        return message
