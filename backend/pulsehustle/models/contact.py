from sqlalchemy import Column, String, Text, DateTime
from pulsehustle.database import Base, utcnow
import uuid


class ContactMessage(Base):
    """Contact form submission; status queued → processed / failed."""

    __tablename__ = "contact_messages"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), nullable=False)
    name = Column(String(200), nullable=False, default="")
    message = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="queued", index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    processed_at = Column(DateTime, nullable=True)
