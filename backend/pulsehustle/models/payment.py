"""
Payment Model - recorded payment attempts

Payments are written by the payment service only. A "pending" payment
created for a redirect checkout is never reconciled automatically.
"""

from sqlalchemy import Column, String, Float, Text, DateTime, JSON
from pulsehustle.database import Base, utcnow
import uuid


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    amount = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, index=True)
    payment_method = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    user_id = Column(String, nullable=True, index=True)
    # "metadata" is reserved on declarative classes
    payment_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
