"""
Audit and Error Models

Both tables are append-only instrumentation: rows are written as a side
effect of service calls and never read back by the services themselves.
"""

from sqlalchemy import Column, String, Text, DateTime, JSON
from pulsehustle.database import Base, utcnow
import uuid


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    operation = Column(String(100), nullable=False)
    table_name = Column(String(100), nullable=False)
    details = Column(JSON, nullable=False, default=dict)
    user_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class ErrorRecord(Base):
    __tablename__ = "errors"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    message = Column(Text, nullable=False)
    stack = Column(Text, nullable=True)
    context = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=utcnow)
