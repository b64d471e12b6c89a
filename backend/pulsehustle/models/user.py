from sqlalchemy import Column, String, DateTime, JSON
from pulsehustle.database import Base, utcnow
import uuid


class User(Base):
    """Auth identity. Passwords are stored as bcrypt hashes only."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(200), nullable=False)
    user_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_sign_in_at = Column(DateTime, nullable=True)
