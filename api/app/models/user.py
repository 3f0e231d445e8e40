"""
User model.
"""
from sqlmodel import SQLModel, Field
from datetime import datetime
import hashlib
import uuid

from app.utils.time_utils import utc_now, utc_timestamp_column


class User(SQLModel, table=True):
    """User table - account owning flashcards and sessions."""
    __tablename__ = "user"
    
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password: str  # Hashed password
    created_at: datetime = Field(default_factory=utc_now, sa_column=utc_timestamp_column())
    
    @staticmethod
    def hash_password(password: str) -> str:
        """Simple password hashing using SHA256."""
        return hashlib.sha256(password.encode()).hexdigest()
    
    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return self.password == self.hash_password(password)
