from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.sql import func

from app.database.database import Base


class User(Base):
    """
    Users table. Ids are opaque strings issued by the identity provider.
    """
    __tablename__ = "users"

    id = Column(String(128), primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    is_active = Column(Boolean, default=True)

    @property
    def display_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or "Someone"
