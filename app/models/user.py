from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class User(Base):
    __tablename__ = "users"

    # Primary key: the auth provider's subject id
    id = Column(String(64), primary_key=True, index=True)

    # Profile information
    username = Column(String(50), unique=True, nullable=True, index=True)
    display_name = Column(String(100), nullable=True)
    avatar_url = Column(Text, nullable=True)

    # Account status
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @property
    def name(self) -> str:
        """Display name with username fallback"""
        return self.display_name or self.username or "Anonymous"

    def __repr__(self):
        return f"<User(id='{self.id}', username='{self.username}')>"
