"""
Authentication Models
Maps to the users table
"""
from sqlalchemy import Column, String, Boolean, Integer, DateTime
from sqlalchemy.sql import func

from medstock.core.database import Base


class User(Base):
    """System users"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(30), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    last_login = Column(DateTime(timezone=True))

    def __repr__(self):
        return f"<User(username='{self.username}')>"
