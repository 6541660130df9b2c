import uuid

from sqlalchemy import Column, DateTime, String, text

from app.models.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(128), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(128), nullable=False)

    created_at = Column(DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP"))
