from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

from ..utils import new_object_id, utcnow


class User(SQLModel, table=True):
    """Registered account; its ``id`` is the subject placed in access tokens."""
    __tablename__ = "users"

    id: str = Field(default_factory=new_object_id, primary_key=True, max_length=24)
    name: str
    email: str = Field(unique=True, index=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
