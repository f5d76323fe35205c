from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import List
from uuid import uuid4

from ..timeutils import utcnow
from .project import ProjectMember


class User(SQLModel, table=True):
    """User account; owns projects and joins others as a member."""
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    projects: List["Project"] = Relationship(back_populates="members", link_model=ProjectMember)
    subscriptions: List["PushSubscription"] = Relationship(back_populates="user")
