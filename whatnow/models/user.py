from sqlalchemy import Column
from sqlmodel import SQLModel, Field
from datetime import datetime

from whatnow.core.clock import utcnow
from whatnow.models.types import UTCDateTime


class User(SQLModel, table=True):
    # same value as the "sub" claim issued by the auth service
    user_id: str = Field(primary_key=True, max_length=64)
    email: str = Field(index=True, unique=True)
    has_paid: bool = False
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(UTCDateTime(), nullable=False))
    __tablename__ = "user"
