# goaltracker/models/goal.py
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Boolean, Index
from goaltracker.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Goal(Base):
    __tablename__ = "goals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Owner uid from the identity provider; immutable
    user_id = Column(String(128), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False, default="")
    priority = Column(String(10), nullable=False, default="medium")
    completed = Column(Boolean, nullable=False, default=False)
    goal_type = Column(String(10), nullable=False, default="custom")
    due_date = Column(DateTime(timezone=True), nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_type = Column(String(10), nullable=True)

    # Server-assigned timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_goals_user_id_created_at", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<Goal title={self.title!r} priority={self.priority} completed={self.completed} user_id={self.user_id}>"
