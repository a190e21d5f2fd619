# goaltracker/models/user.py
# Accounts live with the identity provider; this table only holds the
# denormalized profile document created on first sign-in.
from sqlalchemy import Column, String, DateTime
from goaltracker.core.database import Base
from goaltracker.models.goal import utcnow


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(String(128), primary_key=True)  # provider uid
    display_name = Column(String, nullable=False, default="")
    email = Column(String, nullable=True, index=True)
    photo_url = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<UserProfile id={self.id} email={self.email}>"
