# goaltracker/crud/user.py
from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from goaltracker.models.user import UserProfile
from goaltracker.schemas.user import IdentityUser

async def get_user_profile(uid: str, db: AsyncSession) -> Optional[UserProfile]:
    result = await db.execute(select(UserProfile).where(UserProfile.id == uid))
    return result.scalar_one_or_none()

async def create_user_profile_if_absent(
    user: IdentityUser,
    db: AsyncSession,
    display_name: Optional[str] = None,
) -> Tuple[UserProfile, bool]:
    """Create the profile document on first sign-in. An existing profile is returned untouched."""
    existing = await get_user_profile(user.uid, db)
    if existing is not None:
        return existing, False

    profile = UserProfile(
        id=user.uid,
        display_name=user.display_name or display_name or "",
        email=user.email,
        photo_url=user.photo_url or "",
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile, True
