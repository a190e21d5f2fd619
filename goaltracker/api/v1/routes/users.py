# goaltracker/api/v1/routes/users.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from goaltracker.api.deps import get_app_session, get_current_user
from goaltracker.schemas.user import UserRead
from goaltracker.services.session import AppSession
from goaltracker.utils.helpers import get_display_name, get_initials

router = APIRouter(tags=["User Management"])

@router.get("/me/profile")
async def read_own_profile(
    user: UserRead = Depends(get_current_user),
    session: AppSession = Depends(get_app_session),
) -> Dict[str, Any]:
    """Stored profile document plus the header display fields"""
    profile = await session.auth_gateway.get_user_document(user.id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )

    return {
        "profile": UserRead.model_validate(profile),
        "display_name": get_display_name(profile.display_name, profile.email),
        "initials": get_initials(profile.display_name, profile.email),
    }
