# goaltracker/api/v1/routes/google_auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from urllib.parse import urlencode

from goaltracker.api.deps import get_auth_state
from goaltracker.core.config import settings
from goaltracker.core.google_auth import get_authorization_url
from goaltracker.schemas.user import GoogleAuthRequest, GoogleAuthResponse
from goaltracker.services.auth_state import AuthState

router = APIRouter(tags=["Google Authentication"])
logger = logging.getLogger(__name__)

@router.post("/login", response_model=GoogleAuthResponse)
async def google_login(
    request: GoogleAuthRequest,
    request_obj: Request
):
    """
    Initiate Google OAuth login flow
    """
    try:
        auth_url, state = get_authorization_url(request.redirect_uri)
    except Exception as e:
        logger.error(f"Failed to initiate Google login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to initiate Google login"
        )

    # Store state in session for verification during callback
    request_obj.session["oauth_state"] = state
    request_obj.session["oauth_redirect_uri"] = request.redirect_uri

    return {"authorization_url": auth_url}

@router.get("/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    auth: AuthState = Depends(get_auth_state),
):
    """
    Handle Google OAuth callback and sign in with the Google identity
    """
    if error:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Google OAuth error: {error}"
        )
    if not code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing authorization code"
        )

    expected_state = request.session.pop("oauth_state", None)
    if expected_state is None or state != expected_state:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid OAuth state"
        )
    redirect_uri = request.session.pop("oauth_redirect_uri", None)

    result = await auth.sign_in_with_google(code, redirect_uri, state=state)
    if not result.success:
        query = urlencode({"error": result.error})
        return RedirectResponse(url=f"{settings.FRONTEND_URL}/auth/google-callback?{query}")

    query = urlencode({"user_id": result.user.id, "email": result.user.email or ""})
    return RedirectResponse(url=f"{settings.FRONTEND_URL}/auth/google-callback?{query}")
