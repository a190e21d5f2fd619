# goaltracker/api/deps.py
from fastapi import Depends, HTTPException, Request, status

from goaltracker.schemas.user import UserRead
from goaltracker.services.auth_state import AuthState
from goaltracker.services.goals_state import GoalsState
from goaltracker.services.session import AppSession


def get_app_session(request: Request) -> AppSession:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application session is not ready",
        )
    return session


def get_auth_state(session: AppSession = Depends(get_app_session)) -> AuthState:
    return session.auth


def get_goals_state(session: AppSession = Depends(get_app_session)) -> GoalsState:
    return session.goals


def get_current_user(auth: AuthState = Depends(get_auth_state)) -> UserRead:
    """
    Dependency to get the signed-in user.
    Raises 401 if nobody is signed in.
    """
    if auth.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return auth.user
