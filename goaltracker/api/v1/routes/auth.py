# goaltracker/api/v1/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status

from goaltracker.api.deps import get_auth_state, get_current_user
from goaltracker.schemas.user import (
    AuthResponse,
    PasswordResetRequest,
    SignInRequest,
    SignUpRequest,
    UserRead,
)
from goaltracker.services.auth_state import AuthState

router = APIRouter(tags=["Authentication"])


def _raise_on_error(result: AuthResponse) -> AuthResponse:
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)
    return result


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(request: SignUpRequest, auth: AuthState = Depends(get_auth_state)):
    """Create an account with email and password and sign in."""
    result = await auth.sign_up(request.email, request.password, request.display_name)
    return _raise_on_error(result)


@router.post("/signin", response_model=AuthResponse)
async def sign_in(request: SignInRequest, auth: AuthState = Depends(get_auth_state)):
    result = await auth.sign_in(request.email, request.password)
    return _raise_on_error(result)


@router.post("/signout", response_model=AuthResponse)
async def sign_out(auth: AuthState = Depends(get_auth_state)):
    """Drop the current identity. Works when nobody is signed in."""
    result = await auth.sign_out()
    return _raise_on_error(result)


@router.post("/reset-password", response_model=AuthResponse)
async def reset_password(request: PasswordResetRequest, auth: AuthState = Depends(get_auth_state)):
    result = await auth.reset_password(request.email)
    return _raise_on_error(result)


@router.get("/me", response_model=UserRead)
async def read_current_user(user: UserRead = Depends(get_current_user)):
    return user
