# goaltracker/schemas/user.py
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr


class IdentityUser(BaseModel):
    """Signed-in identity as returned by the identity provider."""
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None


class UserRead(BaseModel):
    id: str
    display_name: str = ""
    email: Optional[str] = None
    photo_url: str = ""
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str
    display_name: Optional[str] = None


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class AuthResponse(BaseModel):
    success: bool
    user: Optional[UserRead] = None
    error: Optional[str] = None


class GoogleAuthRequest(BaseModel):
    redirect_uri: Optional[str] = None


class GoogleAuthResponse(BaseModel):
    authorization_url: str
