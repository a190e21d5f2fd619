# goaltracker/services/auth.py
"""
Authentication gateway.

Wraps the identity provider and turns every outcome into an ``AuthResult``:
either a user or a human-readable error, never a provider exception.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from goaltracker.core import google_auth
from goaltracker.core.database import AsyncSessionLocal
from goaltracker.core.errors import IdentityProviderError
from goaltracker.core.identity import IdentityClient
from goaltracker.crud import user as crud_user
from goaltracker.models.user import UserProfile
from goaltracker.schemas.user import IdentityUser

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password. Please check your credentials and try again."

AUTH_ERROR_MESSAGES = {
    "auth/invalid-credential": INVALID_CREDENTIALS_MESSAGE,
    "auth/user-not-found": INVALID_CREDENTIALS_MESSAGE,
    "auth/wrong-password": INVALID_CREDENTIALS_MESSAGE,
    "auth/email-already-in-use": "This email is already registered. Try signing in instead.",
    "auth/weak-password": "Password should be at least 6 characters long.",
    "auth/invalid-email": "Please enter a valid email address.",
    "auth/user-disabled": "This account has been disabled. Please contact support.",
    "auth/too-many-requests": "Too many failed attempts. Please try again later.",
}


def translate_auth_error(code: str, message: str) -> str:
    return AUTH_ERROR_MESSAGES.get(code, f"Authentication failed: {message}")


@dataclass
class AuthResult:
    user: Optional[IdentityUser] = None
    error: Optional[str] = None


class AuthGateway:
    def __init__(
        self,
        identity: IdentityClient,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
    ):
        self.identity = identity
        self._session_factory = session_factory

    def _failure(self, action: str, error: IdentityProviderError) -> AuthResult:
        logger.error(f"{action} error: {error.code} {error.message}")
        return AuthResult(user=None, error=translate_auth_error(error.code, error.message))

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> AuthResult:
        try:
            user = await self.identity.create_account(email, password)
            if display_name:
                user = await self.identity.update_profile(display_name=display_name)
        except IdentityProviderError as e:
            return self._failure("Sign up", e)

        await self.create_user_document(user, display_name=display_name)
        return AuthResult(user=user)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            user = await self.identity.authenticate(email, password)
        except IdentityProviderError as e:
            return self._failure("Sign in", e)
        return AuthResult(user=user)

    async def sign_in_with_google(
        self,
        code: str,
        redirect_uri: Optional[str] = None,
        state: Optional[str] = None,
    ) -> AuthResult:
        try:
            id_token = await google_auth.exchange_code_for_id_token(code, redirect_uri, state=state)
        except Exception as e:
            logger.error(f"Google sign in error: {str(e)}")
            return AuthResult(user=None, error=translate_auth_error("auth/google-exchange-failed", str(e)))

        try:
            user = await self.identity.authenticate_federated(id_token, request_uri=redirect_uri)
        except IdentityProviderError as e:
            return self._failure("Google sign in", e)

        await self.create_user_document(user)
        return AuthResult(user=user)

    async def sign_out(self) -> AuthResult:
        try:
            await self.identity.sign_out()
        except IdentityProviderError as e:
            return self._failure("Sign out", e)
        return AuthResult()

    async def reset_password(self, email: str) -> AuthResult:
        try:
            await self.identity.send_password_reset(email)
        except IdentityProviderError as e:
            return self._failure("Password reset", e)
        return AuthResult()

    async def create_user_document(
        self,
        user: Optional[IdentityUser],
        display_name: Optional[str] = None,
    ) -> Optional[UserProfile]:
        """Create the profile document if it doesn't exist yet."""
        if user is None:
            return None
        try:
            async with self._session_factory() as db:
                profile, created = await crud_user.create_user_profile_if_absent(user, db, display_name=display_name)
        except SQLAlchemyError as e:
            # The account exists either way; a missing profile is recreated on next sign-in
            logger.error(f"Error creating user document for {user.uid}: {str(e)}")
            return None
        if created:
            logger.info(f"Created profile document for {user.uid}")
        return profile

    async def get_user_document(self, uid: Optional[str]) -> Optional[UserProfile]:
        if not uid:
            return None
        try:
            async with self._session_factory() as db:
                return await crud_user.get_user_profile(uid, db)
        except SQLAlchemyError as e:
            logger.error(f"Error getting user document for {uid}: {str(e)}")
            return None
