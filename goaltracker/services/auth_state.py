# goaltracker/services/auth_state.py
"""
Process-wide authentication state.

One instance is built at startup and handed to whoever needs the current
user (routes through ``api.deps``, the goals state through a listener).
"""
import logging
from typing import Awaitable, Callable, List, Optional

from goaltracker.models.user import UserProfile
from goaltracker.schemas.user import AuthResponse, IdentityUser, UserRead
from goaltracker.services.auth import AuthGateway, AuthResult

logger = logging.getLogger(__name__)

UserListener = Callable[[Optional[UserRead]], Awaitable[None]]


def merge_user(identity: IdentityUser, profile: Optional[UserProfile]) -> UserRead:
    """Profile document fields win over the bare identity."""
    if profile is None:
        return UserRead(
            id=identity.uid,
            display_name=identity.display_name or "",
            email=identity.email,
            photo_url=identity.photo_url or "",
        )
    return UserRead(
        id=identity.uid,
        display_name=profile.display_name or identity.display_name or "",
        email=profile.email or identity.email,
        photo_url=profile.photo_url or identity.photo_url or "",
        created_at=profile.created_at,
    )


class AuthState:
    def __init__(self, gateway: AuthGateway):
        self.gateway = gateway
        self.user: Optional[UserRead] = None
        self.loading = True
        self.error: Optional[str] = None
        self._listeners: List[UserListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def uid(self) -> Optional[str]:
        return self.user.id if self.user else None

    async def start(self) -> None:
        self._unsubscribe = await self.gateway.identity.on_auth_state_changed(self._on_auth_state_changed)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def add_listener(self, callback: UserListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            await listener(self.user)

    async def _on_auth_state_changed(self, identity: Optional[IdentityUser]) -> None:
        if identity is not None:
            profile = await self.gateway.get_user_document(identity.uid)
            self.user = merge_user(identity, profile)
        else:
            self.user = None
        self.loading = False
        await self._notify()

    async def _refresh_user(self) -> None:
        # Sign-up writes the profile after the provider has already
        # announced the new identity, so read it again
        await self._on_auth_state_changed(self.gateway.identity.current_user)

    async def _run(self, result: AuthResult) -> AuthResponse:
        if result.error:
            self.error = result.error
            return AuthResponse(success=False, error=result.error)
        await self._refresh_user()
        return AuthResponse(success=True, user=self.user)

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> AuthResponse:
        self.error = None
        self.loading = True
        try:
            result = await self.gateway.sign_up(email, password, display_name)
        finally:
            self.loading = False
        return await self._run(result)

    async def sign_in(self, email: str, password: str) -> AuthResponse:
        self.error = None
        self.loading = True
        try:
            result = await self.gateway.sign_in(email, password)
        finally:
            self.loading = False
        return await self._run(result)

    async def sign_in_with_google(
        self,
        code: str,
        redirect_uri: Optional[str] = None,
        state: Optional[str] = None,
    ) -> AuthResponse:
        self.error = None
        self.loading = True
        try:
            result = await self.gateway.sign_in_with_google(code, redirect_uri, state=state)
        finally:
            self.loading = False
        return await self._run(result)

    async def sign_out(self) -> AuthResponse:
        self.error = None
        result = await self.gateway.sign_out()
        if result.error:
            self.error = result.error
            return AuthResponse(success=False, error=result.error)
        if self.user is not None:
            self.user = None
            await self._notify()
        logger.info("Signed out")
        return AuthResponse(success=True)

    async def reset_password(self, email: str) -> AuthResponse:
        self.error = None
        result = await self.gateway.reset_password(email)
        if result.error:
            self.error = result.error
            return AuthResponse(success=False, error=result.error)
        return AuthResponse(success=True)

    def clear_error(self) -> None:
        self.error = None
