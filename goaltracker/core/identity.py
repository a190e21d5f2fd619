# goaltracker/core/identity.py
"""
Client for the Firebase Authentication REST API (identitytoolkit v1).

The client owns the signed-in identity for the process and notifies
auth-state listeners whenever it changes, the same way the web SDK's
``onAuthStateChanged`` does.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from goaltracker.core.config import settings
from goaltracker.core.errors import IdentityProviderError
from goaltracker.schemas.user import IdentityUser

logger = logging.getLogger(__name__)

AuthStateListener = Callable[[Optional[IdentityUser]], Awaitable[None]]

# REST error messages -> web SDK style codes
ERROR_CODES = {
    "EMAIL_EXISTS": "auth/email-already-in-use",
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "INVALID_IDP_RESPONSE": "auth/invalid-credential",
    "WEAK_PASSWORD": "auth/weak-password",
    "INVALID_EMAIL": "auth/invalid-email",
    "MISSING_EMAIL": "auth/invalid-email",
    "USER_DISABLED": "auth/user-disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "OPERATION_NOT_ALLOWED": "auth/operation-not-allowed",
    "INVALID_ID_TOKEN": "auth/invalid-user-token",
    "TOKEN_EXPIRED": "auth/user-token-expired",
}


def parse_error_response(response: httpx.Response) -> IdentityProviderError:
    """Turn an identitytoolkit error body into an IdentityProviderError."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = response.text or f"HTTP {response.status_code}"

    # e.g. "WEAK_PASSWORD : Password should be at least 6 characters"
    reason = message.split(" : ", 1)[0].strip()
    code = ERROR_CODES.get(reason, f"auth/{reason.lower().replace('_', '-')}")
    return IdentityProviderError(code, message)


class IdentityClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.FIREBASE_API_KEY
        self.base_url = (base_url or settings.IDENTITY_TOOLKIT_URL).rstrip("/")
        self.timeout = timeout or settings.IDENTITY_REQUEST_TIMEOUT_SECONDS
        self._transport = transport
        self._current_user: Optional[IdentityUser] = None
        self._listeners: List[AuthStateListener] = []

    @property
    def current_user(self) -> Optional[IdentityUser]:
        return self._current_user

    # ── auth state ─────────────────────────────────────────────────────────────
    async def on_auth_state_changed(self, callback: AuthStateListener) -> Callable[[], None]:
        """Register ``callback``; it is called right away with the current user."""
        self._listeners.append(callback)
        await callback(self._current_user)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _set_current_user(self, user: Optional[IdentityUser]) -> None:
        self._current_user = user
        for listener in list(self._listeners):
            try:
                await listener(user)
            except Exception:
                logger.exception("Auth state listener failed")

    # ── transport ──────────────────────────────────────────────────────────────
    async def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/accounts:{endpoint}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Identity provider request to {endpoint} failed: {str(e)}")
            raise IdentityProviderError("auth/network-request-failed", str(e)) from e

        if response.is_error:
            error = parse_error_response(response)
            logger.warning(f"Identity provider rejected {endpoint}: {error.message}")
            raise error
        return response.json()

    @staticmethod
    def _user_from(data: Dict[str, Any]) -> IdentityUser:
        return IdentityUser(
            uid=data["localId"],
            email=data.get("email"),
            display_name=data.get("displayName") or None,
            photo_url=data.get("photoUrl") or None,
            id_token=data.get("idToken"),
            refresh_token=data.get("refreshToken"),
        )

    # ── operations ─────────────────────────────────────────────────────────────
    async def create_account(self, email: str, password: str) -> IdentityUser:
        data = await self._post("signUp", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        user = self._user_from(data)
        logger.info(f"Created account {user.uid}")
        await self._set_current_user(user)
        return user

    async def authenticate(self, email: str, password: str) -> IdentityUser:
        data = await self._post("signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        user = self._user_from(data)
        await self._set_current_user(user)
        return user

    async def authenticate_federated(
        self,
        id_token: str,
        provider_id: str = "google.com",
        request_uri: Optional[str] = None,
    ) -> IdentityUser:
        data = await self._post("signInWithIdp", {
            "postBody": f"id_token={id_token}&providerId={provider_id}",
            "requestUri": request_uri or settings.FRONTEND_URL,
            "returnSecureToken": True,
            "returnIdpCredential": True,
        })
        user = self._user_from(data)
        await self._set_current_user(user)
        return user

    async def update_profile(
        self,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> IdentityUser:
        user = self._current_user
        if user is None or not user.id_token:
            raise IdentityProviderError("auth/no-current-user", "No user is signed in")

        payload: Dict[str, Any] = {"idToken": user.id_token, "returnSecureToken": False}
        if display_name is not None:
            payload["displayName"] = display_name
        if photo_url is not None:
            payload["photoUrl"] = photo_url
        await self._post("update", payload)

        # Profile updates do not count as an auth state change
        updates = {}
        if display_name is not None:
            updates["display_name"] = display_name
        if photo_url is not None:
            updates["photo_url"] = photo_url
        self._current_user = user.model_copy(update=updates)
        return self._current_user

    async def send_password_reset(self, email: str) -> None:
        await self._post("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        logger.info("Password reset email requested")

    async def sign_out(self) -> None:
        await self._set_current_user(None)
