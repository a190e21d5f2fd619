# goaltracker/core/google_auth.py
import asyncio
from functools import partial
from typing import Optional, Tuple

from google_auth_oauthlib.flow import Flow

from goaltracker.core.config import settings

# Google OAuth2 endpoints
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

# Scopes required for the application
SCOPES = [
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "openid",
]

def create_oauth_flow(redirect_uri: Optional[str] = None, state: Optional[str] = None) -> Flow:
    """Create a Google OAuth2 flow instance"""
    client_config = {
        "web": {
            "client_id": settings.GOOGLE_CLIENT_ID,
            "client_secret": settings.GOOGLE_CLIENT_SECRET,
            "auth_uri": GOOGLE_AUTH_URL,
            "token_uri": GOOGLE_TOKEN_URL,
            "redirect_uris": [redirect_uri or settings.GOOGLE_REDIRECT_URI],
        }
    }

    return Flow.from_client_config(
        client_config=client_config,
        scopes=SCOPES,
        redirect_uri=redirect_uri or settings.GOOGLE_REDIRECT_URI,
        state=state,
    )

def get_authorization_url(redirect_uri: Optional[str] = None) -> Tuple[str, str]:
    """Return the Google consent URL and the state to check on callback"""
    flow = create_oauth_flow(redirect_uri)
    return flow.authorization_url(
        access_type="offline",
        include_granted_scopes="true",
        prompt="select_account",
    )

async def exchange_code_for_id_token(
    code: str,
    redirect_uri: Optional[str] = None,
    state: Optional[str] = None,
) -> str:
    """Exchange the authorization code for a Google ID token"""
    flow = create_oauth_flow(redirect_uri, state=state)

    # fetch_token is blocking, keep it off the event loop
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, partial(flow.fetch_token, code=code))

    id_token = flow.credentials.id_token
    if not id_token:
        raise ValueError("No ID token received from Google")
    return id_token
