# goaltracker/services/session.py
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from goaltracker.core.database import AsyncSessionLocal
from goaltracker.core.identity import IdentityClient
from goaltracker.services.auth import AuthGateway
from goaltracker.services.auth_state import AuthState
from goaltracker.services.goals import GoalGateway
from goaltracker.services.goals_state import GoalsState

logger = logging.getLogger(__name__)


@dataclass
class AppSession:
    """Everything that holds per-process state, built once at startup."""
    identity: IdentityClient
    auth_gateway: AuthGateway
    goal_gateway: GoalGateway
    auth: AuthState
    goals: GoalsState

    async def close(self) -> None:
        self.auth.stop()
        await self.goals.close()
        await self.goal_gateway.hub.close_all()
        logger.info("Application session closed")


async def build_session(
    identity: Optional[IdentityClient] = None,
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
    subscribe_timeout: Optional[float] = None,
    error_clear_delay: Optional[float] = None,
) -> AppSession:
    identity = identity or IdentityClient()
    auth_gateway = AuthGateway(identity, session_factory)
    goal_gateway = GoalGateway(session_factory)
    auth = AuthState(auth_gateway)
    goals = GoalsState(goal_gateway, subscribe_timeout, error_clear_delay)

    # Goals follow the signed-in identity
    auth.add_listener(goals.on_user_changed)
    await auth.start()

    return AppSession(
        identity=identity,
        auth_gateway=auth_gateway,
        goal_gateway=goal_gateway,
        auth=auth,
        goals=goals,
    )
