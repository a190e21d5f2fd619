# goaltracker/services/goals.py
"""
Goal data-access gateway.

Mutations are fire-and-forget from the caller's point of view: they return
once the store has committed, and the new state reaches callers only through
the live subscription.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from goaltracker.core.database import AsyncSessionLocal
from goaltracker.core.errors import GoalStoreError
from goaltracker.crud import goal as crud_goal
from goaltracker.models.goal import utcnow
from goaltracker.schemas.goal import GoalCreate, GoalRead
from goaltracker.utils.realtime import GoalSubscription, SnapshotHub

logger = logging.getLogger(__name__)

# Fields a caller may never change through update_goal
IMMUTABLE_FIELDS = {"id", "user_id", "created_at", "updated_at"}


class GoalGateway:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal):
        self._session_factory = session_factory
        self.hub = SnapshotHub(self._load_snapshot)

    async def _load_snapshot(self, user_id: str) -> List[GoalRead]:
        async with self._session_factory() as db:
            goals = await crud_goal.get_goals_for_user(user_id, db)
            return [GoalRead.model_validate(goal) for goal in goals]

    def subscribe_to_goals(self, user_id: str) -> GoalSubscription:
        """Standing query on the user's goals, newest first."""
        return self.hub.subscribe(user_id)

    async def add_goal(self, user_id: str, goal_in: GoalCreate) -> str:
        try:
            async with self._session_factory() as db:
                goal = await crud_goal.create_goal_for_user(user_id, goal_in, db)
        except SQLAlchemyError as e:
            logger.error(f"Error adding goal: {str(e)}")
            raise GoalStoreError("Error adding goal") from e

        logger.info(f"Goal added with ID: {goal.id}")
        await self.hub.publish(user_id)
        return goal.id

    async def update_goal(self, user_id: str, goal_id: str, updates: Dict[str, Any]) -> None:
        fields = {k: v for k, v in updates.items() if k not in IMMUTABLE_FIELDS}
        fields["updated_at"] = utcnow()

        try:
            async with self._session_factory() as db:
                goal = await crud_goal.get_goal_by_id(goal_id, user_id, db)
                if goal is None:
                    raise GoalStoreError(f"Goal {goal_id} not found")
                # recurring_type stays null unless the goal ends up recurring
                if not fields.get("is_recurring", goal.is_recurring):
                    fields["recurring_type"] = None
                await crud_goal.update_goal(goal, fields, db)
        except SQLAlchemyError as e:
            logger.error(f"Error updating goal {goal_id}: {str(e)}")
            raise GoalStoreError("Error updating goal") from e

        logger.info(f"Goal updated: {goal_id}")
        await self.hub.publish(user_id)

    async def toggle_goal(self, user_id: str, goal_id: str, current_status: bool) -> None:
        await self.update_goal(user_id, goal_id, {"completed": not current_status})

    async def delete_goal(self, user_id: str, goal_id: str) -> None:
        try:
            async with self._session_factory() as db:
                goal = await crud_goal.get_goal_by_id(goal_id, user_id, db)
                # Deleting a missing goal is a no-op
                if goal is not None:
                    await crud_goal.delete_goal(goal, db)
        except SQLAlchemyError as e:
            logger.error(f"Error deleting goal {goal_id}: {str(e)}")
            raise GoalStoreError("Error deleting goal") from e

        logger.info(f"Goal deleted: {goal_id}")
        await self.hub.publish(user_id)
