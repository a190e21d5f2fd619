# goaltracker/services/goals_state.py
"""
Live goals state for the signed-in user.

States::

    uninitialized -> subscribing -> synced
                          |
                          +-> error   (timeout or store failure)

Any identity change tears down the current subscription and starts over.
Without a user the state collapses to ``synced`` with no goals.

Every snapshot replaces ``goals`` entirely. Mutations never touch ``goals``
directly; their effect arrives with the next snapshot.

Once the timeout guard has fired, a late snapshot from the same subscription
still refreshes ``goals`` but leaves the error in place. Only a new
subscription attempt (``set_user`` or ``resubscribe``) clears it.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from goaltracker.core.config import settings
from goaltracker.core.errors import (
    GoalMutationError,
    GoalStoreError,
    GoalValidationError,
    NotAuthenticatedError,
)
from goaltracker.schemas.goal import GoalCreate, GoalRead, GoalsStatus, GoalUpdate
from goaltracker.schemas.user import UserRead
from goaltracker.services.goals import GoalGateway
from goaltracker.utils.helpers import validate_goal_data, validate_goal_update
from goaltracker.utils.realtime import GoalSubscription

logger = logging.getLogger(__name__)

CONNECTION_TIMEOUT_MESSAGE = "Failed to connect to database. Please check your internet connection."
LOAD_FAILED_MESSAGE = "Failed to load goals. Please try again."
ADD_FAILED_MESSAGE = "Failed to add goal. Please try again."
UPDATE_FAILED_MESSAGE = "Failed to update goal. Please try again."
DELETE_FAILED_MESSAGE = "Failed to delete goal. Please try again."


class SyncState(str, Enum):
    UNINITIALIZED = "uninitialized"
    SUBSCRIBING = "subscribing"
    SYNCED = "synced"
    ERROR = "error"


class GoalsState:
    def __init__(
        self,
        gateway: GoalGateway,
        subscribe_timeout: Optional[float] = None,
        error_clear_delay: Optional[float] = None,
    ):
        self.gateway = gateway
        self.subscribe_timeout = (
            subscribe_timeout if subscribe_timeout is not None
            else settings.GOALS_SUBSCRIBE_TIMEOUT_SECONDS
        )
        self.error_clear_delay = (
            error_clear_delay if error_clear_delay is not None
            else settings.GOALS_ERROR_CLEAR_SECONDS
        )

        self.goals: List[GoalRead] = []
        self.state = SyncState.UNINITIALIZED
        self.user_id: Optional[str] = None
        self.connection_error: Optional[str] = None
        self.mutation_error: Optional[str] = None

        # Bumped on every subscription attempt; callbacks carrying an older
        # generation belong to a torn-down subscription and are ignored
        self._generation = 0
        self._subscription: Optional[GoalSubscription] = None
        self._listen_task: Optional[asyncio.Task] = None
        self._timeout_handle: Optional[asyncio.TimerHandle] = None
        self._clear_handle: Optional[asyncio.TimerHandle] = None

    # ── derived state ──────────────────────────────────────────────────────────
    @property
    def loading(self) -> bool:
        return self.state == SyncState.SUBSCRIBING

    @property
    def error(self) -> Optional[str]:
        return self.mutation_error or self.connection_error

    def status(self) -> GoalsStatus:
        return GoalsStatus(
            state=self.state.value,
            loading=self.loading,
            error=self.error,
            goal_count=len(self.goals),
        )

    # ── subscription lifecycle ─────────────────────────────────────────────────
    async def on_user_changed(self, user: Optional[UserRead]) -> None:
        """AuthState listener."""
        await self.set_user(user.id if user else None)

    async def set_user(self, user_id: Optional[str]) -> None:
        if user_id == self.user_id and self.state in (SyncState.SUBSCRIBING, SyncState.SYNCED):
            return

        await self._teardown()
        self._generation += 1
        self.user_id = user_id
        self.connection_error = None

        if user_id is None:
            self.goals = []
            self.state = SyncState.SYNCED
            return

        self._subscribe(user_id)

    async def resubscribe(self) -> None:
        """Retry the subscription for the current user."""
        if self.user_id is None:
            return
        await self._teardown()
        self._generation += 1
        self.connection_error = None
        self._subscribe(self.user_id)

    def _subscribe(self, user_id: str) -> None:
        generation = self._generation
        self.state = SyncState.SUBSCRIBING

        self._subscription = self.gateway.subscribe_to_goals(user_id)
        loop = asyncio.get_running_loop()
        self._timeout_handle = loop.call_later(self.subscribe_timeout, self._on_timeout, generation)
        self._listen_task = asyncio.create_task(self._listen(self._subscription, generation))

    async def _listen(self, subscription: GoalSubscription, generation: int) -> None:
        try:
            async for snapshot in subscription:
                self._on_snapshot(snapshot, generation)
        except GoalStoreError as e:
            self._on_subscription_error(e, generation)

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

    def _on_snapshot(self, snapshot: List[GoalRead], generation: int) -> None:
        if generation != self._generation:
            return
        self._cancel_timeout()
        self.goals = snapshot
        if self.state == SyncState.SUBSCRIBING:
            self.state = SyncState.SYNCED

    def _on_timeout(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._timeout_handle = None
        if self.state != SyncState.SUBSCRIBING:
            return
        logger.error(f"No goals snapshot for {self.user_id} after {self.subscribe_timeout}s")
        self.state = SyncState.ERROR
        self.connection_error = CONNECTION_TIMEOUT_MESSAGE

    def _on_subscription_error(self, error: GoalStoreError, generation: int) -> None:
        if generation != self._generation:
            return
        logger.error(f"Goals subscription failed for {self.user_id}: {error}")
        self._cancel_timeout()
        self.goals = []
        self.state = SyncState.ERROR
        self.connection_error = LOAD_FAILED_MESSAGE

    async def _teardown(self) -> None:
        self._cancel_timeout()
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        task, self._listen_task = self._listen_task, None
        if task is not None and task is not asyncio.current_task():
            # The closed subscription ends the iteration
            await task

    async def close(self) -> None:
        await self._teardown()
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None

    # ── mutations ──────────────────────────────────────────────────────────────
    def _require_user(self) -> str:
        if self.user_id is None:
            raise NotAuthenticatedError()
        return self.user_id

    def _reset_mutation_error(self) -> None:
        self.mutation_error = None
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None

    def _fail(self, message: str, error: Exception, goal_id: Optional[str] = None) -> GoalMutationError:
        logger.error(f"{message} ({error!r})")
        self.mutation_error = message
        if self._clear_handle is not None:
            self._clear_handle.cancel()
        # The newest error always gets the full display window
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(self.error_clear_delay, self._clear_mutation_error)
        return GoalMutationError(message, goal_id=goal_id)

    def _clear_mutation_error(self) -> None:
        self.mutation_error = None
        self._clear_handle = None

    def find_goal(self, goal_id: str) -> Optional[GoalRead]:
        return next((g for g in self.goals if g.id == goal_id), None)

    async def add_goal(self, goal_in: GoalCreate) -> str:
        user_id = self._require_user()
        validation = validate_goal_data(goal_in.model_dump())
        if not validation.is_valid:
            raise GoalValidationError(validation.errors)

        self._reset_mutation_error()
        try:
            return await self.gateway.add_goal(user_id, goal_in)
        except Exception as e:
            raise self._fail(ADD_FAILED_MESSAGE, e) from e

    async def toggle_goal(self, goal_id: str) -> None:
        user_id = self._require_user()
        goal = self.find_goal(goal_id)
        if goal is None:
            logger.warning(f"Toggle ignored, goal {goal_id} is not in the current snapshot")
            return

        self._reset_mutation_error()
        try:
            await self.gateway.toggle_goal(user_id, goal_id, goal.completed)
        except Exception as e:
            raise self._fail(UPDATE_FAILED_MESSAGE, e, goal_id) from e

    async def delete_goal(self, goal_id: str) -> None:
        user_id = self._require_user()
        self._reset_mutation_error()
        try:
            await self.gateway.delete_goal(user_id, goal_id)
        except Exception as e:
            raise self._fail(DELETE_FAILED_MESSAGE, e, goal_id) from e

    async def update_goal(self, goal_id: str, updates: Union[GoalUpdate, Dict[str, Any]]) -> None:
        user_id = self._require_user()
        fields = updates.model_dump(exclude_unset=True) if isinstance(updates, GoalUpdate) else dict(updates)
        validation = validate_goal_update(fields)
        if not validation.is_valid:
            raise GoalValidationError(validation.errors)

        self._reset_mutation_error()
        try:
            await self.gateway.update_goal(user_id, goal_id, fields)
        except Exception as e:
            raise self._fail(UPDATE_FAILED_MESSAGE, e, goal_id) from e
