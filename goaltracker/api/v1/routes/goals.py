# goaltracker/api/v1/routes/goals.py
import asyncio
import logging
from datetime import date
from typing import List, Literal, Optional

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from goaltracker.api.deps import get_current_user, get_goals_state
from goaltracker.core.errors import (
    GoalMutationError,
    GoalValidationError,
    NotAuthenticatedError,
)
from goaltracker.schemas.goal import (
    GoalCreate,
    GoalFilter,
    GoalRead,
    GoalStats,
    GoalsStatus,
    GoalUpdate,
    MonthCalendar,
    WeekView,
)
from goaltracker.schemas.user import UserRead
from goaltracker.services.goals_state import GoalsState
from goaltracker.utils.calendar import build_week_view, get_month_calendar
from goaltracker.utils.helpers import filter_goals, get_goal_stats, sort_goals_by_priority
from goaltracker.utils.realtime import GoalSubscription

router = APIRouter(prefix="/goals", tags=["goals"])
logger = logging.getLogger(__name__)


def _mutation_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, NotAuthenticatedError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)
    if isinstance(exc, GoalValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": exc.errors},
        )
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.get("/", response_model=List[GoalRead])
async def list_goals(
    goal_filter: GoalFilter = Query("all", alias="filter"),
    sort: Literal["newest", "priority"] = Query("newest"),
    user: UserRead = Depends(get_current_user),
    goals: GoalsState = Depends(get_goals_state),
):
    """
    Goals from the latest snapshot.

    - **filter**: all, active, completed or high-priority
    - **sort**: newest (snapshot order) or priority
    """
    result = filter_goals(goals.goals, goal_filter)
    if sort == "priority":
        result = sort_goals_by_priority(result)
    return result


@router.post("/", status_code=status.HTTP_202_ACCEPTED)
async def create_goal(
    goal_in: GoalCreate,
    goals: GoalsState = Depends(get_goals_state),
):
    """Create a goal. It shows up once the next snapshot arrives."""
    try:
        goal_id = await goals.add_goal(goal_in)
    except (NotAuthenticatedError, GoalValidationError, GoalMutationError) as e:
        raise _mutation_http_error(e)
    return {"id": goal_id}


@router.get("/stats", response_model=GoalStats)
async def goal_stats(
    user: UserRead = Depends(get_current_user),
    goals: GoalsState = Depends(get_goals_state),
):
    return get_goal_stats(goals.goals)


@router.get("/week", response_model=WeekView)
async def week_view(
    today: Optional[date] = Query(None, description="Defaults to the current date"),
    user: UserRead = Depends(get_current_user),
    goals: GoalsState = Depends(get_goals_state),
):
    return build_week_view(goals.goals, today)


@router.get("/calendar", response_model=MonthCalendar)
async def month_calendar(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    user: UserRead = Depends(get_current_user),
    goals: GoalsState = Depends(get_goals_state),
):
    return get_month_calendar(goals.goals, year, month)


@router.get("/status", response_model=GoalsStatus)
async def sync_status(goals: GoalsState = Depends(get_goals_state)):
    return goals.status()


@router.post("/resubscribe", response_model=GoalsStatus)
async def resubscribe(
    user: UserRead = Depends(get_current_user),
    goals: GoalsState = Depends(get_goals_state),
):
    await goals.resubscribe()
    return goals.status()


@router.patch("/{goal_id}", status_code=status.HTTP_202_ACCEPTED)
async def update_goal(
    goal_id: str,
    updates: GoalUpdate,
    goals: GoalsState = Depends(get_goals_state),
):
    try:
        await goals.update_goal(goal_id, updates)
    except (NotAuthenticatedError, GoalValidationError, GoalMutationError) as e:
        raise _mutation_http_error(e)
    return {"id": goal_id}


@router.post("/{goal_id}/toggle", status_code=status.HTTP_202_ACCEPTED)
async def toggle_goal(
    goal_id: str,
    goals: GoalsState = Depends(get_goals_state),
):
    try:
        await goals.toggle_goal(goal_id)
    except (NotAuthenticatedError, GoalMutationError) as e:
        raise _mutation_http_error(e)
    return {"id": goal_id}


@router.delete("/{goal_id}", status_code=status.HTTP_202_ACCEPTED)
async def delete_goal(
    goal_id: str,
    goals: GoalsState = Depends(get_goals_state),
):
    try:
        await goals.delete_goal(goal_id)
    except (NotAuthenticatedError, GoalMutationError) as e:
        raise _mutation_http_error(e)
    return {"id": goal_id}


async def _pump_snapshots(websocket: WebSocket, subscription: GoalSubscription) -> None:
    async for snapshot in subscription:
        await websocket.send_json({
            "type": "snapshot",
            "goals": [goal.model_dump(mode="json") for goal in snapshot],
        })


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass


@router.websocket("/ws")
async def goals_websocket(websocket: WebSocket):
    """Stream full goal snapshots for the signed-in user"""
    session = getattr(websocket.app.state, "session", None)
    user = session.auth.user if session is not None else None
    if user is None:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    await websocket.accept()
    subscription = session.goal_gateway.subscribe_to_goals(user.id)
    pump = asyncio.create_task(_pump_snapshots(websocket, subscription))
    disconnect = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        await asyncio.wait([pump, disconnect], return_when=asyncio.FIRST_COMPLETED)
        if disconnect.done():
            return
        # The subscription ended on the server side
        disconnect.cancel()
        error = pump.exception()
        if error is not None:
            logger.error(f"Goals WebSocket error: {str(error)}")
            await websocket.close(code=4000, reason="Server error")
        else:
            await websocket.close()
    finally:
        pump.cancel()
        subscription.close()
