# goaltracker/crud/goal.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from goaltracker.models.goal import Goal
from typing import Any, Dict, List, Optional
from goaltracker.schemas.goal import GoalCreate

async def get_goals_for_user(user_id: str, db: AsyncSession) -> List[Goal]:
    """All goals owned by ``user_id``, newest first."""
    result = await db.execute(
        select(Goal)
        .where(Goal.user_id == user_id)
        .order_by(Goal.created_at.desc(), Goal.id.desc())
    )
    return list(result.scalars().all())

async def get_goal_by_id(goal_id: str, user_id: str, db: AsyncSession) -> Optional[Goal]:
    result = await db.execute(
        select(Goal).where(Goal.id == goal_id, Goal.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def create_goal_for_user(user_id: str, goal_in: GoalCreate, db: AsyncSession) -> Goal:
    new_goal = Goal(
        user_id=user_id,
        title=goal_in.title.strip(),
        description=(goal_in.description or "").strip(),
        priority=goal_in.priority or "medium",
        completed=False,
        goal_type=goal_in.goal_type or "custom",
        due_date=goal_in.due_date,
        is_recurring=goal_in.is_recurring,
        recurring_type=goal_in.recurring_type if goal_in.is_recurring else None,
    )
    db.add(new_goal)
    await db.commit()
    await db.refresh(new_goal)
    return new_goal

async def update_goal(goal: Goal, fields: Dict[str, Any], db: AsyncSession) -> Goal:
    for field, value in fields.items():
        setattr(goal, field, value)
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal

async def delete_goal(goal: Goal, db: AsyncSession) -> None:
    await db.delete(goal)
    await db.commit()
