# famfin/services/goals.py
"""
Savings goals shared between participants.

Every participant has a UserGoal row with their own contribution tally;
goal.current_amount is the aggregate. Contributions only ever add, and a
goal that reached its target stays completed.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from sqlalchemy import or_, update
from sqlmodel import Session, select

from famfin.errors import Forbidden, InvalidAmount, InvalidInput, NotFound
from famfin.models import Goal, User, UserGoal, utcnow
from famfin.schemas import GoalCreate
from famfin.services.visibility import family_user_ids, membership_of, shared_by_family

logger = logging.getLogger("famfin.goals")


def _participant_link(session: Session, user_id: int, goal_id: int) -> UserGoal | None:
    return session.exec(
        select(UserGoal).where(UserGoal.goal_id == goal_id, UserGoal.user_id == user_id)
    ).first()


def create_goal(session: Session, user_id: int, data: GoalCreate) -> Goal:
    """Create the goal and link the creator plus every listed user with a zero tally."""
    goal = Goal(
        name=data.name.strip(),
        description=data.description,
        target_amount=data.target_amount,
        deadline=data.deadline,
        icon=data.icon,
        color=data.color,
        created_by_id=user_id,
        is_shared=membership_of(session, user_id) is not None,
    )
    session.add(goal)
    session.flush()

    session.add(UserGoal(user_id=user_id, goal_id=goal.id))
    for other_id in dict.fromkeys(data.shared_with_user_ids):
        if other_id == user_id:
            continue
        if session.get(User, other_id) is None:
            raise NotFound(f"User {other_id} not found")
        session.add(UserGoal(user_id=other_id, goal_id=goal.id))

    session.commit()
    session.refresh(goal)
    return goal


def list_goals(session: Session, user_id: int) -> List[Goal]:
    """Goals the user takes part in plus goals shared inside their family."""
    participating = select(UserGoal.goal_id).where(UserGoal.user_id == user_id)
    peers = family_user_ids(session, user_id)
    stmt = (
        select(Goal)
        .where(
            or_(
                Goal.id.in_(participating),
                shared_by_family(Goal.created_by_id, Goal.is_shared, peers),
            )
        )
        .order_by(
            Goal.is_completed,
            Goal.deadline.is_(None),
            Goal.deadline,
            Goal.id,
        )
    )
    return list(session.exec(stmt).all())


def get_goal(session: Session, user_id: int, goal_id: int) -> Goal:
    goal = session.get(Goal, goal_id)
    if goal is None:
        raise NotFound("Goal not found")
    if _participant_link(session, user_id, goal_id) is not None:
        return goal
    if goal.is_shared and goal.created_by_id in family_user_ids(session, user_id):
        return goal
    raise NotFound("Goal not found")


def goal_participants(session: Session, goal_id: int) -> List[Tuple[UserGoal, User]]:
    stmt = (
        select(UserGoal, User)
        .join(User, User.id == UserGoal.user_id)
        .where(UserGoal.goal_id == goal_id)
        .order_by(UserGoal.id)
    )
    return list(session.exec(stmt).all())


def _own_goal(session: Session, user_id: int, goal_id: int) -> Goal:
    goal = get_goal(session, user_id, goal_id)
    if goal.created_by_id != user_id:
        raise Forbidden("Only the goal creator can change this goal")
    return goal


def update_goal(
    session: Session, user_id: int, goal_id: int, changes: Dict[str, Any]
) -> Goal:
    goal = _own_goal(session, user_id, goal_id)

    completed = changes.pop("is_completed", None)
    if completed is False and goal.is_completed:
        raise InvalidInput("A completed goal cannot be reopened")

    for field, value in changes.items():
        if value is None and field in ("name", "target_amount"):
            continue
        if field == "name":
            value = value.strip()
        setattr(goal, field, value)

    if completed or goal.current_amount >= goal.target_amount:
        goal.is_completed = True

    goal.updated_at = utcnow()
    session.add(goal)
    session.commit()
    session.refresh(goal)
    return goal


def delete_goal(session: Session, user_id: int, goal_id: int) -> None:
    goal = _own_goal(session, user_id, goal_id)
    for link in session.exec(select(UserGoal).where(UserGoal.goal_id == goal.id)).all():
        session.delete(link)
    session.flush()
    session.delete(goal)
    session.commit()


def contribute(session: Session, goal_id: int, user_id: int, amount: Decimal) -> Goal:
    """
    Add `amount` to the user's tally and to the goal, completing the goal
    when it reaches its target. Counters move through increment statements
    so concurrent contributions add up.
    """
    if amount is None or Decimal(amount) <= 0:
        raise InvalidAmount()
    amount = Decimal(amount)

    link = _participant_link(session, user_id, goal_id)
    goal = session.get(Goal, goal_id)
    if link is None or goal is None:
        raise NotFound("Goal not found")
    was_completed = goal.is_completed

    session.exec(
        update(UserGoal)
        .where(UserGoal.id == link.id)
        .values(contribution=UserGoal.contribution + amount)
    )
    session.exec(
        update(Goal)
        .where(Goal.id == goal_id)
        .values(current_amount=Goal.current_amount + amount, updated_at=utcnow())
    )
    session.exec(
        update(Goal)
        .where(
            Goal.id == goal_id,
            Goal.is_completed.is_(False),
            Goal.current_amount >= Goal.target_amount,
        )
        .values(is_completed=True)
    )
    session.commit()
    session.refresh(goal)

    if goal.is_completed and not was_completed:
        logger.info("goal %s completed by contribution of user=%s", goal_id, user_id)
    return goal
