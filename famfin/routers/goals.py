# famfin/routers/goals.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from famfin.db import get_session
from famfin.models import Goal
from famfin.schemas import (
    ContributionIn,
    GoalCreate,
    GoalParticipantRead,
    GoalRead,
    GoalUpdate,
    Message,
)
from famfin.security import require_user_id
from famfin.services import goals as goals_service

router = APIRouter(prefix="/goals", tags=["goals"])


def goal_read(session: Session, goal: Goal) -> GoalRead:
    participants = [
        GoalParticipantRead(user_id=user.id, name=user.name, contribution=link.contribution)
        for link, user in goals_service.goal_participants(session, goal.id)
    ]
    return GoalRead.model_validate(goal).model_copy(update={"participants": participants})


@router.get("", response_model=List[GoalRead])
def list_goals(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return [goal_read(session, goal) for goal in goals_service.list_goals(session, user_id)]


@router.post("", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
def create_goal(
    body: GoalCreate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return goal_read(session, goals_service.create_goal(session, user_id, body))


@router.get("/{goal_id}", response_model=GoalRead)
def get_goal(
    goal_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return goal_read(session, goals_service.get_goal(session, user_id, goal_id))


@router.patch("/{goal_id}", response_model=GoalRead)
def update_goal(
    goal_id: int,
    body: GoalUpdate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    goal = goals_service.update_goal(
        session, user_id, goal_id, body.model_dump(exclude_unset=True)
    )
    return goal_read(session, goal)


@router.delete("/{goal_id}", response_model=Message)
def delete_goal(
    goal_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    goals_service.delete_goal(session, user_id, goal_id)
    return Message(message="Goal deleted")


@router.post("/{goal_id}/contribute", response_model=GoalRead)
def contribute(
    goal_id: int,
    body: ContributionIn,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    goal = goals_service.contribute(session, goal_id, user_id, body.amount)
    return goal_read(session, goal)
