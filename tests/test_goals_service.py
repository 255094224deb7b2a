# tests/test_goals_service.py
from decimal import Decimal

import pytest
from conftest import make_user

from famfin.errors import Forbidden, InvalidAmount, InvalidInput, NotFound
from famfin.models import UserGoal
from famfin.schemas import GoalCreate
from famfin.services import goals as goals_service


def _goal(session, creator, target="500", shared_with=()):
    return goals_service.create_goal(
        session,
        creator.id,
        GoalCreate(
            name="Trip",
            target_amount=Decimal(target),
            shared_with_user_ids=list(shared_with),
        ),
    )


def _tally(session, goal_id, user_id) -> Decimal:
    session.expire_all()
    link = goals_service._participant_link(session, user_id, goal_id)
    return link.contribution


def test_contributions_accumulate_and_complete_once(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    goal = _goal(session, ana, "500", shared_with=[bruno.id])

    goal = goals_service.contribute(session, goal.id, ana.id, Decimal("200"))
    assert goal.current_amount == Decimal("200")
    assert goal.is_completed is False

    goal = goals_service.contribute(session, goal.id, bruno.id, Decimal("300"))
    assert goal.current_amount == Decimal("500")
    assert goal.is_completed is True

    goal = goals_service.contribute(session, goal.id, bruno.id, Decimal("50.50"))
    assert goal.current_amount == Decimal("550.50")
    assert goal.is_completed is True

    assert _tally(session, goal.id, ana.id) == Decimal("200")
    assert _tally(session, goal.id, bruno.id) == Decimal("350.50")


@pytest.mark.parametrize("amount", ["0", "-10"])
def test_non_positive_amount_is_rejected(session, amount):
    ana = make_user(session)
    goal = _goal(session, ana)
    with pytest.raises(InvalidAmount):
        goals_service.contribute(session, goal.id, ana.id, Decimal(amount))


def test_contribution_requires_participation(session):
    ana = make_user(session)
    outsider = make_user(session, name="Caio", email="caio@home.net")
    goal = _goal(session, ana)
    with pytest.raises(NotFound):
        goals_service.contribute(session, goal.id, outsider.id, Decimal("10"))


def test_creator_and_listed_users_get_zero_tallies(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    goal = _goal(session, ana, shared_with=[bruno.id, ana.id])

    participants = goals_service.goal_participants(session, goal.id)
    assert sorted(user.id for _, user in participants) == sorted([ana.id, bruno.id])
    assert all(link.contribution == 0 for link, _ in participants)


def test_only_creator_updates_and_completion_is_one_way(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    goal = _goal(session, ana, "300", shared_with=[bruno.id])
    goals_service.contribute(session, goal.id, bruno.id, Decimal("100"))

    with pytest.raises(Forbidden):
        goals_service.update_goal(session, bruno.id, goal.id, {"name": "Mine"})

    # lowering the target under the saved amount completes the goal
    goal = goals_service.update_goal(
        session, ana.id, goal.id, {"target_amount": Decimal("80")}
    )
    assert goal.is_completed is True

    with pytest.raises(InvalidInput):
        goals_service.update_goal(session, ana.id, goal.id, {"is_completed": False})


def test_delete_goal_removes_links(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    goal = _goal(session, ana, shared_with=[bruno.id])
    goal_id = goal.id

    goals_service.delete_goal(session, ana.id, goal_id)
    assert goals_service.goal_participants(session, goal_id) == []
    assert session.get(UserGoal, 1) is None
    with pytest.raises(NotFound):
        goals_service.get_goal(session, ana.id, goal_id)
