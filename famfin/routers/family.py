# famfin/routers/family.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from famfin.db import get_session
from famfin.models import Family, FamilyInvitation, User
from famfin.routers.bank_accounts import account_read
from famfin.routers.cards import card_read
from famfin.routers.goals import goal_read
from famfin.schemas import (
    CategoryRead,
    FamilyCreate,
    FamilyMemberRead,
    FamilyOverview,
    FamilyRead,
    InvitationAction,
    InvitationAnswered,
    InvitationCreate,
    InvitationRead,
    MemberData,
    Message,
    ShareIn,
    ShareResult,
    TransactionRead,
    UserBrief,
)
from famfin.security import require_user_id
from famfin.services import family as family_service

router = APIRouter(prefix="/family", tags=["family"])


def family_read(session: Session, family: Family) -> FamilyRead:
    members = [
        FamilyMemberRead(
            id=member.id,
            user_id=user.id,
            role=member.role,
            joined_at=member.joined_at,
            name=user.name,
            email=user.email,
        )
        for member, user in family_service.family_members(session, family.id)
    ]
    return FamilyRead.model_validate(family).model_copy(update={"members": members})


def invitation_read(
    invitation: FamilyInvitation, family: Family, inviter: User
) -> InvitationRead:
    # family_name and inviter_name are required, so validate them together
    return InvitationRead.model_validate(
        {
            **invitation.model_dump(),
            "family_name": family.name,
            "inviter_name": inviter.name,
        }
    )


@router.get("", response_model=FamilyOverview)
def get_family(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    family, member = family_service.get_family(session, user_id)
    if family is None:
        return FamilyOverview()
    return FamilyOverview(family=family_read(session, family), user_role=member.role)


@router.post("", response_model=FamilyRead, status_code=status.HTTP_201_CREATED)
def create_family(
    body: FamilyCreate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    family = family_service.create_family(session, user_id, body.name)
    return family_read(session, family)


@router.delete("", response_model=Message)
def leave_family(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    outcome = family_service.leave_family(session, user_id)
    if outcome == "disbanded":
        return Message(message="Family disbanded")
    return Message(message="You left the family")


@router.get("/invitations", response_model=List[InvitationRead])
def list_invitations(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return [
        invitation_read(invitation, family, inviter)
        for invitation, family, inviter in family_service.list_invitations(session, user_id)
    ]


@router.post(
    "/invitations", response_model=InvitationRead, status_code=status.HTTP_201_CREATED
)
def create_invitation(
    body: InvitationCreate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    invitation = family_service.invite(session, user_id, body.email)
    return invitation_read(
        invitation,
        session.get(Family, invitation.family_id),
        session.get(User, invitation.invited_by_id),
    )


@router.patch("/invitations/{invitation_id}", response_model=InvitationAnswered)
def answer_invitation(
    invitation_id: int,
    body: InvitationAction,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    family_id = family_service.respond_invitation(
        session, user_id, invitation_id, body.action
    )
    if family_id is None:
        return InvitationAnswered(message="Invitation rejected")
    return InvitationAnswered(message="Invitation accepted", family_id=family_id)


@router.delete("/members/{member_id}", response_model=Message)
def remove_member(
    member_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    family_service.remove_member(session, user_id, member_id)
    return Message(message="Member removed")


@router.get("/members/{member_user_id}/data", response_model=MemberData)
def member_data(
    member_user_id: int,
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    data = family_service.member_shared_data(
        session, user_id, member_user_id, start_date, end_date
    )
    return MemberData(
        user=UserBrief.model_validate(data["user"]),
        accounts=[account_read(session, a) for a in data["accounts"]],
        cards=[card_read(session, c) for c in data["cards"]],
        transactions=[TransactionRead.model_validate(t) for t in data["transactions"]],
        goals=[goal_read(session, g) for g in data["goals"]],
        categories=[CategoryRead.model_validate(c) for c in data["categories"]],
    )


@router.post("/share", response_model=ShareResult)
def share_item(
    body: ShareIn,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    item = family_service.set_shared(session, user_id, body.type, body.item_id, body.shared)
    return ShareResult(
        message="Item shared" if item.is_shared else "Item no longer shared",
        type=body.type,
        item_id=item.id,
        is_shared=item.is_shared,
    )
