# tests/test_family_service.py
from datetime import timedelta
from decimal import Decimal

import pytest
from conftest import default_category, make_account, make_user
from sqlmodel import select

from famfin.errors import Conflict, Forbidden, InvalidInput, InvitationExpired, NotFound
from famfin.models import (
    Family,
    FamilyInvitation,
    FamilyMember,
    InvitationStatus,
    MemberRole,
    TransactionType,
    utcnow,
)
from famfin.schemas import CardCreate, TransactionCreate
from famfin.services import family as family_service
from famfin.services import transactions as tx_service
from famfin.services.accounts import create_card


def _family_of_two(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    family = family_service.create_family(session, ana.id, "Silva")
    invitation = family_service.invite(session, ana.id, "bruno@home.net")
    family_service.respond_invitation(session, bruno.id, invitation.id, "accept")
    return ana, bruno, family


def _age(session, invitation, days):
    invitation.created_at = utcnow() - timedelta(days=days)
    session.add(invitation)
    session.commit()


def test_accepting_an_invitation_joins_as_member(session):
    ana, bruno, family = _family_of_two(session)

    member = session.exec(select(FamilyMember).where(FamilyMember.user_id == bruno.id)).one()
    assert member.family_id == family.id
    assert member.role == MemberRole.MEMBER
    invitation = session.exec(select(FamilyInvitation)).one()
    assert invitation.status == InvitationStatus.ACCEPTED
    assert invitation.responded_at is not None


def test_user_belongs_to_one_family(session):
    ana, bruno, _ = _family_of_two(session)
    with pytest.raises(Conflict):
        family_service.create_family(session, bruno.id, "Another")

    caio = make_user(session, name="Caio", email="caio@home.net")
    family_service.create_family(session, caio.id, "Souza")
    # bruno is already taken
    with pytest.raises(Conflict):
        family_service.invite(session, caio.id, "bruno@home.net")


def test_accepting_while_already_in_a_family_conflicts(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    caio = make_user(session, name="Caio", email="caio@home.net")
    family_service.create_family(session, ana.id, "Silva")
    family_service.create_family(session, caio.id, "Souza")

    from_ana = family_service.invite(session, ana.id, "bruno@home.net")
    from_caio = family_service.invite(session, caio.id, "bruno@home.net")
    family_service.respond_invitation(session, bruno.id, from_ana.id, "accept")

    with pytest.raises(Conflict):
        family_service.respond_invitation(session, bruno.id, from_caio.id, "accept")


def test_expired_invitation_is_rejected_on_accept(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    family_service.create_family(session, ana.id, "Silva")
    invitation = family_service.invite(session, ana.id, "bruno@home.net")
    _age(session, invitation, 31)

    with pytest.raises(InvitationExpired):
        family_service.respond_invitation(session, bruno.id, invitation.id, "accept")

    session.expire_all()
    assert session.get(FamilyInvitation, invitation.id).status == InvitationStatus.REJECTED
    assert session.exec(select(FamilyMember).where(FamilyMember.user_id == bruno.id)).first() is None


def test_listing_expires_stale_invitations(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    family_service.create_family(session, ana.id, "Silva")
    invitation = family_service.invite(session, ana.id, "bruno@home.net")
    _age(session, invitation, 45)

    assert family_service.list_invitations(session, bruno.id) == []
    session.expire_all()
    assert session.get(FamilyInvitation, invitation.id).status == InvitationStatus.REJECTED


def test_invitation_rules(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")

    with pytest.raises(InvalidInput):
        family_service.invite(session, ana.id, "bruno@home.net")  # no family yet

    family_service.create_family(session, ana.id, "Silva")
    with pytest.raises(NotFound):
        family_service.invite(session, ana.id, "nobody@home.net")
    with pytest.raises(InvalidInput):
        family_service.invite(session, ana.id, "ana@home.net")

    first = family_service.invite(session, ana.id, "Bruno@Home.net")
    with pytest.raises(Conflict):
        family_service.invite(session, ana.id, "bruno@home.net")

    # a rejected invitation is replaced by a fresh pending one
    family_service.respond_invitation(session, bruno.id, first.id, "reject")
    again = family_service.invite(session, ana.id, "bruno@home.net")
    assert again.status == InvitationStatus.PENDING
    assert len(session.exec(select(FamilyInvitation)).all()) == 1


def test_only_invitee_answers_and_only_once(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    family_service.create_family(session, ana.id, "Silva")
    invitation = family_service.invite(session, ana.id, "bruno@home.net")

    with pytest.raises(Forbidden):
        family_service.respond_invitation(session, ana.id, invitation.id, "accept")

    family_service.respond_invitation(session, bruno.id, invitation.id, "reject")
    with pytest.raises(InvalidInput):
        family_service.respond_invitation(session, bruno.id, invitation.id, "accept")


def test_member_cannot_invite_or_remove(session):
    ana, bruno, _ = _family_of_two(session)
    make_user(session, name="Caio", email="caio@home.net")

    with pytest.raises(Forbidden):
        family_service.invite(session, bruno.id, "caio@home.net")
    owner_row = session.exec(select(FamilyMember).where(FamilyMember.user_id == ana.id)).one()
    with pytest.raises(Forbidden):
        family_service.remove_member(session, bruno.id, owner_row.id)


def test_owner_removes_member_but_not_self(session):
    ana, bruno, _ = _family_of_two(session)
    owner_row = session.exec(select(FamilyMember).where(FamilyMember.user_id == ana.id)).one()
    bruno_row = session.exec(select(FamilyMember).where(FamilyMember.user_id == bruno.id)).one()

    with pytest.raises(InvalidInput):
        family_service.remove_member(session, ana.id, owner_row.id)

    family_service.remove_member(session, ana.id, bruno_row.id)
    assert session.exec(select(FamilyMember).where(FamilyMember.user_id == bruno.id)).first() is None


def test_leaving_and_disbanding(session):
    ana, bruno, family = _family_of_two(session)
    family_id = family.id

    with pytest.raises(Conflict):
        family_service.leave_family(session, ana.id)

    assert family_service.leave_family(session, bruno.id) == "left"
    assert family_service.leave_family(session, ana.id) == "disbanded"
    assert session.get(Family, family_id) is None
    assert session.exec(select(FamilyInvitation)).all() == []

    with pytest.raises(NotFound):
        family_service.leave_family(session, ana.id)


def test_shared_data_honours_the_flag(session):
    ana, bruno, _ = _family_of_two(session)
    account = make_account(session, ana)
    category = default_category(session)

    def _txn(description):
        return tx_service.create_transaction(
            session,
            ana.id,
            TransactionCreate(
                description=description,
                amount=Decimal("10"),
                type=TransactionType.EXPENSE,
                category_id=category.id,
                bank_account_id=account.id,
            ),
        )

    hidden = _txn("Private")
    visible = _txn("Rent share")
    family_service.set_shared(session, ana.id, "transaction", visible.id, True)

    # ana is in a family, so new cards start out shared
    card = create_card(session, ana.id, CardCreate(name="Visa", last_digits="4321"))
    assert card.is_shared is True

    data = family_service.member_shared_data(session, bruno.id, ana.id)
    assert [t.id for t in data["transactions"]] == [visible.id]
    assert hidden.id not in [t.id for t in data["transactions"]]
    assert [c.id for c in data["cards"]] == [card.id]
    assert data["accounts"] == []

    family_service.set_shared(session, ana.id, "card", card.id, False)
    data = family_service.member_shared_data(session, bruno.id, ana.id)
    assert data["cards"] == []


def test_shared_data_requires_same_family(session):
    ana, _, _ = _family_of_two(session)
    caio = make_user(session, name="Caio", email="caio@home.net")
    with pytest.raises(Forbidden):
        family_service.member_shared_data(session, caio.id, ana.id)


def test_sharing_rules(session):
    loner = make_user(session, name="Caio", email="caio@home.net")
    account = make_account(session, loner)
    with pytest.raises(InvalidInput):
        family_service.set_shared(session, loner.id, "bankAccount", account.id, True)

    ana, bruno, _ = _family_of_two(session)
    ana_account = make_account(session, ana)
    with pytest.raises(Forbidden):
        family_service.set_shared(session, bruno.id, "bankAccount", ana_account.id, True)
    shared = family_service.set_shared(session, ana.id, "bankAccount", ana_account.id, True)
    assert shared.is_shared is True


def test_timestamps_round_trip_as_naive_utc(session):
    ana = make_user(session)
    bruno = make_user(session, name="Bruno", email="bruno@home.net")
    family_service.create_family(session, ana.id, "Silva")
    invitation = family_service.invite(session, ana.id, "bruno@home.net")
    _age(session, invitation, 29)

    session.expire_all()
    stored = session.get(FamilyInvitation, invitation.id)
    assert stored.created_at.tzinfo is None
    assert stored.created_at < utcnow()
    # one day inside the window: still answerable
    assert family_service.respond_invitation(session, bruno.id, stored.id, "accept")
