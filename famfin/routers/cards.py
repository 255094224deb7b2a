# famfin/routers/cards.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from famfin.db import get_session
from famfin.models import Card, Transaction
from famfin.schemas import CardCreate, CardRead, CardUpdate, Message
from famfin.security import require_user_id
from famfin.services import accounts as accounts_service
from famfin.services.lifecycle import count_where

router = APIRouter(prefix="/cards", tags=["cards"])


def card_read(session: Session, card: Card) -> CardRead:
    return CardRead.model_validate(card).model_copy(
        update={"transaction_count": count_where(session, Transaction.card_id, card.id)}
    )


@router.get("", response_model=List[CardRead])
def list_cards(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return [card_read(session, card) for card in accounts_service.list_cards(session, user_id)]


@router.post("", response_model=CardRead, status_code=status.HTTP_201_CREATED)
def create_card(
    body: CardCreate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return card_read(session, accounts_service.create_card(session, user_id, body))


@router.get("/{card_id}", response_model=CardRead)
def get_card(
    card_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return card_read(session, accounts_service.get_own_card(session, user_id, card_id))


@router.patch("/{card_id}", response_model=CardRead)
def update_card(
    card_id: int,
    body: CardUpdate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    card = accounts_service.update_card(
        session, user_id, card_id, body.model_dump(exclude_unset=True)
    )
    return card_read(session, card)


@router.delete("/{card_id}", response_model=Message)
def delete_card(
    card_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    outcome = accounts_service.delete_card(session, user_id, card_id)
    if outcome is not None:
        return Message(message="Card archived because transactions use it")
    return Message(message="Card deleted")
