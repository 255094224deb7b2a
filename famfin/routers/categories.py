# famfin/routers/categories.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from famfin.db import get_session
from famfin.models import TransactionType
from famfin.schemas import CategoryCreate, CategoryRead, CategoryUpdate, Message
from famfin.security import require_user_id
from famfin.services import categories as categories_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryRead])
def list_categories(
    type: Optional[TransactionType] = Query(default=None),
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return categories_service.list_categories(session, user_id, type)


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return categories_service.create_category(session, user_id, body)


@router.get("/{category_id}", response_model=CategoryRead)
def get_category(
    category_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return categories_service.get_visible_category(session, user_id, category_id)


@router.patch("/{category_id}", response_model=CategoryRead)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return categories_service.update_category(
        session, user_id, category_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/{category_id}", response_model=Message)
def delete_category(
    category_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    categories_service.delete_category(session, user_id, category_id)
    return Message(message="Category deleted")
