# famfin/routers/users.py
# Admin user management and the role catalogue.

from typing import List

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from famfin.db import get_session
from famfin.routers.auth import user_read
from famfin.schemas import RoleRead, UserCreate, UserRead
from famfin.security import require_admin, require_user_id
from famfin.services import users as users_service

router = APIRouter(tags=["users"])


@router.get("/users", response_model=List[UserRead])
def list_users(
    _admin_id: int = Depends(require_admin),
    session: Session = Depends(get_session),
):
    return [user_read(session, user) for user in users_service.list_users(session)]


@router.post("/users", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    _admin_id: int = Depends(require_admin),
    session: Session = Depends(get_session),
):
    user = users_service.create_user(
        session, body.name, body.email, body.password, role_id=body.role_id
    )
    return user_read(session, user)


@router.get("/roles", response_model=List[RoleRead])
def list_roles(
    _user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    return [
        RoleRead.model_validate(role).model_copy(update={"user_count": count})
        for role, count in users_service.list_roles(session)
    ]
