# famfin/routers/auth.py
# Session-cookie auth: signup/signin/signout plus "who am I".

from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from famfin.db import get_session
from famfin.errors import Unauthenticated
from famfin.models import User
from famfin.schemas import Message, SigninIn, SignupIn, UserRead
from famfin.security import require_user_id
from famfin.services import users as users_service

router = APIRouter(prefix="/auth", tags=["auth"])


def user_read(session: Session, user: User) -> UserRead:
    return UserRead.model_validate(user).model_copy(
        update={
            "role_name": users_service.role_name(session, user),
            **users_service.user_counts(session, user.id),
        }
    )


@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupIn,
    request: Request,
    session: Session = Depends(get_session),
):
    user = users_service.create_user(session, body.name, body.email, body.password)
    request.session["user_id"] = user.id
    return user_read(session, user)


@router.post("/signin", response_model=UserRead)
def signin(
    body: SigninIn,
    request: Request,
    session: Session = Depends(get_session),
):
    user = users_service.authenticate(session, body.email, body.password)
    if user is None:
        raise Unauthenticated("Invalid email or password")
    request.session["user_id"] = user.id
    return user_read(session, user)


@router.post("/signout", response_model=Message)
def signout(request: Request):
    request.session.clear()
    return Message(message="Signed out")


@router.get("/me", response_model=UserRead)
def me(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    user = session.get(User, user_id)
    if user is None:
        raise Unauthenticated()
    return user_read(session, user)
