# famfin/main.py
from __future__ import annotations

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from famfin.config import get_settings
from famfin.errors import register_error_handlers
from famfin.observability import RequestLogMiddleware, configure_logging
from famfin.routers.auth import router as auth_router
from famfin.routers.bank_accounts import router as bank_accounts_router
from famfin.routers.budgets import router as budgets_router
from famfin.routers.cards import router as cards_router
from famfin.routers.categories import router as categories_router
from famfin.routers.family import router as family_router
from famfin.routers.goals import router as goals_router
from famfin.routers.system import router as system_router
from famfin.routers.transactions import router as transactions_router
from famfin.routers.users import router as users_router

settings = get_settings()
configure_logging()

app = FastAPI(title="Family Finance", version="0.1.0")

# Middleware order: the last one added runs first, so the session is
# decoded before the request logger looks for user_id
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    session_cookie=settings.session_cookie,
    max_age=settings.session_max_age,
    same_site="lax",
)

register_error_handlers(app)

# Routers
app.include_router(system_router)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(bank_accounts_router)
app.include_router(cards_router)
app.include_router(categories_router)
app.include_router(transactions_router)
app.include_router(goals_router)
app.include_router(budgets_router)
app.include_router(family_router)
