import os  # settings come from environment variables
from functools import lru_cache  # build Settings once per process

from dotenv import load_dotenv  # picks up a local .env during development
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    # signs the session cookie; rotating it logs everybody out
    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-change")

    # SQLite file by default; point at Postgres in production
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./famfin.db")

    session_cookie: str = os.getenv("SESSION_COOKIE_NAME", "famfin_session")
    session_max_age: int = int(os.getenv("SESSION_MAX_AGE", str(60 * 60 * 24 * 7)))

    # pending family invitations older than this are treated as rejected
    invitation_ttl_days: int = int(os.getenv("INVITATION_TTL_DAYS", "30"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # optional bootstrap admin, used only by `python -m famfin.seed`
    admin_email: str | None = os.getenv("ADMIN_EMAIL") or None
    admin_password: str | None = os.getenv("ADMIN_PASSWORD") or None


@lru_cache
def get_settings() -> Settings:
    return Settings()
