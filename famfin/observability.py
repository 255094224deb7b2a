# famfin/observability.py
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware

from famfin.config import get_settings


def configure_logging() -> None:
    """Apply LOG_LEVEL once; a no-op if the host already configured logging."""
    level = getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("famfin").setLevel(level)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.perf_counter()

        # only read session if SessionMiddleware already attached it
        sess = request.scope.get("session")
        user_id = sess.get("user_id") if sess else None

        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logging.getLogger("famfin.req").info(
            "%s %s -> %s in %.1fms user=%s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            user_id,
        )
        return response
