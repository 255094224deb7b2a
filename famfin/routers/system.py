# famfin/routers/system.py
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse  # health check answers in plain text

router = APIRouter(tags=["system"])


@router.get("/healthz", response_class=PlainTextResponse)  # tiny health check
def healthz():
    return "ok"
