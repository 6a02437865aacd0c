from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import Body, Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from .config import get_settings
from .db import SessionLocal, init_db
from .logging_utils import RequestLoggingMiddleware, setup_logging
from .payload import RECEIVED_CALLBACK, CallbackPayload, extract_content
from .pipeline import handle_message
from .store import recent_messages

setup_logging(get_settings().log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: runs once before the app starts serving requests
    init_db()
    yield


app = FastAPI(title="chat-relay", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)

# --- Admin protection ---

ALLOWED_ADMIN_IPS = {"127.0.0.1", "::1"}


def verify_admin(request: Request) -> None:
    """
    Simple protection for /admin endpoints:
    - only allow requests from ALLOWED_ADMIN_IPS
    - require X-Admin-Token header that matches ADMIN_TOKEN env var
    """
    client_host = request.client.host if request.client else None

    if client_host not in ALLOWED_ADMIN_IPS:
        raise HTTPException(status_code=403, detail="Forbidden")

    admin_token = get_settings().admin_token
    if not admin_token:
        raise HTTPException(status_code=500, detail="ADMIN_TOKEN not configured")

    if request.headers.get("X-Admin-Token") != admin_token:
        raise HTTPException(status_code=401, detail="Invalid admin token")


# --- DB dependency ---


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# --- Routes ---


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/webhook")
def webhook(body: dict[str, Any] = Body(...), db: Session = Depends(get_db)) -> Response:
    """
    Z-API webhook endpoint.

    Behaviour:
      - 404 for anything other than a received-message callback
      - 200 without side effects for messages sent by this number
      - otherwise relay the message to the assistant and answer the sender
      - 500 if processing fails
    """
    if body.get("type") != RECEIVED_CALLBACK:
        return Response(status_code=404)

    try:
        payload = CallbackPayload.model_validate(body)

        # Ignore messages sent by the bot itself
        if payload.is_from_me:
            return Response(status_code=200)

        sender_phone = payload.sender_phone
        if not sender_phone:
            raise ValueError("Callback has no sender phone")

        content = extract_content(payload)
        logger.info(
            "Message received",
            extra={"phone": sender_phone, "content": content, "is_group": bool(payload.is_group)},
        )

        handle_message(db=db, phone=sender_phone, text=content)
    except Exception:
        logger.exception("Webhook processing failed")
        return Response(status_code=500)

    return PlainTextResponse("EVENT_RECEIVED")


@app.get("/admin/messages")
def admin_messages(
    limit: int = 50,
    phone: str | None = None,
    db: Session = Depends(get_db),
    _: None = Depends(verify_admin),
) -> JSONResponse:
    """
    Inspect recent conversation history.

    Example:
      GET /admin/messages
      GET /admin/messages?limit=10&phone=5511999999999
    """
    # Clamp limit to a reasonable range
    safe_limit = max(1, min(limit, 200))
    messages = recent_messages(db, safe_limit, phone=phone)

    payload = [
        {
            "id": m.id,
            "user_id": m.user_id,
            "phone": m.user.phone_number,
            "direction": m.direction,
            "content": m.content,
            "created_at": m.created_at.isoformat(),
        }
        for m in messages
    ]
    return JSONResponse(payload)


def serve() -> None:
    settings = get_settings()
    logger.info("Starting server", extra={"host": settings.host, "port": settings.port})
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    serve()
