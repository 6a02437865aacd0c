from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from .completion import process_message
from .db import RECEIVED, SENT, User
from .store import create_user, get_user_by_phone, save_message
from .zapi_client import send_text

Sender = Callable[[str, str], object]


@dataclass
class RelayResult:
    user_id: int
    reply: str | None


def get_or_create_user(db: Session, phone: str) -> User:
    user = get_user_by_phone(db, phone)
    if user is not None:
        return user

    # A None here may mean another request created the user in the meantime
    user = create_user(db, phone) or get_user_by_phone(db, phone)
    if user is None:
        raise RuntimeError(f"Could not find or create user for {phone}")
    return user


def handle_message(
    db: Session, phone: str, text: str, send: Sender | None = None
) -> RelayResult:
    """
    Core flow for one inbound message:
    - find or create the sender's user record
    - store the received message
    - ask the completion API for a reply
    - deliver the reply with `send` (Z-API by default) and store it as sent
    """
    send = send or send_text

    # 1. Identify the user
    user = get_or_create_user(db, phone)

    # 2. Save incoming message
    save_message(db, user.id, text, RECEIVED)

    # 3. Ask the assistant
    reply = process_message(user, text)

    # 4. Deliver and record the reply, if there is one
    if reply:
        send(phone, reply)
        save_message(db, user.id, reply, SENT)

    return RelayResult(user_id=user.id, reply=reply or None)
