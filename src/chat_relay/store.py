from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager

from .db import Message, User

logger = logging.getLogger(__name__)


def get_user_by_phone(db: Session, phone: str) -> User | None:
    """Return the user registered under `phone`, or None if unknown or the lookup failed."""
    try:
        return db.scalars(select(User).where(User.phone_number == phone).limit(1)).first()
    except SQLAlchemyError:
        logger.exception("Failed to look up user", extra={"phone": phone})
        db.rollback()
        return None


def create_user(db: Session, phone: str) -> User | None:
    """
    Register a new user for `phone`. Returns None if the insert failed.

    If a concurrent request registered the same phone first, that user is returned.
    """
    try:
        user = User(phone_number=phone)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("New user created", extra={"user_id": user.id, "phone": phone})
        return user
    except IntegrityError:
        db.rollback()
        logger.info("User already registered", extra={"phone": phone})
        return get_user_by_phone(db, phone)
    except SQLAlchemyError:
        logger.exception("Failed to create user", extra={"phone": phone})
        db.rollback()
        return None


def save_message(db: Session, user_id: int, content: str, direction: str) -> Message | None:
    """
    Append a message to the conversation history.

    Database errors are logged and swallowed; the caller gets None.
    """
    try:
        message = Message(user_id=user_id, content=content, direction=direction)
        db.add(message)
        db.commit()
        db.refresh(message)
    except SQLAlchemyError:
        logger.exception("Failed to save message", extra={"user_id": user_id, "direction": direction})
        db.rollback()
        return None

    logger.info("Message saved", extra={"user_id": user_id, "direction": direction})
    return message


def recent_messages(db: Session, limit: int, phone: str | None = None) -> list[Message]:
    """Newest messages first, optionally restricted to one user's phone number."""
    stmt = select(Message).join(Message.user).options(contains_eager(Message.user))
    if phone:
        stmt = stmt.where(User.phone_number == phone)
    stmt = stmt.order_by(Message.created_at.desc(), Message.id.desc()).limit(limit)
    return list(db.scalars(stmt).all())
