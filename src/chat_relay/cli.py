from __future__ import annotations

from .config import get_settings
from .db import SessionLocal, init_db
from .logging_utils import setup_logging
from .pipeline import handle_message

CLI_PHONE = "+000000000_console"


def _print_reply(phone: str, message: str) -> None:
    print(f"bot> {message}\n")


def chat() -> None:
    """
    Interactive console chat.

    Uses the full pipeline (user lookup, history, completion with functions)
    and logs to the database with a fixed pseudo-phone number. Replies are
    printed instead of being sent through Z-API.
    """
    setup_logging("WARNING")
    init_db()
    db = SessionLocal()
    print(f"Console chat ({get_settings().openai_model}). Type /quit to exit.\n")
    try:
        while True:
            try:
                user_input = input("you> ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not user_input:
                continue
            if user_input.lower() in {"/q", "/quit", "/exit"}:
                break
            handle_message(db=db, phone=CLI_PHONE, text=user_input, send=_print_reply)
    finally:
        db.close()


def main() -> None:
    chat()


if __name__ == "__main__":
    main()
