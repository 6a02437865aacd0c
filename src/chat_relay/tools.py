from __future__ import annotations

import argparse
import csv
from collections.abc import Iterator

from .db import RECEIVED, Message, SessionLocal
from .store import recent_messages

CSV_COLUMNS = ["id", "created_at", "phone", "user_id", "direction", "content"]


def iter_recent_messages(limit: int, phone: str | None = None) -> Iterator[Message]:
    """Yield recent messages ordered by newest first."""
    db = SessionLocal()
    try:
        yield from recent_messages(db, limit, phone=phone)
    finally:
        db.close()


def _row(message: Message) -> list[object]:
    return [
        message.id,
        message.created_at.isoformat() if message.created_at else "",
        message.user.phone_number,
        message.user_id,
        message.direction,
        message.content.strip(),
    ]


def print_recent_messages(limit: int, phone: str | None = None) -> None:
    """Print recent messages in a human-readable form."""
    for message in iter_recent_messages(limit, phone):
        arrow = "<-" if message.direction == RECEIVED else "->"
        print(f"[{message.created_at}] #{message.id} {arrow} {message.user.phone_number}")
        print(f"    {message.content.strip()}")


def export_recent_messages_csv(limit: int, csv_path: str, phone: str | None = None) -> int:
    """Export recent messages to a CSV file. Returns the number of rows written."""
    count = 0
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for message in iter_recent_messages(limit, phone):
            writer.writerow(_row(message))
            count += 1
    return count


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Inspect recent messages stored in the chat-relay database."
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of most recent messages to show/export (default: 20).",
    )
    parser.add_argument(
        "--phone",
        type=str,
        default=None,
        help="Only show messages exchanged with this phone number.",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default="",
        help="Optional path to export messages as CSV. If omitted, only prints to stdout.",
    )
    args = parser.parse_args(argv)

    if args.csv:
        written = export_recent_messages_csv(limit=args.limit, csv_path=args.csv, phone=args.phone)
        print(f"Exported {written} messages to {args.csv}")
    else:
        print_recent_messages(limit=args.limit, phone=args.phone)


if __name__ == "__main__":
    main()
