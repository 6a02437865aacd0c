from __future__ import annotations

import logging

import httpx

from .config import get_settings

logger = logging.getLogger(__name__)

SEND_TEXT_PATH = "/send-text"


def send_text(phone: str, message: str, transport: httpx.BaseTransport | None = None) -> bool:
    """
    Send a text message to `phone` through the Z-API send-text endpoint.

    Errors are logged and swallowed, and nothing is retried. Returns True
    when the provider accepted the message.
    """
    settings = get_settings()
    if not settings.zapi_base_url:
        logger.error("ZAPI_BASE_URL is not configured; message not sent", extra={"phone": phone})
        return False

    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.zapi_token}",
    }

    try:
        with httpx.Client(timeout=settings.zapi_timeout, transport=transport) as client:
            response = client.post(
                settings.zapi_base_url + SEND_TEXT_PATH,
                json={"phone": phone, "message": message},
                headers=headers,
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(
            "Failed to send message",
            extra={
                "phone": phone,
                "status": e.response.status_code,
                "response_body": e.response.text,
            },
        )
        return False
    except httpx.HTTPError as e:
        logger.error("Failed to send message", extra={"phone": phone, "error": str(e)})
        return False

    logger.info("Message sent", extra={"phone": phone})
    return True
