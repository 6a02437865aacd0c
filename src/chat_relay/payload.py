from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field

RECEIVED_CALLBACK: Final[str] = "ReceivedCallback"
UNSUPPORTED_MESSAGE: Final[str] = "[Mensagem não suportada]"


class TextContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str | None = None


class MediaContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    caption: str | None = None


class CallbackPayload(BaseModel):
    """
    The subset of a Z-API webhook callback this service reads.

    Only received-message callbacks are parsed; fields are optional and
    lenient because Z-API omits or nulls them freely.
    """

    # Z-API may send numeric phones and null flags
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    type: str | None = None
    is_group: bool | None = Field(default=None, alias="isGroup")
    from_me: bool | None = Field(default=None, alias="fromMe")
    phone: str | None = None  # sender, or the group id for group messages
    participant_phone: str | None = Field(default=None, alias="participantPhone")

    text: TextContent | None = None
    image: MediaContent | None = None
    video: MediaContent | None = None

    @property
    def is_from_me(self) -> bool:
        return bool(self.from_me)

    @property
    def sender_phone(self) -> str | None:
        """The real author: the participant in a group, else the chat phone."""
        return self.participant_phone or self.phone


def extract_content(payload: CallbackPayload) -> str:
    """Pick the text to relay: plain text, then image caption, then video caption."""
    if payload.text and payload.text.message:
        return payload.text.message
    if payload.image and payload.image.caption:
        return payload.image.caption
    if payload.video and payload.video.caption:
        return payload.video.caption
    return UNSUPPORTED_MESSAGE
