from __future__ import annotations

import json
import logging
from typing import Final, cast

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langchain_openai import ChatOpenAI

from .config import get_settings
from .db import User
from .functions import FUNCTIONS, execute_function

logger = logging.getLogger(__name__)

SYSTEM_PROMPT: Final[str] = (
    "Você é um assistente financeiro pessoal que ajuda os usuários a gerenciar suas finanças."
)

APOLOGY: Final[str] = "Desculpe, ocorreu um erro ao processar sua mensagem."

_model: ChatOpenAI | None = None


def get_model() -> ChatOpenAI:
    """
    Lazily create and cache a ChatOpenAI model.

    The model name comes from OPENAI_MODEL; the API key from OPENAI_API_KEY.
    """
    global _model
    if _model is None:
        _model = ChatOpenAI(model=get_settings().openai_model)
    return _model


def _text_of(message: BaseMessage) -> str:
    # For ChatOpenAI, response.content is always a string
    return cast(str, message.content)  # type: ignore[reportUnknownMemberType]


def _complete(user: User, user_message: str) -> str:
    model = get_model()
    model_with_functions = model.bind_tools(FUNCTIONS, tool_choice="auto")  # type: ignore[reportUnknownMemberType]

    history: list[BaseMessage] = [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(content=user_message),
    ]

    ai_msg = cast(AIMessage, model_with_functions.invoke(history))

    if ai_msg.invalid_tool_calls:
        raise ValueError(f"Malformed function call from model: {ai_msg.invalid_tool_calls}")

    # No function requested: the first answer is the reply.
    if not ai_msg.tool_calls:
        return _text_of(ai_msg)

    history.append(ai_msg)
    for tool_call in ai_msg.tool_calls:
        logger.info(
            "Assistant requested function call",
            extra={"function": tool_call["name"], "user_id": user.id},
        )
        result = execute_function(user, tool_call["name"], tool_call["args"])
        history.append(
            ToolMessage(
                content=json.dumps(result, ensure_ascii=False),
                tool_call_id=tool_call["id"],
                name=tool_call["name"],
            )
        )

    # Final natural-language answer, without offering the functions again
    final_msg = model.invoke(history)
    return _text_of(final_msg)


def process_message(user: User, user_message: str) -> str:
    """
    Ask the completion API for a reply to `user_message`.

    At most one function round-trip is made: if the model requests functions,
    their results are fed back and a second completion produces the reply.
    Any failure is logged and answered with a fixed apology.
    """
    try:
        return _complete(user, user_message)
    except Exception:
        logger.exception("Completion failed", extra={"user_id": user.id})
        return APOLOGY
