from __future__ import annotations

import logging
from typing import Any, Final

from .db import User

logger = logging.getLogger(__name__)

# OpenAI function declarations offered to the model on the first completion.
FUNCTIONS: Final[list[dict[str, Any]]] = [
    {
        "name": "create_purchase",
        "description": "Cria uma nova compra para o usuário.",
        "parameters": {
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": "Valor da compra"},
                "category": {"type": "string", "description": "Categoria da compra"},
                "date": {
                    "type": "string",
                    "description": "Data da compra no formato YYYY-MM-DD",
                },
                "description": {"type": "string", "description": "Descrição da compra"},
            },
            "required": ["amount", "category"],
        },
    },
    {
        "name": "edit_purchase",
        "description": "Edita uma compra existente.",
        "parameters": {
            "type": "object",
            "properties": {
                "purchase_id": {"type": "string", "description": "ID da compra a ser editada"},
                "amount": {"type": "number", "description": "Novo valor da compra"},
                "category": {"type": "string", "description": "Nova categoria"},
                "date": {
                    "type": "string",
                    "description": "Nova data da compra no formato YYYY-MM-DD",
                },
                "description": {"type": "string", "description": "Nova descrição"},
            },
            "required": ["purchase_id"],
        },
    },
]

# Purchases are not stored yet; each function answers with a fixed result.
PLACEHOLDER_RESULTS: Final[dict[str, dict[str, str]]] = {
    "create_purchase": {"status": "success", "message": "Compra criada com sucesso."},
    "edit_purchase": {"status": "success", "message": "Compra editada com sucesso."},
}

UNKNOWN_FUNCTION_RESULT: Final[dict[str, str]] = {
    "status": "error",
    "message": "Função não reconhecida.",
}


def execute_function(user: User, name: str, args: dict[str, Any]) -> dict[str, str]:
    """Resolve a function call requested by the model for `user`."""
    result = PLACEHOLDER_RESULTS.get(name)
    if result is None:
        logger.warning("Unknown function requested", extra={"function": name, "user_id": user.id})
        return dict(UNKNOWN_FUNCTION_RESULT)

    logger.info(
        "Executing function",
        extra={"function": name, "user_id": user.id, "arguments": args},
    )
    return dict(result)
