from __future__ import annotations

import json

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from chat_relay.completion import APOLOGY, SYSTEM_PROMPT, process_message
from chat_relay.db import User
from chat_relay.functions import FUNCTIONS


def _user() -> User:
    return User(id=7, phone_number="5511999990000")


def _function_call(name: str, args: dict[str, object], call_id: str = "call_1") -> AIMessage:
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": call_id}])


def test_direct_answer_without_function_call(install_model) -> None:
    fake_model = install_model(AIMessage(content="Olá! Como posso ajudar?"))

    reply = process_message(_user(), "Oi")

    assert reply == "Olá! Como posso ajudar?"
    assert fake_model.bound_tools == FUNCTIONS
    assert len(fake_model.called_messages) == 1

    sent = fake_model.called_messages[0]
    assert isinstance(sent[0], SystemMessage)
    assert sent[0].content == SYSTEM_PROMPT
    assert isinstance(sent[1], HumanMessage)
    assert sent[1].content == "Oi"


def test_function_call_round_trip(install_model) -> None:
    fake_model = install_model(
        _function_call("create_purchase", {"amount": 50, "category": "mercado"}),
        AIMessage(content="Registrei sua compra de R$ 50 em mercado."),
    )

    reply = process_message(_user(), "Gastei 50 no mercado")

    assert reply == "Registrei sua compra de R$ 50 em mercado."
    assert len(fake_model.called_messages) == 2

    second = fake_model.called_messages[1]
    assert isinstance(second[2], AIMessage)
    tool_message = second[3]
    assert isinstance(tool_message, ToolMessage)
    assert tool_message.tool_call_id == "call_1"
    assert json.loads(tool_message.content) == {
        "status": "success",
        "message": "Compra criada com sucesso.",
    }


def test_unknown_function_feeds_error_result(install_model) -> None:
    fake_model = install_model(
        _function_call("delete_purchase", {"purchase_id": "abc"}),
        AIMessage(content="Não consigo fazer isso."),
    )

    reply = process_message(_user(), "Apaga a compra abc")

    assert reply == "Não consigo fazer isso."
    tool_message = fake_model.called_messages[1][-1]
    assert json.loads(tool_message.content) == {
        "status": "error",
        "message": "Função não reconhecida.",
    }


def test_completion_failure_returns_apology(install_model) -> None:
    install_model(RuntimeError("API down"))

    assert process_message(_user(), "Oi") == APOLOGY


def test_failure_on_second_call_returns_apology(install_model) -> None:
    install_model(
        _function_call("edit_purchase", {"purchase_id": "abc", "amount": 10}),
        RuntimeError("timeout"),
    )

    assert process_message(_user(), "Muda a compra abc para 10") == APOLOGY


def test_malformed_function_arguments_return_apology(install_model) -> None:
    install_model(
        AIMessage(
            content="",
            invalid_tool_calls=[
                {"name": "create_purchase", "args": "{amount:", "id": "call_1", "error": None}
            ],
        )
    )

    assert process_message(_user(), "Gastei 50") == APOLOGY
