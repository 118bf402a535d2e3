"""
Function calling example.

Runs a conversation where the backend may call real Python functions. The
function schema is generated from a pydantic model.

Run with:
    OPENAI_API_KEY=xxx python 02_function_calling.py
    python 02_function_calling.py --mock
"""

import argparse
import logging

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from setup_logging import setup_logging
from prompt_runner import (
    BackendConfig,
    CallableFunctionExecutor,
    FunctionDefinition,
    run_conversation,
)

setup_logging()
logger = logging.getLogger(__name__)


class GetOrderStatus(BaseModel):
    """Look up the shipping status of an order."""

    order_id: str = Field(description="Order number, e.g. A-1001")


ORDERS = {"A-1001": "shipped", "A-1002": "processing"}


def get_order_status(order_id: str) -> dict:
    return {"order_id": order_id, "status": ORDERS.get(order_id, "unknown")}


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Function calling example")
    parser.add_argument("--mock", action="store_true", help="Use the mock transport")
    parser.add_argument("--api", default="responses", help="chat_completions or responses")
    args = parser.parse_args()

    config = BackendConfig(
        provider="openai",
        api=args.api,
        model="gpt-4o-mini",
        system_prompt="You are a support agent. Use tools to look up orders.",
        tools=["functions"],
        functions=[FunctionDefinition.from_model("get_order_status", GetOrderStatus)],
        mock=args.mock,
        mock_function_outputs={"get_order_status": {"status": "shipped"}},
    )

    executor = CallableFunctionExecutor({"get_order_status": get_order_status})
    result = run_conversation(
        directive="You are a customer who wants to know where order A-1001 is.",
        first_message="Hi, where is my order A-1001?",
        max_turns=2,
        backend_config=config,
        executor=executor,
    )

    logger.info(f"Status: {result['status']}")
    for message in result["messages"]:
        print(f"[{message['turn']}] {message['role']}: {message['content']}")
        for call in message["tool_calls"]:
            print(f"    -> {call['function_name']}({call['arguments']})")


if __name__ == "__main__":
    main()
