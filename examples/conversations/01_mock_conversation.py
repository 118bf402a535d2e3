"""
Mock conversation example.

Runs a three-turn conversation against every backend in mock mode. No API
keys or network access are needed.

Run with:
    python 01_mock_conversation.py
"""

import logging

from setup_logging import setup_logging
from prompt_runner import run_conversation

setup_logging()
logger = logging.getLogger(__name__)

BACKENDS = [
    ("openai", "chat_completions"),
    ("openai", "responses"),
    ("openai", "assistants"),
    ("anthropic", "messages"),
]


def main():
    for provider, api in BACKENDS:
        result = run_conversation(
            directive="You are a traveller asking about lost luggage. Be brief.",
            first_message="Hello, my suitcase didn't arrive.",
            max_turns=3,
            backend_config={
                "provider": provider,
                "api": api,
                "mock": True,
                "assistant_id": "asst_mock",
                "poll_interval": 0,
            },
        )

        logger.info(
            f"{provider}/{api}: {result['status']} after {result['total_turns']} turns"
        )
        for message in result["messages"]:
            print(f"  [{message['turn']}] {message['role']}: {message['content']}")
        print(f"  tokens: {result['tokens']}")
        print(f"  continuation: {result['continuation_token']}\n")


if __name__ == "__main__":
    main()
