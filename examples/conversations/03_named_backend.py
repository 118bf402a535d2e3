"""
Named backend example.

Loads a backend from runner_config.yaml and runs a conversation with a live
simulated user.

Run with:
    python 03_named_backend.py --backend support_bot --turns 4
"""

import argparse
import json
import logging

from dotenv import load_dotenv

from setup_logging import setup_logging
from prompt_runner import load_backend_config, run_conversation

logger = logging.getLogger(__name__)


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Run a conversation against a named backend")
    parser.add_argument("--backend", default="support_bot", help="Key under 'backends'")
    parser.add_argument("--turns", type=int, default=3, help="Maximum turns")
    parser.add_argument(
        "--directive",
        default="You are a curious customer comparing subscription plans.",
        help="Who the simulated user is",
    )
    parser.add_argument("--first-message", default="Hi! What plans do you offer?")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--trace-polling", action="store_true", help="Log every run poll")
    args = parser.parse_args()

    setup_logging(
        getattr(logging, args.log_level.upper(), logging.INFO),
        trace_polling=args.trace_polling,
    )

    config = load_backend_config(args.backend)
    logger.info(f"Loaded backend '{args.backend}' ({config.provider}/{config.api})")

    result = run_conversation(
        directive=args.directive,
        first_message=args.first_message,
        max_turns=args.turns,
        backend_config=config,
    )
    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
