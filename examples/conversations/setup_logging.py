"""Logging setup shared by the conversation examples."""

import logging

SDK_LOGGERS = ("openai", "anthropic", "httpx", "httpcore")


def setup_logging(level=logging.INFO, trace_polling: bool = False):
    """Show prompt_runner logs at ``level`` and keep SDK clients at WARNING.

    Args:
        level: Log level for the prompt_runner package (default: INFO)
        trace_polling: If True, log every thread run poll at DEBUG
    """
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(levelname)-7s %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("prompt_runner").setLevel(level)
    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if trace_polling:
        logging.getLogger("prompt_runner.adapters.polling").setLevel(logging.DEBUG)
