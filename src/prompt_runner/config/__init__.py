"""
Backend configuration.

Usage:
    from prompt_runner.config import load_backend_config

    config = load_backend_config("support_bot")
"""

from prompt_runner.config.loader import (
    get_config_path,
    load_backend_config,
    resolve_api_key,
)
from prompt_runner.config.types import BackendConfig, FunctionDefinition

__all__ = [
    "BackendConfig",
    "FunctionDefinition",
    "get_config_path",
    "load_backend_config",
    "resolve_api_key",
]
