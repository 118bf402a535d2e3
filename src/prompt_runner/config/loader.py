"""
Backend configuration loading.

Named backends and provider credentials live in ``runner_config.yaml`` at
the project root:

    backends:
      support_bot:
        provider: openai
        api: responses
        model: gpt-4o
        tools: [web_search]
    providers:
      openai:
        api_key: sk-...

API keys fall back to ``<PROVIDER>_API_KEY`` environment variables, so the
``providers`` section is optional.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from prompt_runner.config.types import BackendConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "runner_config.yaml"


def get_config_path() -> Path:
    """
    Get the path to the runner configuration file.

    Looks for runner_config.yaml in the current working directory (project root).
    """
    return Path(os.getcwd()) / CONFIG_FILENAME


def _read_config() -> dict[str, Any]:
    config_path = get_config_path()
    logger.debug(f"Loading config from: {config_path}")

    if not config_path.exists():
        raise FileNotFoundError(
            f"{CONFIG_FILENAME} not found at {config_path}. "
            "Create it with a 'backends' section describing your backends."
        )

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"{config_path} must contain a mapping at the top level")
    return config


def load_backend_config(name: str) -> BackendConfig:
    """
    Load a named backend from the YAML file at project root.

    Args:
        name: Key under ``backends`` in runner_config.yaml

    Returns:
        Validated BackendConfig

    Raises:
        FileNotFoundError: If runner_config.yaml doesn't exist
        ValueError: If the backend is missing or its settings are invalid
        RuntimeError: If the file can't be read or parsed
    """
    try:
        config = _read_config()
        backend = (config.get("backends") or {}).get(name)

        if not backend:
            raise ValueError(
                f"Backend '{name}' not found in {get_config_path()}. "
                f"Please add it under 'backends'."
            )
        if not isinstance(backend, dict):
            raise ValueError(f"Backend '{name}' must be a mapping of settings")

        try:
            return BackendConfig.model_validate(backend)
        except ValidationError as e:
            raise ValueError(f"Invalid settings for backend '{name}': {e}") from e
    except (FileNotFoundError, ValueError):
        raise
    except Exception as e:
        raise RuntimeError(f"Error loading backend config: {e}") from e


def resolve_api_key(provider: str) -> str | None:
    """
    Find the API key for a provider.

    Checks ``providers.<provider>.api_key`` in runner_config.yaml first, then
    the ``<PROVIDER>_API_KEY`` environment variable.

    Returns:
        The key, or None if neither source sets one
    """
    provider = provider.strip().lower()
    config_path = get_config_path()

    if config_path.exists():
        try:
            config = _read_config()
        except (ValueError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable {config_path}: {e}")
        else:
            providers = config.get("providers") or {}
            api_key = (providers.get(provider) or {}).get("api_key")
            if api_key:
                return str(api_key)

    return os.environ.get(f"{provider.upper()}_API_KEY") or None
