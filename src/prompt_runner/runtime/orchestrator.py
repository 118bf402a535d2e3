"""
Conversation orchestration.

Drives the turn loop: the interlocutor supplies each user turn, the backend
adapter answers it, and both messages are appended to the run's state. The
run ends at ``max_turns`` or when the interlocutor signals the end. Any
exception aborts the run and is reported as an ``error`` result carrying
the partial transcript.

Example:
    from prompt_runner.runtime import run_conversation

    result = run_conversation(
        directive="You are a customer asking about a late order",
        first_message="Hello",
        max_turns=3,
        backend_config={"provider": "openai", "api": "chat_completions"},
    )
    result["status"]  # "completed"
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from openai import OpenAI

from prompt_runner.adapters import BackendAdapter, create_backend
from prompt_runner.config.loader import resolve_api_key
from prompt_runner.config.types import BackendConfig
from prompt_runner.core.api_types import display_name
from prompt_runner.core.conversation import (
    ConversationResult,
    ConversationState,
    NormalizedMessage,
)
from prompt_runner.core.exceptions import ConfigurationError
from prompt_runner.core.protocols import FunctionExecutor
from prompt_runner.core.tokens import TokenAggregator
from prompt_runner.core.tool_results import ToolResultExtractor

from .interlocutor import InterlocutorSimulator, LiveInterlocutor, MockInterlocutor

if TYPE_CHECKING:
    from anthropic import Anthropic

logger = logging.getLogger(__name__)


class ConversationOrchestrator:
    """
    Runs one simulated conversation against one backend.

    Each call to ``run()`` owns a fresh ConversationState, so an
    orchestrator can be reused for sequential runs. Backends with server-side
    state (threads, response chains) start a new chain per run.
    """

    def __init__(
        self,
        backend: BackendAdapter,
        interlocutor: InterlocutorSimulator,
        *,
        clock: Callable[[], float] = time.monotonic,
        token_aggregator: TokenAggregator | None = None,
    ):
        self.backend = backend
        self.interlocutor = interlocutor
        self._clock = clock
        self._tokens = token_aggregator or TokenAggregator()

    def run(
        self,
        directive: str,
        first_message: str = "",
        max_turns: int = 5,
        metadata: Mapping[str, Any] | None = None,
    ) -> ConversationResult:
        """
        Run the conversation.

        Args:
            directive: Instructions for the simulated user
            first_message: Opening user message; if blank the interlocutor
                writes it
            max_turns: Upper bound on turns
            metadata: Extra entries for the result metadata

        Returns:
            ConversationResult with status "completed" or "error"

        Raises:
            ValueError: If max_turns is less than 1
        """
        if max_turns < 1:
            raise ValueError(f"max_turns must be at least 1, got {max_turns}")

        config = self.backend.config
        state = ConversationState()
        limited_turns: list[int] = []
        error: str | None = None
        started = self._clock()

        logger.info(
            f"Starting conversation: backend={config.api_type.value}, "
            f"model={config.model}, max_turns={max_turns}"
        )

        try:
            for turn in range(1, max_turns + 1):
                if turn == 1 and first_message.strip():
                    user_text: str | None = first_message.strip()
                else:
                    user_text = self.interlocutor.generate_next_message(
                        directive, list(state.messages), turn
                    )

                if user_text is None:
                    logger.info(f"Interlocutor ended the conversation before turn {turn}")
                    break

                state.turn = turn
                state.append(NormalizedMessage.user(user_text, turn))

                result = self.backend.send_turn(state)
                state.continuation = result.continuation

                turn_metadata: dict[str, Any] = {}
                if result.continuation is not None:
                    turn_metadata["continuation_token"] = result.continuation.to_dict()
                if result.tool_call_limit_reached:
                    limited_turns.append(turn)
                    turn_metadata["tool_call_limit_reached"] = True

                state.append(
                    NormalizedMessage.from_response(result.response, turn, turn_metadata)
                )
                logger.debug(
                    f"Turn {turn} complete ({len(result.all_responses)} backend responses)"
                )

            state.status = "completed"
        except Exception as e:
            logger.error(f"Conversation aborted at turn {state.turn}: {e}", exc_info=True)
            state.status = "error"
            error = f"{type(e).__name__}: {e}"

        if limited_turns:
            logger.warning(
                f"Tool call limit reached on turns {limited_turns}; "
                f"those replies may contain unresolved calls"
            )

        elapsed_ms = int((self._clock() - started) * 1000)
        assistant_messages = [m for m in state.messages if m.role == "assistant"]
        extractor = ToolResultExtractor(assistant_messages)

        run_metadata: dict[str, Any] = {
            "provider": config.provider,
            "api": config.api,
            "api_type": config.api_type.value,
            "backend": display_name(config.api_type),
            "model": config.model,
            "max_turns": max_turns,
            "interlocutor_prompt": directive,
            "tool_call_limit_turns": limited_turns,
            "mock": self.backend.is_mock,
        }
        run_metadata.update(metadata or {})

        logger.info(
            f"Conversation {state.status}: {len(assistant_messages)} turns in {elapsed_ms}ms"
        )

        return ConversationResult(
            messages=list(state.messages),
            status=state.status,
            continuation_token=state.continuation,
            error=error,
            tokens=self._tokens.aggregate_from_messages(state.messages),
            response_time_ms=elapsed_ms,
            web_search_results=extractor.web_search_results,
            code_interpreter_results=extractor.code_interpreter_results,
            file_search_results=extractor.file_search_results,
            metadata=run_metadata,
        )


def run_conversation(
    directive: str,
    first_message: str,
    max_turns: int,
    backend_config: BackendConfig | Mapping[str, Any],
    *,
    openai_client: OpenAI | None = None,
    anthropic_client: Anthropic | None = None,
    interlocutor: InterlocutorSimulator | None = None,
    executor: FunctionExecutor | None = None,
) -> dict[str, Any]:
    """
    Run a conversation and return it as a plain dict.

    The backend is built from ``backend_config``. Configuration problems
    (unknown backend, missing credentials) raise before any request is
    made; everything that fails during the run comes back as
    ``status == "error"``.

    Args:
        directive: Instructions for the simulated user
        first_message: Opening user message
        max_turns: Upper bound on turns
        backend_config: BackendConfig or a mapping of its fields
        openai_client: Client for OpenAI backends and the live interlocutor
        anthropic_client: Client for the Anthropic backend
        interlocutor: Simulated user; defaults to mock or live per config
        executor: Function executor; defaults to mock outputs

    Returns:
        Dict with messages, status, continuation_token, error (if any),
        total_turns, tokens, response_time_ms, tool results and metadata

    Raises:
        UnsupportedBackendError: If the provider/api pair is unknown
        ConfigurationError: If a live run is missing credentials
    """
    config = (
        backend_config
        if isinstance(backend_config, BackendConfig)
        else BackendConfig.model_validate(dict(backend_config))
    )
    backend = create_backend(
        config,
        openai_client=openai_client,
        anthropic_client=anthropic_client,
        executor=executor,
    )

    if interlocutor is None:
        interlocutor = _default_interlocutor(config, openai_client)

    orchestrator = ConversationOrchestrator(backend, interlocutor)
    return orchestrator.run(directive, first_message, max_turns).to_dict()


def _default_interlocutor(
    config: BackendConfig, openai_client: OpenAI | None
) -> InterlocutorSimulator:
    if config.mock:
        return MockInterlocutor()

    if openai_client is None:
        api_key = resolve_api_key("openai")
        if not api_key:
            raise ConfigurationError(
                "The simulated user needs an OpenAI API key. Set OPENAI_API_KEY "
                "or pass an interlocutor."
            )
        openai_client = OpenAI(api_key=api_key)

    return LiveInterlocutor(
        openai_client,
        model=config.interlocutor_model,
        temperature=config.interlocutor_temperature,
    )
