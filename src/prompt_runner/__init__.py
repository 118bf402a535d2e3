"""
prompt_runner - Run simulated conversations against LLM backends and
normalize what comes back.

Backends:
    openai / chat_completions   stateless, full history every call
    openai / responses          stateful, chained by previous_response_id
    openai / assistants         threads and polled runs
    anthropic / messages        stateless, content blocks

Runtime Layer:
    ConversationOrchestrator: Drives the turn loop
    InterlocutorSimulator: Writes the simulated user's turns
    run_conversation: One-call entry point returning a plain dict

Normalization:
    normalizer_for: Normalizer for an API-type tag
    TokenAggregator / ToolResultExtractor: Run-level reductions

Example:
    from prompt_runner import run_conversation

    result = run_conversation(
        directive="You are a traveller asking about lost luggage",
        first_message="Hello",
        max_turns=3,
        backend_config={"provider": "openai", "api": "responses", "mock": True},
    )
    for message in result["messages"]:
        print(message["turn"], message["role"], message["content"])
"""

from .adapters import AdapterTurn, BackendAdapter, create_backend
from .config import BackendConfig, FunctionDefinition, load_backend_config
from .core import (
    ApiType,
    BackendVariant,
    ConfigurationError,
    ConversationResult,
    ConversationState,
    NormalizedMessage,
    NormalizedResponse,
    PromptRunnerError,
    RunFailedError,
    RunTimeoutError,
    TokenAggregator,
    ToolCall,
    ToolResultExtractor,
    UnsupportedBackendError,
    UsageTotals,
    resolve_api_type,
)
from .evaluators import EvaluatorRegistry, EvaluatorTag, RunMode
from .functions import CallableFunctionExecutor, FunctionCallHandler, MockFunctionExecutor
from .normalizers import normalizer_for
from .runtime import (
    ConversationOrchestrator,
    InterlocutorSimulator,
    LiveInterlocutor,
    MockInterlocutor,
    run_conversation,
)

__version__ = "0.1.0"

__all__ = [
    # Runtime
    "ConversationOrchestrator",
    "InterlocutorSimulator",
    "LiveInterlocutor",
    "MockInterlocutor",
    "run_conversation",
    # Backends
    "AdapterTurn",
    "BackendAdapter",
    "create_backend",
    # Config
    "BackendConfig",
    "FunctionDefinition",
    "load_backend_config",
    # Data model
    "ApiType",
    "BackendVariant",
    "ConversationResult",
    "ConversationState",
    "NormalizedMessage",
    "NormalizedResponse",
    "ToolCall",
    "UsageTotals",
    # Reductions
    "TokenAggregator",
    "ToolResultExtractor",
    "normalizer_for",
    "resolve_api_type",
    # Functions
    "CallableFunctionExecutor",
    "FunctionCallHandler",
    "MockFunctionExecutor",
    # Evaluators
    "EvaluatorRegistry",
    "EvaluatorTag",
    "RunMode",
    # Errors
    "ConfigurationError",
    "PromptRunnerError",
    "RunFailedError",
    "RunTimeoutError",
    "UnsupportedBackendError",
]
