"""Backend configuration models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from prompt_runner.core.api_types import ApiType, resolve_api_type


class FunctionDefinition(BaseModel):
    """A function the model may call."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    strict: bool = False

    @classmethod
    def from_model(
        cls, name: str, model: type[BaseModel], *, strict: bool = False
    ) -> FunctionDefinition:
        """
        Build a definition from a pydantic model's JSON schema.

        The model docstring becomes the function description.
        """
        schema = model.model_json_schema()
        # Remove Pydantic-specific keys
        schema.pop("title", None)
        return cls(
            name=name,
            description=(model.__doc__ or "").strip(),
            parameters=schema,
            strict=strict,
        )


class BackendConfig(BaseModel):
    """
    Everything needed to build a backend adapter for one run.

    Only ``provider`` and ``api`` are required. ``mock`` defaults to True so
    nothing touches the network unless explicitly asked to.

    Example:
        config = BackendConfig(
            provider="openai",
            api="responses",
            model="gpt-4o",
            tools=["web_search", "functions"],
            functions=[FunctionDefinition(name="get_weather")],
        )
        config.api_type  # ApiType.OPENAI_RESPONSES
    """

    provider: str
    api: str
    model: str = "gpt-4o"
    temperature: float | None = 0.7
    max_tokens: int | None = None
    system_prompt: str | None = None

    tools: list[str] = Field(default_factory=list)
    functions: list[FunctionDefinition] = Field(default_factory=list)
    vector_store_ids: list[str] = Field(default_factory=list)

    assistant_id: str | None = None

    mock: bool = True
    mock_function_outputs: dict[str, Any] = Field(default_factory=dict)

    max_tool_iterations: int = Field(default=10, ge=0)
    poll_interval: float = Field(default=1.0, ge=0)
    max_poll_attempts: int = Field(default=30, ge=1)

    interlocutor_model: str = "gpt-4o-mini"
    interlocutor_temperature: float = 0.7

    @field_validator("provider", "api")
    @classmethod
    def _normalize_key(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def api_type(self) -> ApiType:
        """Resolved API-type tag. Raises UnsupportedBackendError if unknown."""
        return resolve_api_type(self.provider, self.api)

    def has_tool(self, tool: str) -> bool:
        return tool in self.tools
