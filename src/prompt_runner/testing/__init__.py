"""Test doubles for provider SDK clients."""

from .fake_clients import (
    FakeAnthropicClient,
    FakeMethod,
    FakeOpenAIClient,
    RecordedCall,
    fake_page,
)

__all__ = [
    "FakeAnthropicClient",
    "FakeMethod",
    "FakeOpenAIClient",
    "RecordedCall",
    "fake_page",
]
