# tests/conftest.py — v1
"""Shared test fixtures for all unit tests.

Provides a scripted in-memory inference client, settings without .env,
the engine building blocks and a ready Engine. No network access.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Iterator

import pytest

from agentweave.capabilities.registry import CapabilityRegistry
from agentweave.config.settings import Settings
from agentweave.core.models import Agent
from agentweave.engine.agent_store import AgentStore
from agentweave.engine.executor import TaskExecutor
from agentweave.engine.orchestrator import Engine
from agentweave.engine.task_store import TaskStore
from agentweave.llm.base_client import BaseInferenceClient
from agentweave.llm.models import ChatMessage, StreamChunk


# === STUB INFERENCE CLIENT ===


class StubInferenceClient(BaseInferenceClient):
    """Scripted inference backend.

    Replies with `replies[prompt]` or `reply`; raises for prompts listed
    in `fail_on`. When `barrier` is set every generate call waits on it
    before answering.
    """

    def __init__(
        self,
        reply: str = "stub reply",
        replies: dict[str, str] | None = None,
        fail_on: tuple[str, ...] = (),
        embedding: list[float] | None = None,
        barrier: threading.Barrier | None = None,
    ) -> None:
        self.reply = reply
        self.replies = dict(replies or {})
        self.fail_on = set(fail_on)
        self.embedding = embedding if embedding is not None else [0.1, 0.2, 0.3]
        self.barrier = barrier
        self.calls: list[tuple[str, str, str]] = []
        self.last_messages: list[ChatMessage] = []
        self.last_options: dict[str, Any] | None = None
        self._lock = threading.Lock()

    def generate(self, model, prompt, options=None, ctx=None) -> Iterator[StreamChunk]:
        self._record("generate", model, prompt, options)
        if self.barrier is not None:
            self.barrier.wait(timeout=5)
        yield from _chunks(self._text_for(prompt))

    def chat(self, model, messages, options=None, ctx=None) -> Iterator[StreamChunk]:
        prompt = messages[-1].content if messages else ""
        self._record("chat", model, prompt, options)
        self.last_messages = list(messages)
        yield from _chunks(self._text_for(prompt))

    def embed(self, model, text, ctx=None) -> list[float]:
        self._record("embed", model, text, None)
        self._text_for(text)
        return list(self.embedding)

    @property
    def provider_name(self) -> str:
        return "stub"

    def calls_for(self, operation: str) -> list[tuple[str, str, str]]:
        return [c for c in self.calls if c[0] == operation]

    def _record(self, operation: str, model: str, prompt: str, options: Any) -> None:
        with self._lock:
            self.calls.append((operation, model, prompt))
            self.last_options = options

    def _text_for(self, prompt: str) -> str:
        if prompt in self.fail_on:
            raise RuntimeError(f"backend refused prompt {prompt!r}")
        return self.replies.get(prompt, self.reply)


def _chunks(text: str) -> Iterator[StreamChunk]:
    half = len(text) // 2
    yield StreamChunk(content=text[:half])
    yield StreamChunk(content=text[half:], done=True, input_tokens=3, output_tokens=4)


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll `predicate` until it holds or `timeout` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


# === FIXTURES ===


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def stub_client() -> StubInferenceClient:
    return StubInferenceClient()


@pytest.fixture
def registry() -> CapabilityRegistry:
    reg = CapabilityRegistry()
    reg.load_builtins()
    return reg


@pytest.fixture
def agent_store() -> AgentStore:
    return AgentStore()


@pytest.fixture
def task_store() -> TaskStore:
    return TaskStore()


@pytest.fixture
def executor(
    stub_client: StubInferenceClient,
    registry: CapabilityRegistry,
    agent_store: AgentStore,
    task_store: TaskStore,
) -> TaskExecutor:
    return TaskExecutor(stub_client, registry, agent_store, task_store)


@pytest.fixture
def agent(agent_store: AgentStore) -> Agent:
    """Stored general agent with a chat model and a code model."""
    return agent_store.create(Agent(name="alpha", models=["llama3.2", "codellama"]))


@pytest.fixture
def engine(stub_client: StubInferenceClient, settings: Settings) -> Engine:
    return Engine(client=stub_client, settings=settings)
