# tests/unit/engine/test_executor.py — v1
"""Tests for engine/executor.py — dispatch, status transitions and batches."""

from __future__ import annotations

import threading

import pytest

from agentweave.core.cancellation import CallContext
from agentweave.core.errors import (
    CapabilityExecutionError,
    InferenceError,
    InvalidRequestError,
    NoModelSpecifiedError,
    TaskCancelledError,
)
from agentweave.core.models import Agent, AgentType, Task, TaskStatus, TaskType
from agentweave.engine import executor as executor_module
from agentweave.engine.executor import TaskExecutor, build_reflection

from conftest import StubInferenceClient


def _executor(client, registry, agent_store, task_store) -> TaskExecutor:
    return TaskExecutor(client, registry, agent_store, task_store)


# === INFERENCE TASKS ===


class TestGenerate:
    def test_round_trip(self, executor, agent, stub_client):
        task = Task(type=TaskType.GENERATE, input="Hello")
        result = executor.execute_task(task, agent)

        assert result.output == "stub reply"
        assert result.model_used == "llama3.2"
        assert task.status is TaskStatus.COMPLETED
        assert task.completed_at is not None
        assert task.error == ""
        assert task.output == result.output
        assert task.agent_id == agent.id
        assert stub_client.calls == [("generate", "llama3.2", "Hello")]

    def test_metrics(self, executor, agent):
        result = executor.execute_task(Task(type="generate", input="Hi"), agent)
        assert result.metrics.input_tokens == 3
        assert result.metrics.output_tokens == 4
        assert result.metrics.tokens_used == 7
        assert result.metrics.duration_ms is not None

    def test_explicit_model_wins(self, executor, agent, stub_client):
        executor.execute_task(Task(type="generate", input="Hi", model_name="codellama"), agent)
        assert stub_client.calls[0][1] == "codellama"

    def test_options_forwarded(self, executor, agent, stub_client):
        task = Task(type="generate", input="Hi", parameters={"options": {"temperature": 0.2}})
        executor.execute_task(task, agent)
        assert stub_client.last_options == {"temperature": 0.2}

    def test_no_model_specified(self, executor, agent_store, stub_client):
        bare = agent_store.create(Agent(name="bare"))
        task = Task(type="generate", input="Hi")
        with pytest.raises(NoModelSpecifiedError):
            executor.execute_task(task, bare)
        assert task.status is TaskStatus.FAILED
        assert "no model specified" in task.error
        assert stub_client.calls == []

    def test_backend_failure(self, registry, agent_store, task_store, agent):
        executor = _executor(
            StubInferenceClient(fail_on=("bad",)), registry, agent_store, task_store,
        )
        task = Task(type="generate", input="bad")
        with pytest.raises(InferenceError, match="refused") as exc_info:
            executor.execute_task(task, agent)
        assert exc_info.value.task_id == task.id
        assert task.status is TaskStatus.FAILED
        assert task.error
        assert task.completed_at is None

    def test_empty_output_is_failure(self, registry, agent_store, task_store, agent):
        executor = _executor(StubInferenceClient(reply=""), registry, agent_store, task_store)
        task = Task(type="generate", input="Hi")
        with pytest.raises(InferenceError, match="no output"):
            executor.execute_task(task, agent)
        assert task.status is TaskStatus.FAILED

    def test_recorded_in_task_table(self, executor, agent, task_store):
        task = Task(type="generate", input="Hi")
        executor.execute_task(task, agent)
        stored = task_store.get(task.id)
        assert stored.status is TaskStatus.COMPLETED
        assert stored is not task


class TestTransitionsSeenByReaders:
    @staticmethod
    def _record_snapshots(monkeypatch, task_store) -> list[Task]:
        seen: list[Task] = []
        update = task_store.update

        def _update(task, **fields):
            update(task, **fields)
            seen.append(task_store.get(task.id))

        monkeypatch.setattr(task_store, "update", _update)
        return seen

    def test_not_completed_while_finishing(self, monkeypatch, executor, agent, task_store):
        task = Task(type="generate", input="Hi")
        during: list[Task] = []
        real_utcnow = executor_module.utcnow

        def _utcnow():
            during.append(task_store.get(task.id))
            return real_utcnow()

        monkeypatch.setattr(executor_module, "utcnow", _utcnow)
        result = executor.execute_task(task, agent)

        assert [s.status for s in during] == [TaskStatus.RUNNING]
        final = task_store.get(task.id)
        assert final.status is TaskStatus.COMPLETED
        assert final.output == result.output == "stub reply"
        assert final.completed_at is not None

    def test_completed_snapshot_is_whole(self, monkeypatch, executor, agent, task_store):
        seen = self._record_snapshots(monkeypatch, task_store)
        executor.execute_task(Task(type="generate", input="Hi"), agent)

        assert [s.status for s in seen] == [TaskStatus.RUNNING, TaskStatus.COMPLETED]
        assert seen[-1].output == "stub reply"
        assert seen[-1].completed_at is not None

    def test_failed_snapshot_has_error(
        self, monkeypatch, registry, agent_store, task_store, agent,
    ):
        executor = _executor(
            StubInferenceClient(fail_on=("bad",)), registry, agent_store, task_store,
        )
        seen = self._record_snapshots(monkeypatch, task_store)
        with pytest.raises(InferenceError):
            executor.execute_task(Task(type="generate", input="bad"), agent)

        assert [s.status for s in seen] == [TaskStatus.RUNNING, TaskStatus.FAILED]
        assert "refused" in seen[-1].error


class TestChat:
    def test_system_and_history(self, executor, agent, stub_client):
        task = Task(
            type="chat",
            input="And now?",
            parameters={
                "system": "Be brief",
                "messages": [
                    {"role": "user", "content": "Hi"},
                    {"role": "assistant", "content": "Hello"},
                ],
            },
        )
        executor.execute_task(task, agent)
        assert [m.role for m in stub_client.last_messages] == [
            "system", "user", "assistant", "user",
        ]
        assert stub_client.last_messages[-1].content == "And now?"

    def test_invalid_history(self, executor, agent, stub_client):
        task = Task(type="chat", input="x", parameters={"messages": [{"role": "robot"}]})
        with pytest.raises(InvalidRequestError, match="invalid chat history"):
            executor.execute_task(task, agent)
        assert task.status is TaskStatus.FAILED
        assert stub_client.calls == []


class TestEmbed:
    def test_dimension_and_vector(self, executor, agent):
        result = executor.execute_task(Task(type="embed", input="text"), agent)
        assert result.output == "Embedding generated with dimension 3"
        assert result.embedding == [0.1, 0.2, 0.3]


# === CAPABILITY TASKS ===


class TestTool:
    def test_success_records_memory(self, executor, agent):
        task = Task(
            type="tool",
            parameters={"tool": {"name": "calculator",
                                 "parameters": {"operation": "add", "a": 2, "b": 3}}},
        )
        result = executor.execute_task(task, agent)
        assert result.output == "Tool 'calculator' executed successfully: 5"
        assert agent.state.memory["tool_use"] == "calculator"

    def test_unknown_tool_is_soft(self, executor, agent):
        task = Task(type="tool", parameters={"tool": {"name": "teleport"}})
        result = executor.execute_task(task, agent)
        assert result.output == "Tool 'teleport' not available"
        assert task.status is TaskStatus.COMPLETED
        assert "tool_use" not in agent.state.memory

    def test_failed_tool_result(self, executor, agent):
        task = Task(
            type="tool",
            parameters={"tool": {"name": "calculator",
                                 "parameters": {"operation": "divide", "a": 1, "b": 0}}},
        )
        with pytest.raises(CapabilityExecutionError, match="division by zero"):
            executor.execute_task(task, agent)
        assert task.status is TaskStatus.FAILED


class TestPlugin:
    def test_success(self, executor, agent):
        task = Task(type="plugin", input="hi", parameters={"plugin_name": "text_transform",
                                                           "mode": "upper"})
        result = executor.execute_task(task, agent)
        assert result.output == "Plugin 'text_transform' result: HI"
        assert agent.state.memory["plugin_use"] == "text_transform"

    def test_unknown_plugin_is_soft(self, executor, agent):
        result = executor.execute_task(
            Task(type="plugin", parameters={"plugin_name": "oracle"}), agent,
        )
        assert result.output == "Plugin 'oracle' not available"

    def test_plugin_raises(self, executor, agent):
        task = Task(type="plugin", input="x", parameters={"plugin_name": "text_transform",
                                                          "mode": "rot13"})
        with pytest.raises(CapabilityExecutionError, match="plugin execution failed"):
            executor.execute_task(task, agent)
        assert "rot13" in task.error


# === LOCAL TASKS ===


class TestReflect:
    def test_no_context(self):
        agent = Agent(name="solo")
        text = build_reflection(agent, "progress")
        assert text.startswith("Agent 'solo' reflecting on: progress")
        assert "No recent interactions" in text

    def test_pattern_after_three_interactions(self, executor, agent_store):
        agent = agent_store.create(Agent(name="refl", type=AgentType.REFLECTIVE))
        for key in ("a", "b", "c"):
            agent_store.record(agent, key, key)
        result = executor.execute_task(Task(type="reflect", input="week"), agent)
        assert "3 interactions" in result.output
        assert "(latest: a, b, c)" in result.output
        assert "Pattern analysis" in result.output
        assert "self-analysis" in result.output
        assert agent.state.memory["reflection"] == result.output

    @pytest.mark.parametrize(
        "agent_type, phrase",
        [
            (AgentType.ORCHESTRATOR, "Coordination patterns"),
            (AgentType.SPECIALIST, "Domain expertise"),
        ],
    )
    def test_type_clause(self, agent_type, phrase):
        assert phrase in build_reflection(Agent(name="x", type=agent_type), "t")

    def test_general_has_no_clause(self):
        text = build_reflection(Agent(name="x"), "t")
        assert text.endswith("No recent interactions to review.")


class TestCustom:
    def test_unknown_type_dispatches_to_custom(self, executor, agent, stub_client):
        task = Task(type="summarize", input="doc")
        result = executor.execute_task(task, agent)
        assert result.output == "Custom task 'summarize' acknowledged by general agent 'alpha'"
        assert task.type == "summarize"
        assert agent.state.memory["custom_task"] == "doc"
        assert stub_client.calls == []

    def test_reflective_suffix(self, executor, agent_store):
        agent = agent_store.create(Agent(name="r", type=AgentType.REFLECTIVE))
        result = executor.execute_task(Task(type="custom"), agent)
        assert result.output.endswith("(with self-reflection capabilities)")


class TestCancellation:
    def test_cancelled_before_dispatch(self, executor, agent, stub_client):
        ctx = CallContext()
        ctx.cancel()
        task = Task(type="generate", input="Hi")
        with pytest.raises(TaskCancelledError):
            executor.execute_task(task, agent, ctx)
        assert task.status is TaskStatus.FAILED
        assert stub_client.calls == []


# === BATCHES ===


class TestSequentialBatch:
    def test_all_succeed_in_order(self, executor, agent, stub_client):
        tasks = [Task(type="generate", input=f"p{i}") for i in range(3)]
        batch = executor.execute_tasks(tasks, agent, sequential=True)
        assert batch.success is True
        assert len(batch.results) == 3
        assert [c[2] for c in stub_client.calls] == ["p0", "p1", "p2"]

    def test_stops_at_first_failure(self, registry, agent_store, task_store, agent):
        client = StubInferenceClient(fail_on=("bad",))
        executor = _executor(client, registry, agent_store, task_store)
        tasks = [
            Task(type="generate", input="ok"),
            Task(type="generate", input="bad"),
            Task(type="generate", input="never"),
        ]
        batch = executor.execute_tasks(tasks, agent, sequential=True)

        assert batch.success is False
        assert isinstance(batch.error, InferenceError)
        assert len(batch.results) == 1
        assert [t.status for t in tasks] == [
            TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.PENDING,
        ]
        assert len(client.calls_for("generate")) == 2
        with pytest.raises(InferenceError):
            batch.raise_for_error()


class TestConcurrentBatch:
    def test_failure_isolated(self, registry, agent_store, task_store, agent):
        client = StubInferenceClient(fail_on=("bad",))
        executor = _executor(client, registry, agent_store, task_store)
        tasks = [
            Task(type="generate", input="ok1"),
            Task(type="generate", input="bad"),
            Task(type="generate", input="ok2"),
        ]
        batch = executor.execute_tasks(tasks, agent)

        assert isinstance(batch.error, InferenceError)
        assert batch.results[0] is not None
        assert batch.results[1] is None
        assert batch.results[2] is not None
        assert len(batch.completed) == 2
        assert [t.status for t in tasks] == [
            TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.COMPLETED,
        ]
        assert len(client.calls_for("generate")) == 3

    def test_runs_in_parallel(self, registry, agent_store, task_store, agent):
        # Every call waits until all three are in flight at once.
        client = StubInferenceClient(barrier=threading.Barrier(3))
        executor = _executor(client, registry, agent_store, task_store)
        tasks = [Task(type="generate", input=f"p{i}") for i in range(3)]
        batch = executor.execute_tasks(tasks, agent)
        assert batch.success is True
        assert [r.task_id for r in batch.results] == [t.id for t in tasks]

    def test_empty(self, executor, agent):
        batch = executor.execute_tasks([], agent)
        assert batch.success is True
        assert batch.results == []
