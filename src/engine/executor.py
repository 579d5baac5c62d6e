# src/engine/executor.py — v1
"""Task executor: run one task, or a batch sequentially or concurrently.

Dispatch is a table from TaskType to handler; each handler returns a
TaskResult or raises. execute_task() owns the status transitions:

  pending -> running -> completed   (result returned)
                     -> failed      (task.error set, exception raised)

Batches:
  - sequential: list order, stop at the first failure, results truncated
  - concurrent: one worker per task, no cap, no early cancellation; the
    first error observed is reported alongside every result gathered
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterator

from pydantic import ValidationError

from agentweave.core.cancellation import CallContext, background
from agentweave.core.errors import (
    CapabilityExecutionError,
    ExecutionError,
    InferenceError,
    InvalidRequestError,
    NoModelSpecifiedError,
    OrchestrationError,
)
from agentweave.core.models import (
    Agent,
    AgentType,
    Task,
    TaskMetrics,
    TaskResult,
    TaskStatus,
    TaskType,
    ToolCall,
    utcnow,
)
from agentweave.llm.models import ChatMessage, StreamChunk
from agentweave.logging.context import log_context

if TYPE_CHECKING:
    from agentweave.capabilities.registry import CapabilityRegistry
    from agentweave.engine.agent_store import AgentStore
    from agentweave.engine.task_store import TaskStore
    from agentweave.llm.base_client import BaseInferenceClient

logger = logging.getLogger(__name__)

Handler = Callable[[Task, Agent, CallContext], TaskResult]

# Type-specific closing sentence of a reflection.
_REFLECTION_CLAUSES: dict[AgentType, str] = {
    AgentType.REFLECTIVE: (
        " Advanced self-analysis indicates opportunities for optimization and learning."
    ),
    AgentType.ORCHESTRATOR: (
        " Coordination patterns show effective multi-agent task distribution."
    ),
    AgentType.SPECIALIST: (
        " Domain expertise application demonstrates specialized knowledge utilization."
    ),
}


@dataclass
class BatchResult:
    """Outcome of execute_tasks().

    Sequential: `results` holds the results before the failing task.
    Concurrent: `results` is aligned with the input; failed slots are None.
    """

    results: list[TaskResult | None] = field(default_factory=list)
    error: OrchestrationError | None = None
    sequential: bool = False

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def completed(self) -> list[TaskResult]:
        return [r for r in self.results if r is not None]

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class TaskExecutor:
    """Execute tasks against agents.

    Args:
        client: Inference backend used by generate/chat/embed tasks.
        capabilities: Tool and plugin registry.
        agents: Agent store; used to record interactions in agent memory.
        tasks: Optional task table; every executed task is recorded.
    """

    def __init__(
        self,
        client: BaseInferenceClient,
        capabilities: CapabilityRegistry,
        agents: AgentStore,
        tasks: TaskStore | None = None,
    ) -> None:
        self._client = client
        self._capabilities = capabilities
        self._agents = agents
        self._tasks = tasks
        self._handlers: dict[TaskType, Handler] = {
            TaskType.GENERATE: self._run_generate,
            TaskType.CHAT: self._run_chat,
            TaskType.EMBED: self._run_embed,
            TaskType.TOOL: self._run_tool,
            TaskType.REFLECT: self._run_reflect,
            TaskType.PLUGIN: self._run_plugin,
            TaskType.CUSTOM: self._run_custom,
        }

    # --- Public API ---

    def execute_task(
        self,
        task: Task,
        agent: Agent,
        ctx: CallContext | None = None,
    ) -> TaskResult:
        """Run a single task, updating its status, output and error in place.

        Raises:
            OrchestrationError: NotFound/InvalidRequest as raised, anything
                else wrapped in ExecutionError. The task is left FAILED.
        """
        ctx = ctx or background()
        if not task.agent_id:
            task.agent_id = agent.id
        if self._tasks is not None:
            self._tasks.put(task)

        with log_context(agent_id=agent.id or None, task_id=task.id):
            start = time.monotonic()
            self._transition(task, status=TaskStatus.RUNNING, error="")
            try:
                ctx.check(task.id)
                result = self._handlers[task.kind](task, agent, ctx)
            except Exception as exc:
                error = _as_orchestration_error(exc, task)
                self._transition(task, status=TaskStatus.FAILED, error=str(error))
                logger.error("Task %s (%s) failed: %s", task.id, task.type, error)
                if error is exc:
                    raise
                raise error from exc

            duration_ms = (time.monotonic() - start) * 1000
            completed_at = utcnow()
            self._transition(
                task,
                status=TaskStatus.COMPLETED,
                completed_at=completed_at,
                output=result.output,
            )
            if result.metrics.duration_ms is None:
                result.metrics.duration_ms = duration_ms

            logger.info(
                "Task %s completed: type=%s, model=%s, %.1fms",
                task.id,
                task.type,
                result.model_used or "-",
                result.metrics.duration_ms,
            )
            return result

    def execute_tasks(
        self,
        tasks: list[Task],
        agent: Agent,
        sequential: bool = False,
        ctx: CallContext | None = None,
    ) -> BatchResult:
        """Run several tasks for one agent."""
        if sequential:
            return self._execute_sequential(tasks, agent, ctx)
        return self._execute_concurrent(tasks, agent, ctx)

    def _transition(self, task: Task, **fields: Any) -> None:
        if self._tasks is not None:
            self._tasks.update(task, **fields)
            return
        for name, value in fields.items():
            setattr(task, name, value)

    # --- Batches ---

    def _execute_sequential(
        self, tasks: list[Task], agent: Agent, ctx: CallContext | None,
    ) -> BatchResult:
        batch = BatchResult(sequential=True)
        for idx, task in enumerate(tasks):
            try:
                result = self.execute_task(task, agent, ctx)
            except OrchestrationError as exc:
                logger.warning(
                    "Sequential batch stopped at task %d/%d: %s", idx + 1, len(tasks), exc,
                )
                batch.error = exc
                return batch
            batch.results.append(result)
        return batch

    def _execute_concurrent(
        self, tasks: list[Task], agent: Agent, ctx: CallContext | None,
    ) -> BatchResult:
        batch = BatchResult(results=[None] * len(tasks))
        if not tasks:
            return batch

        lock = threading.Lock()

        def _worker(idx: int, task: Task) -> None:
            try:
                result = self.execute_task(task, agent, ctx)
            except OrchestrationError as exc:
                with lock:
                    if batch.error is None:
                        batch.error = exc
                return
            with lock:
                batch.results[idx] = result

        with ThreadPoolExecutor(
            max_workers=len(tasks), thread_name_prefix="agentweave-task",
        ) as pool:
            for idx, task in enumerate(tasks):
                pool.submit(_worker, idx, task)

        failed = sum(1 for r in batch.results if r is None)
        if failed:
            logger.warning("Concurrent batch: %d/%d tasks failed", failed, len(tasks))
        return batch

    # --- Inference handlers ---

    def _run_generate(self, task: Task, agent: Agent, ctx: CallContext) -> TaskResult:
        model = _resolve_model(task, agent)
        chunks = self._client.generate(model, task.input, options=_options(task), ctx=ctx)
        return _collect(task, model, chunks, "generate")

    def _run_chat(self, task: Task, agent: Agent, ctx: CallContext) -> TaskResult:
        model = _resolve_model(task, agent)
        messages: list[ChatMessage] = []
        system = task.parameters.get("system")
        if isinstance(system, str) and system:
            messages.append(ChatMessage(role="system", content=system))
        history = task.parameters.get("messages") or []
        if not isinstance(history, list):
            raise InvalidRequestError("chat task parameter 'messages' must be a list")
        try:
            messages.extend(ChatMessage.model_validate(prior) for prior in history)
        except ValidationError as exc:
            raise InvalidRequestError(f"invalid chat history: {exc}") from exc
        messages.append(ChatMessage(role="user", content=task.input))

        chunks = self._client.chat(model, messages, options=_options(task), ctx=ctx)
        return _collect(task, model, chunks, "chat")

    def _run_embed(self, task: Task, agent: Agent, ctx: CallContext) -> TaskResult:
        model = _resolve_model(task, agent)
        try:
            vector = self._client.embed(model, task.input, ctx=ctx)
        except OrchestrationError:
            raise
        except Exception as exc:
            raise InferenceError(
                f"embed call failed for model {model!r}: {exc}", task_id=task.id,
            ) from exc

        return TaskResult(
            task_id=task.id,
            output=f"Embedding generated with dimension {len(vector)}",
            model_used=model,
            embedding=list(vector),
        )

    # --- Capability handlers ---

    def _run_tool(self, task: Task, agent: Agent, ctx: CallContext) -> TaskResult:
        call = _parse_tool_call(task.parameters.get("tool"))
        tool = self._capabilities.get_tool(call.name)
        if tool is None:
            logger.warning("Tool %r not available for task %s", call.name, task.id)
            return TaskResult(task_id=task.id, output=f"Tool '{call.name}' not available")

        try:
            outcome = tool.call(call.parameters)
        except Exception as exc:
            raise CapabilityExecutionError(
                f"tool call failed: {call.name}: {exc}", task_id=task.id,
            ) from exc
        if not outcome.success:
            raise CapabilityExecutionError(
                f"tool call failed: {call.name}: {outcome.error or 'unknown error'}",
                task_id=task.id,
            )

        self._agents.record(agent, "tool_use", call.name)
        return TaskResult(
            task_id=task.id,
            output=f"Tool '{call.name}' executed successfully: {outcome.output}",
        )

    def _run_plugin(self, task: Task, agent: Agent, ctx: CallContext) -> TaskResult:
        name = task.parameters.get("plugin_name")
        name = name if isinstance(name, str) else ""
        plugin = self._capabilities.get_plugin(name)
        if plugin is None:
            logger.warning("Plugin %r not available for task %s", name, task.id)
            return TaskResult(task_id=task.id, output=f"Plugin '{name}' not available")

        try:
            value = plugin.execute(task.input, task.parameters)
        except Exception as exc:
            raise CapabilityExecutionError(
                f"plugin execution failed: {name}: {exc}", task_id=task.id,
            ) from exc

        self._agents.record(agent, "plugin_use", name)
        return TaskResult(task_id=task.id, output=f"Plugin '{name}' result: {value}")

    # --- Local handlers ---

    def _run_reflect(self, task: Task, agent: Agent, ctx: CallContext) -> TaskResult:
        reflection = build_reflection(agent, task.input)
        self._agents.record(agent, "reflection", reflection)
        return TaskResult(task_id=task.id, output=reflection)

    def _run_custom(self, task: Task, agent: Agent, ctx: CallContext) -> TaskResult:
        self._agents.record(agent, "custom_task", task.input)
        output = (
            f"Custom task '{task.type}' acknowledged by {agent.type.value} agent"
            f" '{agent.name or agent.id}'"
        )
        if agent.type is AgentType.REFLECTIVE:
            output += " (with self-reflection capabilities)"
        return TaskResult(task_id=task.id, output=output)


def build_reflection(agent: Agent, topic: str) -> str:
    """Compose a textual self-reflection for `agent` about `topic`."""
    reflection = f"Agent '{agent.name or agent.id}' reflecting on: {topic}"

    context = agent.state.context if agent.state is not None else []
    if context:
        recent = ", ".join(item.key for item in context[-3:])
        reflection += (
            f". Recent context includes {len(context)} interactions"
            f" (latest: {recent})."
        )
        if len(context) >= 3:
            reflection += " Pattern analysis suggests consistent performance across multiple tasks."
    else:
        reflection += ". No recent interactions to review."

    reflection += _REFLECTION_CLAUSES.get(agent.type, "")
    return reflection


def _resolve_model(task: Task, agent: Agent) -> str:
    model = task.model_name or agent.default_model
    if not model:
        raise NoModelSpecifiedError(task.type)
    return model


def _options(task: Task) -> dict[str, Any] | None:
    opts = task.parameters.get("options")
    return dict(opts) if isinstance(opts, dict) else None


def _parse_tool_call(raw: Any) -> ToolCall:
    if isinstance(raw, ToolCall):
        return raw
    if isinstance(raw, dict):
        name = raw.get("name")
        params = raw.get("parameters")
        return ToolCall(
            name=name if isinstance(name, str) else "",
            parameters=params if isinstance(params, dict) else {},
        )
    return ToolCall()


def _collect(
    task: Task, model: str, chunks: Iterator[StreamChunk], operation: str,
) -> TaskResult:
    """Accumulate a streamed response into one TaskResult."""
    parts: list[str] = []
    metrics = TaskMetrics()
    try:
        for chunk in chunks:
            parts.append(chunk.content)
            if chunk.done:
                metrics.input_tokens = chunk.input_tokens
                metrics.output_tokens = chunk.output_tokens
    except OrchestrationError:
        raise
    except Exception as exc:
        raise InferenceError(
            f"{operation} call failed for model {model!r}: {exc}", task_id=task.id,
        ) from exc

    output = "".join(parts)
    if not output:
        raise InferenceError(
            f"{operation} call for model {model!r} produced no output", task_id=task.id,
        )

    if metrics.input_tokens is not None or metrics.output_tokens is not None:
        metrics.tokens_used = (metrics.input_tokens or 0) + (metrics.output_tokens or 0)
    return TaskResult(task_id=task.id, output=output, model_used=model, metrics=metrics)


def _as_orchestration_error(exc: Exception, task: Task) -> OrchestrationError:
    """Keep taxonomy errors as they are; wrap anything else."""
    if isinstance(exc, ExecutionError):
        if exc.task_id is None:
            exc.task_id = task.id
        return exc
    if isinstance(exc, OrchestrationError):
        return exc
    return ExecutionError(f"{task.type} task failed: {exc}", task_id=task.id)
