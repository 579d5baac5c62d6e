# src/engine/orchestrator.py — v1
"""Engine facade: single entry point for agents, tasks, workflows and conversations.

Usage:
    from agentweave.engine.orchestrator import Engine
    engine = Engine()
    agent = engine.create_default_agent()
    result = engine.execute_task(agent.id, Task(type="generate", input="Hi"))

Every instance owns its own stores; there is no process-wide state.
Every caller-facing operation accepts an optional CallContext for
cancellation and deadlines.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from agentweave.capabilities.registry import CapabilityRegistry, register_default_capabilities
from agentweave.config.agents import AGENT_TYPE_PROFILES
from agentweave.config.settings import Settings, load_settings
from agentweave.core.errors import InvalidRequestError
from agentweave.core.models import (
    Agent,
    AgentState,
    AgentType,
    Conversation,
    ConversationWorkflow,
    ConversationWorkflowResult,
    Message,
    OrchestrationRequest,
    OrchestrationResponse,
    Task,
    TaskResult,
    TaskType,
    WorkflowResult,
    WorkflowStep,
)
from agentweave.engine.agent_store import AgentStore
from agentweave.engine.conversations import ConversationManager
from agentweave.engine.executor import BatchResult, TaskExecutor
from agentweave.engine.routing import select_model
from agentweave.engine.status import EngineStatusProvider, StatusProvider, SystemStatus
from agentweave.engine.task_store import TaskStore
from agentweave.engine.workflow import WorkflowEngine
from agentweave.llm.client_factory import create_inference_client
from agentweave.logging.logger import setup_logging
from agentweave.tracking.task_stats import aggregate_by_agent

if TYPE_CHECKING:
    from agentweave.capabilities.base import BasePlugin, BaseTool
    from agentweave.core.cancellation import CallContext
    from agentweave.llm.base_client import BaseInferenceClient
    from agentweave.tracking.models import AgentTaskStats

logger = logging.getLogger(__name__)


class Engine:
    """Multi-agent orchestration engine.

    Args:
        client: Inference backend. Built from settings when None.
        settings: Engine settings. Loaded from environment / .env when None.
        status_provider: Source of status() snapshots.
        configure_logging: Apply the settings' logging configuration.
    """

    def __init__(
        self,
        client: BaseInferenceClient | None = None,
        settings: Settings | None = None,
        status_provider: StatusProvider | None = None,
        configure_logging: bool = False,
    ) -> None:
        self.settings = settings or load_settings()
        if configure_logging:
            setup_logging(
                level=self.settings.log_level,
                log_format=self.settings.log_format,
                log_file=self.settings.log_file,
                rotation=self.settings.log_rotation,
                retention=self.settings.log_retention,
            )

        self.client = client or create_inference_client(settings=self.settings)
        self.capabilities = CapabilityRegistry()
        if self.settings.register_builtin_capabilities:
            register_default_capabilities(self.capabilities)

        self.agents = AgentStore()
        self.tasks = TaskStore()
        self.executor = TaskExecutor(self.client, self.capabilities, self.agents, self.tasks)
        self.workflows = WorkflowEngine(self.executor, self.agents)
        self.conversations = ConversationManager(
            self.agents,
            self.executor,
            default_task_type=self.settings.delegation_default_task_type,
        )
        self._status_provider = status_provider or EngineStatusProvider()

        logger.info(
            "Engine ready: provider=%s, tools=%s, plugins=%s",
            self.client.provider_name,
            self.capabilities.tool_names,
            self.capabilities.plugin_names,
        )

    # --- Agents ---

    def create_agent(self, agent: Agent, ctx: CallContext | None = None) -> Agent:
        _check(ctx)
        return self.agents.create(agent)

    def get_agent(self, agent_id: str, ctx: CallContext | None = None) -> Agent:
        _check(ctx)
        return self.agents.get(agent_id)

    def list_agents(self, ctx: CallContext | None = None) -> list[Agent]:
        _check(ctx)
        return self.agents.list()

    def update_agent(self, agent: Agent, ctx: CallContext | None = None) -> Agent:
        _check(ctx)
        return self.agents.update(agent)

    def delete_agent(self, agent_id: str, ctx: CallContext | None = None) -> None:
        _check(ctx)
        self.agents.delete(agent_id)

    def create_default_agent(self, ctx: CallContext | None = None) -> Agent:
        """Create a general agent using the configured default models."""
        agent = Agent(
            name="default-agent",
            description="Default general-purpose agent",
            type=AgentType.GENERAL,
            models=self.settings.default_models_list,
            tools=self.capabilities.tool_names,
            config={
                "default_model": self.settings.default_model,
                "max_concurrent_tasks": self.settings.default_max_concurrent_tasks,
                "timeout_seconds": self.settings.inference_timeout_s,
            },
        )
        return self.create_agent(agent, ctx)

    def create_specialized_agent(
        self,
        agent_type: str | AgentType,
        domain: str,
        ctx: CallContext | None = None,
    ) -> Agent:
        """Create an agent whose identity and goals derive from type and domain.

        Raises:
            InvalidRequestError: If the agent type or domain is invalid.
        """
        try:
            kind = AgentType(agent_type)
        except ValueError as exc:
            raise InvalidRequestError(f"unknown agent type: {agent_type!r}") from exc
        if not domain.strip():
            raise InvalidRequestError("specialized agent requires a domain")

        profile = AGENT_TYPE_PROFILES[kind.value]
        domain = domain.strip()
        agent = Agent(
            name=profile["name"].format(domain=domain),
            description=profile["description"].format(domain=domain),
            type=kind,
            models=self.settings.default_models_list,
            tools=[t for t in profile["tools"] if self.capabilities.get_tool(t) is not None],
            config={
                "default_model": self.settings.default_model,
                "domain": domain,
                "max_concurrent_tasks": self.settings.default_max_concurrent_tasks,
            },
            state=AgentState(
                goals=[goal.format(domain=domain) for goal in profile["goals"]],
                capabilities=list(profile["capabilities"]),
            ),
        )
        return self.create_agent(agent, ctx)

    # --- Tasks ---

    def execute_task(
        self, agent_id: str, task: Task, ctx: CallContext | None = None,
    ) -> TaskResult:
        agent = self.agents.get(agent_id)
        return self.executor.execute_task(task, agent, ctx)

    def execute_tasks(
        self,
        agent_id: str,
        tasks: list[Task],
        sequential: bool = False,
        ctx: CallContext | None = None,
    ) -> BatchResult:
        agent = self.agents.get(agent_id)
        return self.executor.execute_tasks(tasks, agent, sequential=sequential, ctx=ctx)

    def orchestrate(
        self, request: OrchestrationRequest, ctx: CallContext | None = None,
    ) -> OrchestrationResponse:
        """Build pending tasks from the request, run them and report the outcome.

        Request-level parameters are defaults for every task; a task's own
        parameters win.
        """
        agent = self.agents.get(request.agent_id)
        tasks = [
            Task(
                type=req.type,
                input=req.input,
                agent_id=agent.id,
                model_name=req.model_name,
                parameters={**request.parameters, **req.parameters},
            )
            for req in request.tasks
        ]
        batch = self.executor.execute_tasks(
            tasks, agent, sequential=request.sequential, ctx=ctx,
        )
        response = OrchestrationResponse(
            agent_id=agent.id,
            status="completed" if batch.success else "failed",
            tasks=[t.model_copy(deep=True) for t in tasks],
            results=list(batch.results),
            error=str(batch.error) if batch.error is not None else "",
        )
        logger.info(
            "Orchestration %s for agent %s: %s (%d/%d tasks completed)",
            response.id, agent.id, response.status, len(batch.completed), len(tasks),
        )
        return response

    def smart_route(
        self,
        agent_id: str,
        text: str,
        task_type: str | TaskType = TaskType.GENERATE,
        ctx: CallContext | None = None,
    ) -> TaskResult:
        """Pick a model with the routing heuristic, then run one task."""
        agent = self.agents.get(agent_id)
        model = select_model(agent, task_type, text)
        logger.debug("Routed %s task for agent %s to model %r", task_type, agent_id, model)
        task = Task(type=task_type, input=text, agent_id=agent.id, model_name=model)
        return self.executor.execute_task(task, agent, ctx)

    def get_task(self, task_id: str, ctx: CallContext | None = None) -> Task:
        _check(ctx)
        return self.tasks.get(task_id)

    def list_tasks(
        self, agent_id: str | None = None, ctx: CallContext | None = None,
    ) -> list[Task]:
        _check(ctx)
        return self.tasks.list(agent_id)

    def task_stats(self, ctx: CallContext | None = None) -> dict[str, AgentTaskStats]:
        _check(ctx)
        return aggregate_by_agent(self.tasks.list())

    # --- Workflows ---

    def run_workflow(
        self,
        agent_id: str,
        steps: list[WorkflowStep],
        ctx: CallContext | None = None,
    ) -> WorkflowResult:
        return self.workflows.run(agent_id, steps, ctx)

    # --- Capabilities ---

    def register_tool(self, tool: BaseTool) -> None:
        self.capabilities.register_tool(tool)

    def register_plugin(self, plugin: BasePlugin) -> None:
        self.capabilities.register_plugin(plugin)

    def available_tools(self) -> list[str]:
        return self.capabilities.tool_names

    def available_plugins(self) -> list[str]:
        return self.capabilities.plugin_names

    # --- Conversations ---

    def start_conversation(
        self,
        participants: list[str],
        topic: str = "",
        metadata: dict[str, Any] | None = None,
        ctx: CallContext | None = None,
    ) -> Conversation:
        return self.conversations.start(participants, topic, metadata, ctx)

    def send_message(
        self, conversation_id: str, message: Message, ctx: CallContext | None = None,
    ) -> Message:
        return self.conversations.send(conversation_id, message, ctx)

    def get_conversation(
        self, conversation_id: str, ctx: CallContext | None = None,
    ) -> Conversation:
        _check(ctx)
        return self.conversations.get(conversation_id)

    def list_conversations(
        self, agent_id: str, ctx: CallContext | None = None,
    ) -> list[Conversation]:
        _check(ctx)
        return self.conversations.list_for_agent(agent_id)

    def close_conversation(
        self, conversation_id: str, ctx: CallContext | None = None,
    ) -> Conversation:
        return self.conversations.close(conversation_id, ctx)

    def execute_conversation_workflow(
        self, workflow: ConversationWorkflow, ctx: CallContext | None = None,
    ) -> ConversationWorkflowResult:
        return self.conversations.run_workflow(workflow, ctx)

    def conversation_metrics(self) -> dict[str, Any]:
        return self.conversations.metrics()

    # --- Status ---

    def counters(self) -> dict[str, int]:
        """Entity counts across the engine's stores."""
        return {
            "agents": len(self.agents),
            "tasks": len(self.tasks),
            "conversations": len(self.conversations),
            "tools": len(self.capabilities.tool_names),
            "plugins": len(self.capabilities.plugin_names),
        }

    def status(self) -> SystemStatus:
        return self._status_provider.snapshot(self)


def _check(ctx: CallContext | None) -> None:
    if ctx is not None:
        ctx.check()
