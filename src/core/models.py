# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Agents are live objects mutated in place by the engine. Tasks and
conversations handed back to callers are copies.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Maximum number of ContextItems an AgentState keeps (oldest evicted first).
CONTEXT_LIMIT = 10

# Allows model_name / model_used fields.
_FIELDS_MAY_START_WITH_MODEL = ConfigDict(protected_namespaces=())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# === ENUMERATIONS ===


class AgentType(str, Enum):
    """Agent flavour; only affects the wording of reflections."""

    GENERAL = "general"
    SPECIALIST = "specialist"
    ORCHESTRATOR = "orchestrator"
    REFLECTIVE = "reflective"


class TaskType(str, Enum):
    """Closed set of task kinds the executor knows how to dispatch."""

    GENERATE = "generate"
    CHAT = "chat"
    EMBED = "embed"
    TOOL = "tool"
    REFLECT = "reflect"
    PLUGIN = "plugin"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: str | TaskType) -> TaskType:
        """Map a type label onto a kind; unknown labels are CUSTOM."""
        try:
            return cls(value)
        except ValueError:
            return cls.CUSTOM


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class MessageType(str, Enum):
    REQUEST = "request"
    RESPONSE = "response"
    NOTIFICATION = "notification"
    TASK_DELEGATION = "task_delegation"
    REFLECTION_SHARE = "reflection_share"
    BROADCAST = "broadcast"


# === AGENTS ===


class ContextItem(BaseModel):
    """One entry of an agent's short-term context window."""

    key: str
    value: Any = None
    timestamp: datetime = Field(default_factory=utcnow)
    relevance: float = 1.0


class AgentState(BaseModel):
    """Mutable memory of an agent.

    `memory` keeps the latest value per key. `context` is a bounded
    FIFO of the last CONTEXT_LIMIT interactions.
    """

    memory: dict[str, Any] = Field(default_factory=dict)
    context: list[ContextItem] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)
    last_interaction: datetime = Field(default_factory=utcnow)

    def record(self, key: str, value: Any, relevance: float = 1.0) -> None:
        """Store `value` under `key` and push it onto the context window."""
        now = utcnow()
        self.memory[key] = value
        self.last_interaction = now
        self.context.append(
            ContextItem(key=key, value=value, timestamp=now, relevance=relevance)
        )
        if len(self.context) > CONTEXT_LIMIT:
            del self.context[: len(self.context) - CONTEXT_LIMIT]


class Agent(BaseModel):
    """Named actor owning configuration, model preferences and memory."""

    id: str = ""
    name: str = ""
    description: str = ""
    type: AgentType = AgentType.GENERAL
    models: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    config: dict[str, Any] = Field(default_factory=dict)
    state: AgentState | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def default_model(self) -> str:
        """First declared model, or empty string."""
        return self.models[0] if self.models else ""

    def ensure_state(self) -> AgentState:
        if self.state is None:
            self.state = AgentState()
        return self.state


# === CAPABILITIES ===


class ToolCall(BaseModel):
    """Tool invocation parsed out of a task's `tool` parameter."""

    name: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    success: bool
    output: Any = None
    error: str | None = None


# === TASKS ===


class Task(BaseModel):
    """One unit of requested work.

    `type` keeps the caller's label verbatim; `kind` is the dispatch
    variant it maps onto.
    """

    model_config = _FIELDS_MAY_START_WITH_MODEL

    id: str = Field(default_factory=new_id)
    type: str = TaskType.CUSTOM.value
    input: str = ""
    output: str = ""
    status: TaskStatus = TaskStatus.PENDING
    agent_id: str = ""
    model_name: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None
    error: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _type_label(cls, v: Any) -> Any:
        if isinstance(v, Enum):
            return v.value
        return v

    @property
    def kind(self) -> TaskType:
        return TaskType.parse(self.type)


class TaskMetrics(BaseModel):
    duration_ms: float | None = None
    tokens_used: int | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None


class TaskResult(BaseModel):
    """Outcome of one successful task execution."""

    model_config = _FIELDS_MAY_START_WITH_MODEL

    task_id: str
    output: str = ""
    model_used: str = ""
    metrics: TaskMetrics = Field(default_factory=TaskMetrics)
    embedding: list[float] | None = None


class TaskRequest(BaseModel):
    model_config = _FIELDS_MAY_START_WITH_MODEL

    type: str = TaskType.GENERATE.value
    input: str = ""
    model_name: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("type", mode="before")
    @classmethod
    def _type_label(cls, v: Any) -> Any:
        if isinstance(v, Enum):
            return v.value
        return v


class OrchestrationRequest(BaseModel):
    """Batch of tasks to run against one agent."""

    agent_id: str
    tasks: list[TaskRequest] = Field(default_factory=list)
    sequential: bool = False
    parameters: dict[str, Any] = Field(default_factory=dict)


class OrchestrationResponse(BaseModel):
    id: str = Field(default_factory=new_id)
    agent_id: str
    status: str = "completed"
    tasks: list[Task] = Field(default_factory=list)
    results: list[TaskResult | None] = Field(default_factory=list)
    error: str = ""
    created_at: datetime = Field(default_factory=utcnow)


# === WORKFLOWS ===


class WorkflowStep(BaseModel):
    """Step of a task workflow; `input` may reference `{{key}}` placeholders."""

    model_config = _FIELDS_MAY_START_WITH_MODEL

    name: str
    type: str = TaskType.GENERATE.value
    input: str = ""
    model_name: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _type_label(cls, v: Any) -> Any:
        if isinstance(v, Enum):
            return v.value
        return v


class WorkflowStepResult(BaseModel):
    model_config = _FIELDS_MAY_START_WITH_MODEL

    name: str
    type: str
    input: str
    output: str = ""
    model_used: str = ""
    success: bool = True
    error: str = ""


class WorkflowResult(BaseModel):
    steps: list[WorkflowStepResult] = Field(default_factory=list)
    success: bool = True
    error: str = ""
    failed_step: str | None = None


# === CONVERSATIONS ===


class Message(BaseModel):
    """Message exchanged between agents inside a conversation."""

    id: str = ""
    from_agent_id: str
    to_agent_id: str = ""
    content: str = ""
    type: MessageType = MessageType.REQUEST
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime | None = None


class Conversation(BaseModel):
    id: str = Field(default_factory=new_id)
    participants: list[str] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)
    status: ConversationStatus = ConversationStatus.ACTIVE
    topic: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ConversationStep(BaseModel):
    """Templated message sent as one step of a conversation workflow."""

    id: str
    from_agent_id: str
    to_agent_id: str = ""
    message_template: str = ""
    message_type: MessageType = MessageType.REQUEST
    parameters: dict[str, Any] = Field(default_factory=dict)


class ConversationWorkflow(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    description: str = ""
    participants: list[str] = Field(default_factory=list)
    steps: list[ConversationStep] = Field(default_factory=list)


class ConversationStepResult(BaseModel):
    step_id: str
    message: Message
    success: bool = True
    duration_ms: float = 0.0


class ConversationWorkflowResult(BaseModel):
    conversation_id: str
    success: bool = True
    step_results: list[ConversationStepResult] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    final_outcome: str = ""
    error: str = ""
    duration_ms: float = 0.0
