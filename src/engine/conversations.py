# src/engine/conversations.py — v1
"""Conversation manager: multi-agent message logs and task delegation.

Messages are appended while a conversation is active; closing is
terminal. A task-delegation message starts a detached worker thread
that runs a task on the receiver and posts the output back as a
response message. The worker is never joined and its failures are only
logged: the sender's send() call has already returned.

Lock order is conversations -> agents; the agent store never takes the
conversation lock.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter
from typing import TYPE_CHECKING, Any

from agentweave.core.cancellation import background
from agentweave.core.errors import (
    AgentNotFoundError,
    ConversationNotFoundError,
    InvalidRequestError,
    OrchestrationError,
)
from agentweave.core.locks import ReadWriteLock
from agentweave.core.models import (
    Agent,
    Conversation,
    ConversationStatus,
    ConversationStepResult,
    ConversationWorkflow,
    ConversationWorkflowResult,
    Message,
    MessageType,
    Task,
    new_id,
    utcnow,
)
from agentweave.engine.workflow import render_template
from agentweave.logging.context import log_context

if TYPE_CHECKING:
    from agentweave.core.cancellation import CallContext
    from agentweave.engine.agent_store import AgentStore
    from agentweave.engine.executor import TaskExecutor

logger = logging.getLogger(__name__)


class ConversationManager:
    """Owns the conversation table.

    Args:
        agents: Agent store used to validate participants and record memory.
        executor: Task executor used for delegated tasks.
        default_task_type: Task type used when a delegation message carries
            no `task_type` hint in its context.
    """

    def __init__(
        self,
        agents: AgentStore,
        executor: TaskExecutor,
        default_task_type: str = "custom",
    ) -> None:
        self._agents = agents
        self._executor = executor
        self._default_task_type = default_task_type
        self._conversations: dict[str, Conversation] = {}
        self._lock = ReadWriteLock()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._conversations)

    # --- Lifecycle ---

    def start(
        self,
        participants: list[str],
        topic: str = "",
        metadata: dict[str, Any] | None = None,
        ctx: CallContext | None = None,
    ) -> Conversation:
        """Create an active conversation among existing agents.

        Raises:
            AgentNotFoundError: If any participant is unknown (nothing is created).
        """
        if ctx is not None:
            ctx.check()
        with self._lock.write():
            members = [self._agents.get(agent_id) for agent_id in participants]
            conversation = Conversation(
                participants=list(participants),
                topic=topic,
                metadata=dict(metadata or {}),
            )
            self._conversations[conversation.id] = conversation
            for agent in members:
                self._agents.record(agent, "conversation_started", conversation.id)
            snapshot = conversation.model_copy(deep=True)

        logger.info(
            "Started conversation %s: %d participants, topic=%r",
            snapshot.id, len(participants), topic,
        )
        return snapshot

    def close(self, conversation_id: str, ctx: CallContext | None = None) -> Conversation:
        """Close a conversation. Closing a closed conversation is a no-op."""
        if ctx is not None:
            ctx.check()
        with self._lock.write():
            conversation = self._require(conversation_id)
            if conversation.status is ConversationStatus.CLOSED:
                logger.debug("Conversation %s already closed", conversation_id)
                return conversation.model_copy(deep=True)

            conversation.status = ConversationStatus.CLOSED
            conversation.updated_at = utcnow()
            for agent_id in conversation.participants:
                agent = self._agents.find(agent_id)
                if agent is not None:
                    self._agents.record(agent, "conversation_closed", conversation_id)
            snapshot = conversation.model_copy(deep=True)

        logger.info("Closed conversation %s", conversation_id)
        return snapshot

    # --- Messaging ---

    def send(
        self,
        conversation_id: str,
        message: Message,
        ctx: CallContext | None = None,
    ) -> Message:
        """Append `message` to an active conversation.

        Assigns id and timestamp when missing (also on the caller's object).
        A task-delegation message additionally schedules a detached task
        on the receiver.

        Raises:
            ConversationNotFoundError: Unknown conversation.
            InvalidRequestError: Conversation closed, or delegation without receiver.
            AgentNotFoundError: Unknown sender, or unknown delegation receiver.
        """
        if ctx is not None:
            ctx.check()
        with self._lock.write():
            conversation = self._require(conversation_id)
            if conversation.status is not ConversationStatus.ACTIVE:
                raise InvalidRequestError(
                    f"conversation is not active: {conversation_id} ({conversation.status.value})"
                )

            sender = self._agents.find(message.from_agent_id)
            if sender is None:
                raise AgentNotFoundError(
                    message.from_agent_id,
                    f"sender agent not found: {message.from_agent_id}",
                )
            receiver = self._agents.find(message.to_agent_id) if message.to_agent_id else None

            if message.type is MessageType.TASK_DELEGATION:
                if not message.to_agent_id:
                    raise InvalidRequestError(
                        "task delegation message must specify a receiver agent"
                    )
                if receiver is None:
                    raise AgentNotFoundError(
                        message.to_agent_id,
                        f"receiver agent not found: {message.to_agent_id}",
                    )

            if not message.id:
                message.id = new_id()
            if message.timestamp is None:
                message.timestamp = utcnow()
            stored = message.model_copy(deep=True)
            conversation.messages.append(stored)
            conversation.updated_at = utcnow()

            self._agents.record(sender, "message_sent", message.content)
            if receiver is not None:
                self._agents.record(receiver, "message_received", message.content)
            snapshot = stored.model_copy(deep=True)

        logger.info(
            "Message %s sent in %s: %s -> %s (%s)",
            snapshot.id,
            conversation_id,
            snapshot.from_agent_id,
            snapshot.to_agent_id or "*",
            snapshot.type.value,
        )

        if snapshot.type is MessageType.TASK_DELEGATION and receiver is not None:
            self._delegate(conversation_id, snapshot, receiver)
        return snapshot

    def _delegate(self, conversation_id: str, message: Message, receiver: Agent) -> None:
        """Start the detached delegation worker."""
        task_type = message.context.get("task_type")
        params = message.context.get("task_parameters")
        task = Task(
            type=task_type if isinstance(task_type, str) and task_type else self._default_task_type,
            input=message.content,
            agent_id=receiver.id,
            model_name=str(message.context.get("model_name") or ""),
            parameters=dict(params) if isinstance(params, dict) else {},
        )
        worker = threading.Thread(
            target=self._run_delegation,
            args=(conversation_id, message, receiver, task),
            name=f"agentweave-delegation-{task.id[:8]}",
            daemon=True,
        )
        worker.start()
        logger.debug("Delegated task %s to agent %s", task.id, receiver.id)

    def _run_delegation(
        self, conversation_id: str, message: Message, receiver: Agent, task: Task,
    ) -> None:
        with log_context(conversation_id=conversation_id):
            try:
                result = self._executor.execute_task(task, receiver, background())
            except OrchestrationError as exc:
                logger.error(
                    "Delegated task %s from message %s failed: %s", task.id, message.id, exc,
                )
                return

            response = Message(
                from_agent_id=receiver.id,
                to_agent_id=message.from_agent_id,
                content=result.output,
                type=MessageType.RESPONSE,
                context={"task_id": task.id, "original_message_id": message.id},
            )
            try:
                self.send(conversation_id, response)
            except OrchestrationError as exc:
                logger.error(
                    "Failed to post response for delegated task %s: %s", task.id, exc,
                )

    # --- Queries ---

    def get(self, conversation_id: str) -> Conversation:
        with self._lock.read():
            return self._require(conversation_id).model_copy(deep=True)

    def list_for_agent(self, agent_id: str) -> list[Conversation]:
        """Snapshots of conversations the agent participates in, oldest first."""
        with self._lock.read():
            found = [
                c.model_copy(deep=True)
                for c in self._conversations.values()
                if agent_id in c.participants
            ]
        return sorted(found, key=lambda c: c.created_at)

    def metrics(self) -> dict[str, Any]:
        """Aggregate counters over every conversation."""
        with self._lock.read():
            conversations = list(self._conversations.values())
            total = len(conversations)
            active = sum(1 for c in conversations if c.status is ConversationStatus.ACTIVE)
            by_type: Counter[str] = Counter()
            participation: Counter[str] = Counter()
            total_messages = 0
            for conversation in conversations:
                total_messages += len(conversation.messages)
                by_type.update(m.type.value for m in conversation.messages)
                participation.update(conversation.participants)

        return {
            "total_conversations": total,
            "active_conversations": active,
            "total_messages": total_messages,
            "message_types": dict(by_type),
            "agent_participation": dict(participation),
            "average_messages_per_conversation": total_messages / total if total else 0.0,
        }

    # --- Workflows ---

    def run_workflow(
        self,
        workflow: ConversationWorkflow,
        ctx: CallContext | None = None,
    ) -> ConversationWorkflowResult:
        """Start one conversation and send each templated step in order.

        Step templates see the step's parameters plus the content of every
        earlier step message (`step<i>` and the step id). The first failed
        send stops the run; completed steps are kept.

        Raises:
            AgentNotFoundError: If a participant is unknown.
        """
        conversation = self.start(
            workflow.participants,
            workflow.description or workflow.name,
            metadata={"workflow_id": workflow.id},
            ctx=ctx,
        )
        result = ConversationWorkflowResult(conversation_id=conversation.id)
        sent_contents: dict[str, Any] = {}
        start = time.monotonic()

        for idx, step in enumerate(workflow.steps, start=1):
            step_start = time.monotonic()
            message = Message(
                from_agent_id=step.from_agent_id,
                to_agent_id=step.to_agent_id,
                content=render_template(
                    step.message_template, {**sent_contents, **step.parameters},
                ),
                type=step.message_type,
                context=dict(step.parameters),
            )
            try:
                sent = self.send(conversation.id, message, ctx)
            except OrchestrationError as exc:
                result.success = False
                result.error = f"Step {idx} ({step.id}) failed: {exc}"
                logger.warning("Conversation workflow %s aborted: %s", workflow.id, result.error)
                break

            result.step_results.append(
                ConversationStepResult(
                    step_id=step.id,
                    message=sent,
                    duration_ms=(time.monotonic() - step_start) * 1000,
                )
            )
            result.insights.append(
                f"Step {idx}: {step.from_agent_id} -> {step.to_agent_id or 'all'}"
                " completed successfully"
            )
            sent_contents[f"step{idx}"] = sent.content
            sent_contents[step.id] = sent.content

        result.duration_ms = (time.monotonic() - start) * 1000
        result.final_outcome = (
            f"Conversation workflow completed {len(result.step_results)}"
            f" of {len(workflow.steps)} steps"
        )
        logger.info(
            "Conversation workflow %s finished: success=%s, %d steps",
            workflow.id, result.success, len(result.step_results),
        )
        return result

    def _require(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation
