# src/engine/workflow.py — v1
"""Workflow engine: ordered task steps chained through `{{key}}` placeholders.

Each completed step publishes its output under `step<i>` (1-based) and
under its own name. A failing step aborts the run; later steps are not
attempted and the result reports which step failed.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Mapping

from agentweave.core.errors import OrchestrationError
from agentweave.core.models import Task, WorkflowResult, WorkflowStep, WorkflowStepResult
from agentweave.engine.routing import select_model

if TYPE_CHECKING:
    from agentweave.core.cancellation import CallContext
    from agentweave.engine.agent_store import AgentStore
    from agentweave.engine.executor import TaskExecutor

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{\{([^{}]+)\}\}")


def render_template(template: str, values: Mapping[str, Any]) -> str:
    """Replace every `{{key}}` whose key is in `values` with str(value).

    Unknown placeholders are left as they are. Substituted text is not
    expanded again.
    """

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in values:
            return str(values[key])
        return match.group(0)

    return _PLACEHOLDER_RE.sub(_sub, template)


class WorkflowEngine:
    """Run multi-step workflows for one agent on top of the task executor."""

    def __init__(self, executor: TaskExecutor, agents: AgentStore) -> None:
        self._executor = executor
        self._agents = agents

    def run(
        self,
        agent_id: str,
        steps: list[WorkflowStep],
        ctx: CallContext | None = None,
    ) -> WorkflowResult:
        """Execute `steps` in order.

        Raises:
            AgentNotFoundError: If the agent does not exist.
        """
        agent = self._agents.get(agent_id)
        outputs: dict[str, str] = {}
        result = WorkflowResult()

        for idx, step in enumerate(steps, start=1):
            text = render_template(step.input, outputs)
            task = Task(
                type=step.type,
                input=text,
                agent_id=agent_id,
                model_name=step.model_name or select_model(agent, step.type, text),
                parameters={"workflow_step": step.name},
            )

            try:
                step_result = self._executor.execute_task(task, agent, ctx)
            except OrchestrationError as exc:
                logger.warning("Workflow aborted at step %d (%s): %s", idx, step.name, exc)
                result.success = False
                result.error = f"Step {idx} ({step.name}) failed: {exc}"
                result.failed_step = step.name
                return result

            outputs[f"step{idx}"] = step_result.output
            outputs[step.name] = step_result.output
            result.steps.append(
                WorkflowStepResult(
                    name=step.name,
                    type=step.type,
                    input=text,
                    output=step_result.output,
                    model_used=step_result.model_used,
                )
            )

        logger.info("Workflow completed: %d steps for agent %s", len(steps), agent_id)
        return result
