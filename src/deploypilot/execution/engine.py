"""Sequential execution of deployment plans.

A run is a fold over the plan's steps: each step moves from pending to
running to success or error, and every transition produces a fresh
immutable report snapshot. A failed step never stops the run.
"""

import logging
from collections.abc import Callable, Iterator
from datetime import datetime

from deploypilot.errors import CommandExecutionError, FailureCategory
from deploypilot.execution.formatter import SUCCESS_MESSAGE, classify_failure, failure_message, format_output
from deploypilot.execution.runner import CommandRunner
from deploypilot.shared.schemas import (
    CommandResult,
    DeploymentPlan,
    ExecutionReport,
    PlanCompletedEvent,
    PlanStep,
    StepEvent,
    StepStatus,
)

logger = logging.getLogger(__name__)

ExecutionEvent = StepEvent | PlanCompletedEvent


class ExecutionEngine:
    """Run plan commands one after another and report their outcomes."""

    def __init__(self, runner: CommandRunner | None = None):
        """
        Initialize the engine.

        Args:
            runner: Command runner (default runner if not provided)
        """
        self.runner = runner or CommandRunner()

    def _failed(
        self,
        command: str,
        category: FailureCategory,
        error: str,
        started_at: datetime,
        stdout: str = "",
        stderr: str = "",
    ) -> CommandResult:
        return CommandResult(
            command=command,
            status=StepStatus.ERROR,
            stdout=stdout,
            stderr=stderr,
            formatted_output=format_output(stdout, stderr),
            message=failure_message(category),
            failure_category=category,
            error=error,
            started_at=started_at,
            ended_at=datetime.now(),
        )

    def execute_command(self, command: str) -> CommandResult:
        """
        Run a single command and capture its outcome.

        Never raises for command failures; they are recorded in the result.
        """
        started_at = datetime.now()
        try:
            output = self.runner.run(command)
        except CommandExecutionError as e:
            logger.error(f"Command failed ({e.category.value}): {command}: {e.message}")
            return self._failed(command, e.category, e.message, started_at, e.stdout, e.stderr)
        except OSError as e:
            logger.error(f"Command could not run: {command}: {e}")
            return self._failed(command, classify_failure(str(e)), str(e), started_at)

        return CommandResult(
            command=command,
            status=StepStatus.SUCCESS,
            stdout=output.stdout,
            stderr=output.stderr,
            formatted_output=format_output(output.stdout, output.stderr),
            message=SUCCESS_MESSAGE,
            started_at=started_at,
            ended_at=datetime.now(),
        )

    def _report(self, plan: DeploymentPlan, results: tuple[CommandResult, ...], finished: bool) -> ExecutionReport:
        return ExecutionReport(
            name=plan.name,
            version=plan.version,
            namespace=plan.namespace,
            results=results,
            finished=finished,
        )

    def _event(self, index: int, plan: DeploymentPlan, step: PlanStep, result: CommandResult) -> StepEvent:
        return StepEvent(
            index=index,
            total=len(plan),
            file_name=step.artifact.file_name,
            artifact_type=step.artifact.type.value,
            status=result.status,
            output=result.formatted_output,
            message=result.message,
            error=result.error,
            started_at=result.started_at,
            ended_at=result.ended_at,
        )

    def _run(self, plan: DeploymentPlan) -> Iterator[tuple[ExecutionEvent, ExecutionReport]]:
        results = tuple(CommandResult(command=step.command.command) for step in plan.steps)
        logger.info(f"Executing plan {plan.name} {plan.version} ({len(plan)} step(s)) in {plan.namespace}")

        for index, step in enumerate(plan.steps):
            running = CommandResult(
                command=step.command.command,
                status=StepStatus.RUNNING,
                started_at=datetime.now(),
            )
            results = results[:index] + (running,) + results[index + 1:]
            logger.info(f"Step {index + 1}/{len(plan)} running: {step.artifact.file_name}")
            yield self._event(index, plan, step, running), self._report(plan, results, False)

            outcome = self.execute_command(step.command.command)
            results = results[:index] + (outcome,) + results[index + 1:]
            logger.info(f"Step {index + 1}/{len(plan)} {outcome.status.value}: {step.artifact.file_name}")
            yield self._event(index, plan, step, outcome), self._report(plan, results, False)

        report = self._report(plan, results, True)
        logger.info(f"Plan {plan.name} {plan.version} {report.summary}")
        yield PlanCompletedEvent(report=report), report

    def stream(self, plan: DeploymentPlan) -> Iterator[ExecutionEvent]:
        """
        Run a plan, yielding an event for every status transition.

        The last event is a PlanCompletedEvent carrying the final report.
        """
        for event, _ in self._run(plan):
            yield event

    def execute(
        self,
        plan: DeploymentPlan,
        on_update: Callable[[ExecutionReport], None] | None = None,
    ) -> ExecutionReport:
        """
        Run a plan to completion.

        Args:
            plan: Ordered deployment plan
            on_update: Called with a report snapshot after every transition

        Returns:
            Final ExecutionReport aligned 1:1 with the plan steps
        """
        report = self._report(plan, (), True)
        for _, report in self._run(plan):
            if on_update is not None:
                on_update(report)
        return report
