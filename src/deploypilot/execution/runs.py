"""Background plan runs polled by id."""

import logging
import threading
import uuid
from collections import OrderedDict
from collections.abc import Callable
from datetime import datetime

from deploypilot.errors import FailureCategory
from deploypilot.execution.engine import ExecutionEngine
from deploypilot.execution.formatter import failure_message
from deploypilot.shared.schemas import CommandResult, DeploymentPlan, ExecutionReport, StepStatus

logger = logging.getLogger(__name__)

MAX_TRACKED_RUNS = 100


class RunRegistry:
    """Start plans in worker threads and hand out their latest report snapshots."""

    def __init__(
        self,
        engine_factory: Callable[[], ExecutionEngine] = ExecutionEngine,
        max_runs: int = MAX_TRACKED_RUNS,
    ):
        self._engine_factory = engine_factory
        self._max_runs = max_runs
        self._reports: OrderedDict[str, ExecutionReport] = OrderedDict()
        self._threads: dict[str, threading.Thread] = {}
        self._lock = threading.Lock()

    def _store(self, run_id: str, report: ExecutionReport) -> None:
        with self._lock:
            self._reports[run_id] = report

    def _evict(self) -> None:
        # Oldest finished runs go first; runs in flight are never dropped
        while len(self._reports) > self._max_runs:
            victim = next((rid for rid, r in self._reports.items() if r.finished), None)
            if victim is None:
                break
            del self._reports[victim]
            self._threads.pop(victim, None)

    def _work(self, run_id: str, plan: DeploymentPlan) -> None:
        engine = self._engine_factory()
        try:
            engine.execute(plan, on_update=lambda report: self._store(run_id, report))
        except Exception as e:
            logger.error(f"Run {run_id} aborted: {e}", exc_info=True)
            self._abort(run_id, e)

    def _abort(self, run_id: str, error: Exception) -> None:
        # Steps that never reached a terminal state are closed out as errors
        ended_at = datetime.now()
        with self._lock:
            report = self._reports.get(run_id)
            if report is None:
                return
            results = tuple(
                result
                if result.status in (StepStatus.SUCCESS, StepStatus.ERROR)
                else result.model_copy(
                    update={
                        "status": StepStatus.ERROR,
                        "message": failure_message(FailureCategory.GENERIC),
                        "failure_category": FailureCategory.GENERIC,
                        "error": f"Run aborted: {error}",
                        "ended_at": ended_at,
                    }
                )
                for result in report.results
            )
            self._reports[run_id] = report.model_copy(update={"results": results, "finished": True})

    def start(self, plan: DeploymentPlan) -> str:
        """
        Start a plan in the background.

        Returns:
            Run id to poll with get()
        """
        run_id = uuid.uuid4().hex
        pending = ExecutionReport(
            name=plan.name,
            version=plan.version,
            namespace=plan.namespace,
            results=tuple(CommandResult(command=step.command.command) for step in plan.steps),
        )
        thread = threading.Thread(target=self._work, args=(run_id, plan), name=f"run-{run_id[:8]}", daemon=True)

        with self._lock:
            self._reports[run_id] = pending
            self._threads[run_id] = thread
            self._evict()

        thread.start()
        logger.info(f"Started run {run_id} for {plan.name} {plan.version}")
        return run_id

    def get(self, run_id: str) -> ExecutionReport | None:
        """Latest report snapshot of a run, or None if unknown."""
        with self._lock:
            return self._reports.get(run_id)

    def wait(self, run_id: str, timeout: float | None = None) -> ExecutionReport | None:
        """Block until a run's worker finishes, then return its report."""
        with self._lock:
            thread = self._threads.get(run_id)
        if thread is not None:
            thread.join(timeout)
        return self.get(run_id)
