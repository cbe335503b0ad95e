"""External process execution for plan commands."""

import logging
import shlex
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from deploypilot.config import COMMAND_TIMEOUT_SECONDS, MAX_OUTPUT_BYTES
from deploypilot.errors import CommandExecutionError, FailureCategory
from deploypilot.execution.formatter import classify_failure

logger = logging.getLogger(__name__)

READ_CHUNK_BYTES = 64 * 1024


@dataclass(frozen=True)
class RunOutput:
    """Captured output of a successful command."""

    stdout: str
    stderr: str
    returncode: int = 0


class _OutputCollector:
    """Drain a child's stdout and stderr, killing it once the combined size passes the cap."""

    def __init__(self, process: subprocess.Popen, max_bytes: int):
        self.process = process
        self.max_bytes = max_bytes
        self.exceeded = threading.Event()
        self._total = 0
        self._lock = threading.Lock()
        self._chunks: dict[str, list[bytes]] = {"stdout": [], "stderr": []}
        self._threads = [
            threading.Thread(target=self._drain, args=(name, stream), daemon=True)
            for name, stream in (("stdout", process.stdout), ("stderr", process.stderr))
        ]

    def start(self) -> None:
        for thread in self._threads:
            thread.start()

    def join(self) -> None:
        for thread in self._threads:
            thread.join()

    def _drain(self, name: str, stream: IO[bytes]) -> None:
        with stream:
            while not self.exceeded.is_set():
                chunk = stream.read1(READ_CHUNK_BYTES)
                if not chunk:
                    return
                with self._lock:
                    self._total += len(chunk)
                    if self._total > self.max_bytes:
                        self.exceeded.set()
                        self.process.kill()
                        return
                    self._chunks[name].append(chunk)

    def text(self, name: str) -> str:
        with self._lock:
            return b"".join(self._chunks[name]).decode("utf-8", errors="replace")


class CommandRunner:
    """Run command strings as child processes without a shell."""

    def __init__(
        self,
        work_dir: str | Path | None = None,
        timeout: float = COMMAND_TIMEOUT_SECONDS,
        max_output_bytes: int = MAX_OUTPUT_BYTES,
    ):
        """
        Initialize the runner.

        Args:
            work_dir: Working directory for child processes (inherited if None)
            timeout: Hard per-command timeout in seconds
            max_output_bytes: Cap on combined stdout + stderr size
        """
        self.work_dir = Path(work_dir) if work_dir else None
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes

    def _start(self, argv: list[str]) -> subprocess.Popen:
        if self.work_dir is not None and not self.work_dir.is_dir():
            message = f"Working directory not found: {self.work_dir}"
            raise CommandExecutionError(message, classify_failure(message))

        try:
            return subprocess.Popen(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=str(self.work_dir) if self.work_dir else None,
            )
        except FileNotFoundError as e:
            message = f"Executable not found: {e.filename or argv[0]}"
            raise CommandExecutionError(message, classify_failure(message)) from e
        except OSError as e:
            message = f"Cannot start {argv[0]}: {e.strerror or e}"
            raise CommandExecutionError(message, classify_failure(message)) from e

    def run(self, command: str) -> RunOutput:
        """
        Execute one command and capture its output.

        The child is killed as soon as it runs past the timeout or its
        combined output passes the size cap.

        Args:
            command: Command line, split with shell quoting rules

        Returns:
            RunOutput with stdout and stderr

        Raises:
            CommandExecutionError: On timeout, oversized output, a process
                that cannot be started or nonzero exit
        """
        try:
            argv = shlex.split(command)
        except ValueError as e:
            raise CommandExecutionError(f"Cannot parse command: {e}", FailureCategory.GENERIC) from e
        if not argv:
            raise CommandExecutionError("Empty command", FailureCategory.GENERIC)

        logger.info(f"Executing: {command}")
        process = self._start(argv)
        collector = _OutputCollector(process, self.max_output_bytes)
        collector.start()

        try:
            returncode = process.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            process.kill()
            process.wait()
            collector.join()
            raise CommandExecutionError(
                f"Command timed out after {self.timeout:g}s",
                FailureCategory.TIMEOUT,
                stdout=collector.text("stdout"),
                stderr=collector.text("stderr"),
            ) from e
        collector.join()

        stdout = collector.text("stdout")
        stderr = collector.text("stderr")

        if collector.exceeded.is_set():
            logger.warning(f"Killed after output passed {self.max_output_bytes} bytes: {command}")
            raise CommandExecutionError(
                f"Command output exceeded {self.max_output_bytes} bytes",
                FailureCategory.GENERIC,
                returncode=returncode,
            )

        if returncode != 0:
            detail = stderr.strip() or stdout.strip()
            message = f"Command failed with exit code {returncode}: {detail}"
            raise CommandExecutionError(
                message,
                classify_failure(message),
                stdout=stdout,
                stderr=stderr,
                returncode=returncode,
            )

        logger.debug(f"Command succeeded: {command}")
        return RunOutput(stdout=stdout, stderr=stderr, returncode=returncode)
