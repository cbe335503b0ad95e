"""Exception hierarchy for the deployment pipeline."""

from enum import Enum


class FailureCategory(str, Enum):
    """Classification of a failed command execution."""

    RESOURCE_MISSING = "resource_missing"
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    GENERIC = "generic"


class DeployPilotError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, context: str | None = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class TemplateNotFoundError(DeployPilotError):
    """Raised when a template, config record or workload directory is missing."""

    pass


class PlaceholderScanError(DeployPilotError):
    """Raised when a template cannot be parsed for placeholder scanning."""

    pass


class TemplateInvalidError(DeployPilotError):
    """Raised when a materialized template is not a well-formed YAML document."""

    def __init__(self, message: str, parse_error: str):
        self.parse_error = parse_error
        super().__init__(message, context=parse_error)


class UnresolvedPlaceholdersError(DeployPilotError):
    """Raised by strict materialization when placeholders remain unresolved."""

    def __init__(self, names: list[str]):
        self.names = names
        super().__init__(
            f"{len(names)} placeholder(s) left unresolved",
            context=", ".join(names),
        )


class CommandExecutionError(DeployPilotError):
    """Raised when an external command fails, times out or overflows its output."""

    def __init__(
        self,
        message: str,
        category: FailureCategory,
        stdout: str = "",
        stderr: str = "",
        returncode: int | None = None,
    ):
        self.category = category
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(message)
