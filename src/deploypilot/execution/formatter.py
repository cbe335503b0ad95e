"""Human-readable rendering of command output and failures."""

from deploypilot.errors import FailureCategory

# Substring -> prefix applied to a stdout line, first match wins
LINE_MARKERS: tuple[tuple[str, str], ...] = (
    ("created", "✅"),
    ("configured", "🔄"),
    ("unchanged", "➖"),
)

WARNINGS_HEADER = "⚠️ Warnings:"

# Substring of the raw error text -> category, first match wins
FAILURE_RULES: tuple[tuple[str, FailureCategory], ...] = (
    ("not found", FailureCategory.RESOURCE_MISSING),
    ("permission denied", FailureCategory.PERMISSION_DENIED),
    ("timed out", FailureCategory.TIMEOUT),
    ("timeout", FailureCategory.TIMEOUT),
)

FAILURE_MESSAGES: dict[FailureCategory, str] = {
    FailureCategory.RESOURCE_MISSING: "Required resource not found. Check that the file and referenced resources exist.",
    FailureCategory.PERMISSION_DENIED: "Permission denied. Check the cluster credentials and RBAC rules.",
    FailureCategory.TIMEOUT: "Command timed out. The cluster may be slow or unreachable.",
    FailureCategory.GENERIC: "Command failed. See the error details.",
}

SUCCESS_MESSAGE = "Command executed successfully"


def format_line(line: str) -> str:
    for needle, glyph in LINE_MARKERS:
        if needle in line:
            return f"{glyph} {line}"
    return line


def format_output(stdout: str, stderr: str = "") -> str:
    """
    Decorate stdout line by line and append stderr as warnings.

    Args:
        stdout: Captured standard output
        stderr: Captured standard error

    Returns:
        Formatted text
    """
    formatted = "\n".join(format_line(line) for line in stdout.rstrip("\n").splitlines())
    warnings = stderr.strip()
    if warnings:
        section = f"{WARNINGS_HEADER}\n{warnings}"
        formatted = f"{formatted}\n\n{section}" if formatted else section
    return formatted


def classify_failure(error_text: str) -> FailureCategory:
    """Map raw error text to a failure category."""
    lowered = error_text.lower()
    for needle, category in FAILURE_RULES:
        if needle in lowered:
            return category
    return FailureCategory.GENERIC


def failure_message(category: FailureCategory) -> str:
    return FAILURE_MESSAGES[category]
