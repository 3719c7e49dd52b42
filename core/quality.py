"""Quality gate evaluation."""

from core.state import GeneratedCode


def validation_status(result: GeneratedCode) -> str:
    """Map a compile result to its repair-loop state."""
    if result.errors:
        return "has_errors"
    if result.warnings:
        return "has_warnings"
    return "clean"


def quality_gates_pass(result: GeneratedCode) -> bool:
    """Errors are fatal; residual warnings are acceptable."""
    return not result.errors
