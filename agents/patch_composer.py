"""Patch composer: turns compiler diagnostics into a repair prompt. Zero LLM calls."""

from config.defaults import DEFAULTS
from core.diagnostics import classify

_SEMANTIC_CATEGORIES = {"undeclared", "type", "semantic"}

_INSTRUCTIONS = [
    "Fix all syntax errors first",
    "Ensure all variables and functions are properly declared",
    "Fix type mismatches and incompatibilities",
    "Address warnings where reasonable",
    "Preserve the original functionality and logic",
    "Add necessary #include directives if missing",
]


def split_errors(errors):
    """Bucket raw error lines into (syntax, semantic_or_type, other), order preserved."""
    syntax, semantic, other = [], [], []
    for raw in errors:
        category = classify(raw).category
        if category == "syntax":
            syntax.append(raw)
        elif category in _SEMANTIC_CATEGORIES:
            semantic.append(raw)
        else:
            other.append(raw)
    return syntax, semantic, other


def _section(title, items):
    lines = [f"{title}:"]
    for idx, item in enumerate(items, 1):
        lines.append(f"{idx}. {item}")
    return "\n".join(lines) + "\n"


class PatchComposer:
    """Formats categorized compiler issues plus the current source as repair instructions."""

    name = "patch_composer"

    def __init__(self, warning_limit=None):
        self.warning_limit = warning_limit or DEFAULTS["repair_warning_limit"]

    def compose(self, code, warnings, errors):
        syntax, semantic, other = split_errors(errors)

        parts = ["You are fixing C code compilation issues. Here's what needs to be fixed:\n"]
        if syntax:
            parts.append(_section("SYNTAX ERRORS (fix these first)", syntax))
        if semantic:
            parts.append(_section("SEMANTIC/TYPE ERRORS", semantic))
        if other:
            parts.append(_section("OTHER ERRORS", other))
        if warnings:
            parts.append(_section("WARNINGS (fix if possible)", list(warnings)[:self.warning_limit]))

        parts.append(f"Current code:\n```c\n{code}\n```\n")
        parts.append(_section("Instructions", _INSTRUCTIONS))
        parts.append("Provide ONLY the corrected C code wrapped in ```c code blocks. No explanations.")
        return "\n".join(parts)
