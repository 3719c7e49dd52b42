"""Keyword-rule classifier for gcc/clang diagnostic lines."""

import re

from config.rules import DIAGNOSTIC_RULES, DID_YOU_MEAN
from core.state import ValidationIssue

CATEGORIES = ["syntax", "undeclared", "type", "unused", "semantic", "other"]

# First colon-delimited numeric pair: ":12:5:" (column optional)
_LOCATION = re.compile(r":(\d+):(?:(\d+):)?")

# "<file>:<line>:<col>: <severity>:" prefix, stripped to get the clean message
_PREFIX = re.compile(
    r"^.*?:\d+:(?:\d+:)?\s*(?:fatal\s+)?(?:error|warning|note)\s*:\s*",
    re.IGNORECASE,
)


def categorize(message):
    """Return (category, generic_suggestion) for the first matching rule."""
    for category, keywords, exclude, hint in DIAGNOSTIC_RULES:
        if not keywords.search(message):
            continue
        if exclude is not None and exclude.search(message):
            continue
        return category, hint
    return "other", None


def classify(raw_line, severity=None):
    """Turn one raw compiler diagnostic line into a ValidationIssue.

    Handles the usual `<file>:<line>:<col>: <severity>: <text>` shape.
    Lines without a location (e.g. a synthetic "gcc: command not found")
    still classify, with line and column left as None.
    """
    full = raw_line.strip()
    if severity is None:
        severity = "error" if "error:" in full.lower() else "warning"

    line = column = None
    loc = _LOCATION.search(full)
    if loc:
        line = int(loc.group(1))
        if loc.group(2):
            column = int(loc.group(2))

    message = _PREFIX.sub("", full, count=1).strip() or full
    category, hint = categorize(message)

    suggestion = hint
    mean = DID_YOU_MEAN.search(message)
    if mean:
        suggestion = f"Did you mean '{mean.group(1)}'?"

    return ValidationIssue(
        message=message,
        severity=severity,
        line=line,
        column=column,
        category=category,
        suggestion=suggestion,
        full_message=full,
    )


def classify_all(lines, severity=None):
    """Classify every non-empty line, preserving order."""
    return [classify(line, severity) for line in lines if line and line.strip()]


def group_by_category(issues):
    """Return {category: [issues]} with every category present, in priority order."""
    grouped = {category: [] for category in CATEGORIES}
    for issue in issues:
        grouped.setdefault(issue.category, []).append(issue)
    return grouped
