"""Tester agent: shallow static test battery over the C source. Zero LLM calls.

Every "test" is a substring or regex presence check on the source text.
Only the blackbox compile check invokes the compiler.
"""

import re

from config.defaults import DEFAULTS
from config.rules import DESIGN_PATTERN_RULES
from core.state import DesignCheck, TestResult

CATEGORY_ORDER = ["UX", "regression", "unit", "blackbox", "A-B"]

_LABELS = {
    "UX": "UX",
    "regression": "Regression",
    "unit": "Unit",
    "blackbox": "Blackbox",
    "A-B": "A-B",
}

_UNIT_FUNCTION = re.compile(r"(?:void|int|float|double|char|struct\s+\w+)\s+(\w+)\s*\(")
_DOUBLE_FREE = re.compile(r"free\s*\(([^)]+)\)[\s\S]*free\s*\(\1\)")
_PARAM_LIST = re.compile(r"\([^)]+\)")
_HEADER_FILE = re.compile(r"\w+\.h")


def count_for(total, percent):
    """ceil(total * percent / 100) in integer arithmetic."""
    return -(-total * percent // 100)


def has_double_free(code):
    """True if the same argument is passed to free() twice.

    Matches identical argument text only; aliased pointers are missed.
    """
    return bool(_DOUBLE_FREE.search(code))


class ShallowTestOracle:
    """Emits a fixed number of pass/fail checks per non-blank source line."""

    name = "tester"

    def __init__(self, probe=None, tests_per_line=None, weights=None):
        self.probe = probe
        self.tests_per_line = tests_per_line or DEFAULTS["tests_per_line"]
        self.weights = dict(weights or DEFAULTS["test_weights"])

    def budget(self, code):
        """Return {category: count} for this source."""
        lines = [line for line in code.split("\n") if line.strip()]
        total = len(lines) * self.tests_per_line
        return {cat: count_for(total, self.weights.get(cat, 0)) for cat in CATEGORY_ORDER}

    def generate_and_run_tests(self, code):
        budget = self.budget(code)
        results = []
        for category in CATEGORY_ORDER:
            count = budget[category]
            if not count:
                continue
            checks = self._checks(category, code)
            label = _LABELS[category]
            for i in range(count):
                passed, pass_msg, fail_msg = checks[i % 3]
                results.append(TestResult(
                    type=category,
                    passed=passed,
                    message=f"{label} Test {i + 1}: {pass_msg if passed else fail_msg}",
                ))
        return results

    def _checks(self, category, code):
        """Three (passed, pass_message, fail_message) checks for a category."""
        if category == "UX":
            return [
                ("error" in code or "Error" in code or "perror" in code,
                 "Error handling present", "Missing error handling"),
                ("printf" in code or "fprintf" in code or "log" in code,
                 "Logging mechanism present", "Missing logging"),
                ("if" in code and ("NULL" in code or "==" in code or "!=" in code),
                 "Input validation present", "Missing input validation"),
            ]
        if category == "regression":
            return [
                ("malloc" in code and "free" in code,
                 "Memory management present", "Missing memory management"),
                (not has_double_free(code),
                 "No double-free detected", "Potential double-free issue"),
                ("[" in code and ("<" in code or ">" in code or "sizeof" in code),
                 "Bounds checking present", "Missing bounds checking"),
            ]
        if category == "unit":
            functions = _UNIT_FUNCTION.findall(code)
            return [
                (bool(functions),
                 f"Found {len(functions)} functions", "No functions found"),
                ("return" in code,
                 "Functions have return values", "Missing return statements"),
                (any(len(p) > 2 for p in _PARAM_LIST.findall(code)),
                 "Functions have parameters", "Functions lack parameters"),
            ]
        if category == "blackbox":
            compiles = self.probe.compiles(code) if self.probe is not None else False
            return [
                ("main" in code,
                 "Entry point (main) present", "Missing entry point"),
                (compiles,
                 "Code compiles successfully", "Code does not compile"),
                ("scanf" in code or "fread" in code or "read" in code,
                 "I/O operations present", "Missing I/O operations"),
            ]
        if category == "A-B":
            return [
                ("inline" in code or "static" in code or "const" in code,
                 "Optimization hints present", "Missing optimization"),
                ("if" in code and "else" in code,
                 "Alternative execution paths present", "Single execution path"),
                ("#include" in code and bool(_HEADER_FILE.search(code)),
                 "Modular design detected", "Lacks modularity"),
            ]
        raise ValueError(f"Unknown test category: {category}")

    def check_design_patterns(self, code) -> DesignCheck:
        patterns = {}
        issues = []
        for name, detect, failure, applies in DESIGN_PATTERN_RULES:
            found = bool(detect(code))
            patterns[name] = found
            if failure and not found and applies(code):
                issues.append(failure)
        return DesignCheck(passed=not issues, issues=issues, patterns=patterns)


def summarize(results):
    """Return {type: {"passed": n, "total": n}} in first-seen order."""
    summary = {}
    for result in results:
        stats = summary.setdefault(result.type, {"passed": 0, "total": 0})
        stats["total"] += 1
        if result.passed:
            stats["passed"] += 1
    return summary
