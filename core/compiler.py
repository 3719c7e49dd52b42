"""Compiler probe: compiles C source with gcc and collects diagnostics. Zero LLM calls."""

import os
import re
import time

from agents.base import CompilerProbeBase
from config.defaults import DEFAULTS
from core.diagnostics import classify_all, group_by_category, CATEGORIES
from core.sandbox import run_in_sandbox
from core.state import GeneratedCode, ValidationIssue, ValidationReport

_INT_MAIN = re.compile(r"\bint\s+main\s*\(")
_ANY_MAIN = re.compile(r"\bmain\s*\(")
_COMMENT_PREFIXES = ("//", "/*", "*")


def _split_diagnostics(output):
    """Split compiler output into (warnings, errors) by 'error:' / 'warning:' substrings."""
    warnings, errors = [], []
    for line in output.split("\n"):
        if "error:" in line:
            errors.append(line.strip())
        elif "warning:" in line:
            warnings.append(line.strip())
    return warnings, errors


def _remove_quietly(*paths):
    for path in paths:
        try:
            os.remove(path)
        except OSError:
            pass


def _unescaped_quotes(line):
    count = 0
    escaped = False
    in_char = False
    for ch in line:
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
        elif ch == "'" and not count % 2:
            in_char = not in_char
        elif ch == '"' and not in_char:
            count += 1
    return count


def _issue(message, severity, line=None, category="syntax", suggestion=None):
    return ValidationIssue(
        message=message,
        severity=severity,
        line=line,
        column=None,
        category=category,
        suggestion=suggestion,
        full_message=message,
    )


class CompilerProbe(CompilerProbeBase):
    """Compiles a source string in a temp dir and classifies the output.

    Never raises for compiler problems: a missing compiler, a timeout or a
    disallowed command comes back as a single synthetic error entry.
    """

    name = "compiler"

    def __init__(self, temp_dir=None, compiler=None, flags=None):
        self.temp_dir = temp_dir or os.environ.get("FLUX_CIRCUITS_TEMP_DIR") or DEFAULTS["temp_dir"]
        self.compiler = compiler or DEFAULTS["compiler"]
        self.flags = list(flags if flags is not None else DEFAULTS["compiler_flags"])

    def _temp_paths(self, stem):
        os.makedirs(self.temp_dir, exist_ok=True)
        base = os.path.join(self.temp_dir, f"{stem}_{int(time.time() * 1000)}")
        return base + ".c", base + ".o"

    def check(self, code) -> GeneratedCode:
        """Compile strictly, then relaxed if the strict run fails.

        The strict pass promotes warnings to errors. When it fails, the
        relaxed pass is the one classified, so real warnings stay warnings.
        """
        source, obj = None, None
        try:
            source, obj = self._temp_paths("temp")
            with open(source, "w", encoding="utf-8") as fp:
                fp.write(code)

            base_cmd = [self.compiler] + self.flags
            tail = ["-c", source, "-o", obj]

            stdout, stderr, rc = run_in_sandbox(
                base_cmd + DEFAULTS["strict_flags"] + tail, cwd=self.temp_dir,
            )
            if rc == 0:
                warnings, errors = _split_diagnostics(stderr + stdout)
                return GeneratedCode.from_output(code, warnings, errors)

            stdout, stderr, rc = run_in_sandbox(base_cmd + tail, cwd=self.temp_dir)
            output = stderr + stdout
            warnings, errors = _split_diagnostics(output)
            if rc != 0 and not errors:
                errors = [output.strip() or f"{self.compiler} exited with status {rc}"]
            return GeneratedCode.from_output(code, warnings, errors)
        except (OSError, ValueError) as e:
            return GeneratedCode.from_output(code, [], [str(e) or "Unknown compilation error"])
        finally:
            if source:
                _remove_quietly(source, obj)

    def compiles(self, code) -> bool:
        """Bare compile with no warning flags; True on exit status 0."""
        source = None
        try:
            source, _ = self._temp_paths("test")
            with open(source, "w", encoding="utf-8") as fp:
                fp.write(code)
            _, _, rc = run_in_sandbox(
                [self.compiler, "-c", source, "-o", os.devnull], cwd=self.temp_dir,
            )
            return rc == 0
        except (OSError, ValueError):
            return False
        finally:
            if source:
                _remove_quietly(source)

    def pre_validate(self, code):
        """Cheap lexical checks that run without a compiler.

        Raw character counts and per-line quote parity only; comments and
        string contents are not understood.
        """
        issues = []

        opening, closing = code.count("{"), code.count("}")
        if opening != closing:
            issues.append(_issue(
                f"Unbalanced braces: {opening} opening, {closing} closing",
                "error",
                suggestion="Add or remove '{' / '}' so every block is closed",
            ))

        opening, closing = code.count("("), code.count(")")
        if opening != closing:
            issues.append(_issue(
                f"Unbalanced parentheses: {opening} opening, {closing} closing",
                "error",
                suggestion="Add or remove '(' / ')' so every call and condition is closed",
            ))

        if "#include" not in code:
            issues.append(_issue(
                "No #include directives found",
                "warning",
                category="undeclared",
                suggestion="Add the standard headers the code relies on, e.g. #include <stdio.h>",
            ))

        if _ANY_MAIN.search(code) and not _INT_MAIN.search(code):
            issues.append(_issue(
                "main() should be declared as 'int main(...)'",
                "warning",
                category="semantic",
                suggestion="Declare main as 'int main(void)' or 'int main(int argc, char *argv[])'",
            ))

        for number, line in enumerate(code.split("\n"), 1):
            if line.strip().startswith(_COMMENT_PREFIXES):
                continue
            if _unescaped_quotes(line) % 2:
                issues.append(_issue(
                    "Possibly unterminated string literal",
                    "warning",
                    line=number,
                    suggestion="Close the string literal on the same line",
                ))

        return issues

    def report(self, code, generated=None) -> ValidationReport:
        """Build a classified validation report, compiling unless a result is given."""
        if generated is None:
            generated = self.check(code)
        errors = classify_all(generated.errors, "error")
        warnings = classify_all(generated.warnings, "warning")
        pre_issues = self.pre_validate(code)

        lines = [f"Errors: {len(errors)}  Warnings: {len(warnings)}"]
        grouped = group_by_category(errors + warnings)
        counts = [f"{c}={len(grouped[c])}" for c in CATEGORIES if grouped[c]]
        if counts:
            lines.append("By category: " + ", ".join(counts))
        if pre_issues:
            lines.append(f"Pre-validation: {len(pre_issues)} issue(s)")
            for issue in pre_issues:
                where = f" (line {issue.line})" if issue.line else ""
                lines.append(f"  - {issue.message}{where}")

        return ValidationReport(
            errors=tuple(errors),
            warnings=tuple(warnings),
            pre_issues=tuple(pre_issues),
            summary="\n".join(lines),
        )


def code_context(code, line, radius=1):
    """Return the lines around `line` (1-based), marking the offending one."""
    lines = code.split("\n")
    if not line or line < 1 or line > len(lines):
        return ""
    start = max(0, line - 1 - radius)
    end = min(len(lines), line + radius)
    out = []
    for idx in range(start, end):
        marker = ">" if idx == line - 1 else " "
        out.append(f"{marker} {idx + 1}: {lines[idx]}")
    return "\n".join(out)
