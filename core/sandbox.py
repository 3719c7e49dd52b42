"""Runs allowlisted C compilers in a subprocess with a timeout."""

import os
import subprocess

from config.defaults import DEFAULTS

# gcc/clang localize diagnostics; the classifier expects the English text
_COMPILER_ENV = {"LC_ALL": "C", "LANG": "C"}


def _check_command(command):
    if not command or not isinstance(command, list):
        raise ValueError("Command must be a non-empty list of strings")
    executable = command[0]
    allowed = DEFAULTS["allowed_commands"]
    if os.path.basename(executable) not in allowed:
        raise ValueError(f"Command '{executable}' not in allowlist: {allowed}")
    return executable


def run_in_sandbox(command, cwd, timeout=None):
    """Run a compiler invocation and capture its output.

    Args:
        command: argv list whose first item is an allowlisted compiler,
            e.g. ["gcc", "-Wall", "-c", "temp.c", "-o", "temp.o"]
        cwd: existing working directory (the probe's temp dir)
        timeout: seconds before the process is killed

    Returns:
        (stdout, stderr, returncode). returncode is -1 when the compiler
        could not run at all; stderr then says why.

    Raises:
        ValueError: disallowed or malformed command, or missing cwd.
    """
    executable = _check_command(command)
    if timeout is None:
        timeout = DEFAULTS["sandbox_timeout"]

    cwd = os.path.realpath(cwd)
    if not os.path.isdir(cwd):
        raise ValueError(f"Working directory does not exist: {cwd}")

    try:
        proc = subprocess.run(
            command,
            cwd=cwd,
            env={**os.environ, **_COMPILER_ENV},
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return "", f"Command timed out after {timeout}s", -1
    except FileNotFoundError:
        return "", f"Command not found: {executable}", -1
    return proc.stdout, proc.stderr, proc.returncode
