"""Tests for core.sandbox."""

import subprocess
import tempfile
from unittest.mock import patch, MagicMock

import pytest

from core.sandbox import run_in_sandbox


def test_allowed_command():
    with tempfile.TemporaryDirectory() as tmpdir:
        with patch("core.sandbox.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="gcc (GCC) 13.2.0")
            stdout, stderr, rc = run_in_sandbox(["gcc", "--version"], cwd=tmpdir)
        assert rc == 0
        assert "GCC" in stderr
        assert mock_run.call_args.kwargs["timeout"] > 0
        assert mock_run.call_args.kwargs["env"]["LC_ALL"] == "C"


def test_allowed_command_with_absolute_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        with patch("core.sandbox.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
            _, _, rc = run_in_sandbox(["/usr/bin/gcc", "--version"], cwd=tmpdir)
        assert rc == 0


def test_disallowed_command():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ValueError, match="not in allowlist"):
            run_in_sandbox(["rm", "-rf", "/"], cwd=tmpdir)


def test_disallowed_bash():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ValueError, match="not in allowlist"):
            run_in_sandbox(["bash", "-c", "echo pwned"], cwd=tmpdir)


def test_invalid_cwd():
    with pytest.raises(ValueError, match="does not exist"):
        run_in_sandbox(["gcc", "--version"], cwd="/nonexistent/path")


def test_empty_command():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ValueError, match="non-empty list"):
            run_in_sandbox([], cwd=tmpdir)


def test_timeout():
    with tempfile.TemporaryDirectory() as tmpdir:
        with patch("core.sandbox.subprocess.run",
                   side_effect=subprocess.TimeoutExpired(cmd="gcc", timeout=1)):
            stdout, stderr, rc = run_in_sandbox(["gcc", "-c", "x.c"], cwd=tmpdir, timeout=1)
        assert rc == -1
        assert "timed out" in stderr.lower()


def test_command_not_found():
    with tempfile.TemporaryDirectory() as tmpdir:
        with patch("core.sandbox.subprocess.run", side_effect=FileNotFoundError):
            stdout, stderr, rc = run_in_sandbox(["clang", "-c", "x.c"], cwd=tmpdir)
        assert rc == -1
        assert "not found" in stderr.lower()
