#!/usr/bin/env python3
"""Flux Circuits - HTTP API server."""

import os
import threading

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from agents.tester import summarize
from config.defaults import DEFAULTS
from config.targets import HARDWARE_TARGETS, TARGET_DESCRIPTIONS, normalize_target
from core.compiler import CompilerProbe
from core.errors import (
    ConfigurationError,
    CodeGenRateLimitError,
    FluxCircuitsError,
    UnresolvedErrorsError,
)
from core.orchestrator import Orchestrator

load_dotenv()

app = Flask(__name__)
history = []

_MAX_HISTORY = 50

_history_lock = threading.Lock()

_orchestrator = None
_orchestrator_lock = threading.Lock()


def get_orchestrator():
    """Return the shared orchestrator, building it on first request."""
    global _orchestrator
    with _orchestrator_lock:
        if _orchestrator is None:
            _orchestrator = Orchestrator()
        return _orchestrator


def _issue_to_dict(issue):
    return {
        "message": issue.message,
        "severity": issue.severity,
        "line": issue.line,
        "column": issue.column,
        "category": issue.category,
        "suggestion": issue.suggestion,
        "full_message": issue.full_message,
    }


def _result_to_dict(result):
    """Serialize a ConversionResult to a JSON-safe dict."""
    return {
        "idea": result.idea,
        "target": result.target,
        "status": result.status,
        "attempts": result.attempts,
        "code": result.code,
        "warnings": list(result.validation.warnings) if result.validation else [],
        "tests": [t.to_dict() for t in result.tests],
        "test_summary": summarize(result.tests),
        "design_check": {
            "passed": result.design_check.passed,
            "issues": result.design_check.issues,
            "patterns": result.design_check.patterns,
        } if result.design_check else None,
        "circuit": result.circuit.to_dict() if result.circuit else None,
        "output_files": result.output_files,
    }


def _remember(entry):
    with _history_lock:
        history.append(entry)
        if len(history) > _MAX_HISTORY:
            del history[:len(history) - _MAX_HISTORY]


def _int_option(data, name, minimum):
    """Return (value, error) for an optional integer body field."""
    value = data.get(name)
    if value is None:
        return None, None
    if isinstance(value, bool) or not isinstance(value, int):
        return None, f"{name} must be an integer"
    if value < minimum:
        return None, f"{name} must be >= {minimum}"
    return value, None


@app.route("/api/targets")
def api_targets():
    return jsonify([
        {"name": name, "description": TARGET_DESCRIPTIONS[name]} for name in HARDWARE_TARGETS
    ])


@app.route("/api/convert", methods=["POST"])
def api_convert():
    """Run the full pipeline synchronously and write the output files.

    Outputs always go to the server's configured directory
    (FLUX_CIRCUITS_OUTPUT_DIR or the default); the body cannot choose a path.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Missing idea"}), 400
    idea = data.get("idea")
    if idea is not None and not isinstance(idea, str):
        return jsonify({"error": "idea must be a string"}), 400
    if not idea or not idea.strip():
        return jsonify({"error": "Missing idea"}), 400
    idea = idea.strip()

    raw_target = data.get("target")
    target = normalize_target(raw_target) if isinstance(raw_target, str) else None
    if target is None:
        return jsonify({
            "error": f"Invalid target: {raw_target}",
            "valid_targets": HARDWARE_TARGETS,
        }), 400

    max_retries, error = _int_option(data, "max_retries", 0)
    if error:
        return jsonify({"error": error}), 400
    optimization_level, error = _int_option(data, "optimization_level", 0)
    if error:
        return jsonify({"error": error}), 400

    try:
        orchestrator = get_orchestrator()
        result = orchestrator.convert(
            idea,
            target,
            max_retries=max_retries,
            optimization_level=optimization_level,
        )
        orchestrator.write_outputs(result)
    except ConfigurationError as e:
        return jsonify({"error": e.message}), 500
    except UnresolvedErrorsError as e:
        return jsonify({"error": e.message, "errors": e.errors, "attempts": e.attempts}), 422
    except CodeGenRateLimitError as e:
        return jsonify({"error": e.message}), 429
    except FluxCircuitsError as e:
        return jsonify({"error": e.message}), 502

    payload = _result_to_dict(result)
    _remember({
        "idea": idea,
        "target": target,
        "attempts": result.attempts,
        "mock_circuit": result.circuit.is_mock,
        "output_files": result.output_files,
    })
    return jsonify(payload)


@app.route("/api/validate", methods=["POST"])
def api_validate():
    """Compile-probe a source string; no network calls."""
    data = request.get_json(silent=True)
    code = data.get("code") if isinstance(data, dict) else None
    if not isinstance(code, str) or not code.strip():
        return jsonify({"error": "Missing code"}), 400

    report = CompilerProbe().report(code)
    return jsonify({
        "clean": not report.errors and not report.warnings,
        "summary": report.summary,
        "errors": [_issue_to_dict(i) for i in report.errors],
        "warnings": [_issue_to_dict(i) for i in report.warnings],
        "pre_issues": [_issue_to_dict(i) for i in report.pre_issues],
    })


@app.route("/api/history")
def api_history():
    return jsonify(history)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5001))
    print(f"Flux Circuits API running at http://localhost:{port}")
    print(f"Default repair budget: {DEFAULTS['max_retries']} attempts")
    app.run(debug=False, port=port)
