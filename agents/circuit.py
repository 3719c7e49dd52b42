"""Circuit client: compiles C source to a hardware schematic via the Flux API."""

import json
import os
import urllib.error
import urllib.request

from agents.base import CircuitCompiler
from config.defaults import DEFAULTS
from config.rules import FUNCTION_SIGNATURE
from core.errors import CircuitAPIError, CircuitConnectionError
from core.state import CircuitResult

DEFAULT_API_URL = "https://api.flux.ai/v1"

MOCK_NOTE = "Mock circuit - configure FLUX_API_KEY and FLUX_API_URL for actual compilation"


def extract_components(code):
    """Names of function-like declarations, in source order."""
    return FUNCTION_SIGNATURE.findall(code)


def mock_circuit(request, reason):
    """Deterministic stand-in built from the source when the API is unavailable."""
    schematic = {
        "target": request.target,
        "components": extract_components(request.code),
        "connections": [],
        "optimization": {
            "level": request.optimization_level,
            "applied": False,
        },
        "metadata": {
            "source_lines": len(request.code.split("\n")),
        },
    }
    return CircuitResult(
        schematic=json.dumps(schematic, indent=2),
        optimized=False,
        target=request.target,
        metadata={"mock": True, "note": MOCK_NOTE, "reason": reason},
    )


def _error_message(data, fallback):
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return err["message"]
        if isinstance(err, str) and err:
            return err
    return fallback


class CircuitClient(CircuitCompiler):
    """Tries the primary compile endpoint, then the secondary, then a flagged mock."""

    name = "circuit"

    def __init__(self, api_key=None, api_url=None, timeout=None):
        self.api_key = api_key if api_key is not None else os.environ.get("FLUX_API_KEY", "")
        self.api_url = (api_url or os.environ.get("FLUX_API_URL") or DEFAULT_API_URL).rstrip("/")
        self.timeout = timeout or DEFAULTS["http_timeout"]

    def compile_to_circuit(self, request) -> CircuitResult:
        status, data, message = self._post("/compile", {
            "source_code": request.code,
            "target": request.target.lower(),
            "optimization_level": request.optimization_level,
            "format": "schematic",
        })

        if 200 <= status < 300:
            if not isinstance(data, dict):
                raise CircuitAPIError(status, "Response was not a JSON object")
            return CircuitResult(
                schematic=data.get("schematic") or data.get("circuit") or "",
                optimized=bool(data.get("optimized", False)),
                target=request.target,
                metadata=data.get("metadata") or {},
            )

        if status == -1:
            raise CircuitConnectionError(self.api_url, message)
        if status == 404:
            return self._compile_secondary(request, f"primary endpoint: {message}")

        raise CircuitAPIError(status, message)

    def _compile_secondary(self, request, primary_reason):
        status, data, message = self._post("/circuits/generate", {
            "code": request.code,
            "hardware_target": request.target,
            "optimize": True,
        })

        if 200 <= status < 300 and isinstance(data, dict):
            return CircuitResult(
                schematic=data.get("result") or json.dumps(data, indent=2),
                optimized=True,
                target=request.target,
                metadata=data,
            )

        reason = f"{primary_reason}; secondary endpoint: {message}"
        return mock_circuit(request, reason)

    def _post(self, path, payload):
        """POST JSON, return (status, parsed_body_or_None, message).

        Returns status -1 on connection failure. Non-2xx responses come back
        as their status code with the upstream error message when present.
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        req = urllib.request.Request(
            self.api_url + path,
            data=json.dumps(payload).encode("utf-8"),
            headers=headers,
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read().decode("utf-8", errors="replace")
                status = resp.status
        except urllib.error.HTTPError as e:
            try:
                body = e.read().decode("utf-8", errors="replace")
            except OSError:
                body = ""
            data = _parse_json(body)
            return e.code, data, _error_message(data, e.reason or f"HTTP {e.code}")
        except (urllib.error.URLError, OSError) as e:
            reason = getattr(e, "reason", None) or e
            return -1, None, f"cannot connect ({reason})"

        data = _parse_json(body)
        return status, data, "ok" if data is not None else "invalid JSON response"


def _parse_json(body):
    try:
        return json.loads(body) if body else None
    except ValueError:
        return None
