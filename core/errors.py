"""Exception types raised by the pipeline and its network clients."""


class FluxCircuitsError(Exception):
    """Base exception for every failure surfaced to the CLI or HTTP layer."""

    def __init__(self, message: str = "Conversion failed") -> None:
        self.message = message
        super().__init__(self.message)


class ConfigurationError(FluxCircuitsError):
    """Raised at startup when a required credential is missing or a placeholder."""


class CodeGenError(FluxCircuitsError):
    """Base exception for code-generation service failures."""


class CodeGenAuthError(CodeGenError):
    """Raised on 401/403 from the code-generation service."""

    def __init__(self, status: int, message: str = "") -> None:
        self.status = status
        super().__init__(
            f"Code generation API authentication failed ({status}): "
            f"{message or 'Invalid or expired API key'}. Check ANTHROPIC_API_KEY."
        )


class CodeGenRateLimitError(CodeGenError):
    """Raised on 429 from the code-generation service."""

    def __init__(self, message: str = "") -> None:
        self.status = 429
        detail = f" ({message})" if message else ""
        super().__init__(
            f"Code generation API rate limit exceeded{detail}. "
            "Please wait a moment and try again."
        )


class CodeGenAPIError(CodeGenError):
    """Raised on any other non-2xx response; carries the upstream message."""

    def __init__(self, status: int, message: str = "") -> None:
        self.status = status
        super().__init__(f"Code generation API error ({status}): {message or 'Unknown error'}")


class CodeGenConnectionError(CodeGenError):
    """Raised when the service cannot be reached at all (refused, DNS, timeout)."""

    def __init__(self, url: str, message: str = "") -> None:
        self.url = url
        detail = f" ({message})" if message else ""
        super().__init__(
            f"Cannot connect to code generation API at {url}{detail}. "
            "Check your network connection and ANTHROPIC_BASE_URL."
        )


class InvalidResponseError(CodeGenError):
    """Raised when a response holds no usable C code."""

    def __init__(self, message: str = "Received invalid or empty code from API") -> None:
        super().__init__(message)


class CircuitError(FluxCircuitsError):
    """Base exception for circuit-compiler failures."""


class CircuitAPIError(CircuitError):
    """Raised on a non-2xx, non-404 response from the primary compile endpoint."""

    def __init__(self, status: int, message: str = "") -> None:
        self.status = status
        super().__init__(f"Flux API error ({status}): {message or 'Unknown error'}")


class CircuitConnectionError(CircuitError):
    """Raised when the primary compile endpoint cannot be reached at all."""

    def __init__(self, url: str, message: str = "") -> None:
        self.url = url
        detail = f" ({message})" if message else ""
        super().__init__(
            f"Failed to connect to Flux API at {url}{detail}. "
            "Check your network connection and FLUX_API_URL."
        )


class UnresolvedErrorsError(FluxCircuitsError):
    """Raised when compiler errors survive every repair attempt."""

    def __init__(self, errors, attempts: int) -> None:
        self.errors = list(errors)
        self.attempts = attempts
        summary = "; ".join(self.errors[:3])
        more = f" (+{len(self.errors) - 3} more)" if len(self.errors) > 3 else ""
        super().__init__(
            f"Failed to fix all errors after {attempts} attempt(s). "
            f"Remaining errors: {summary}{more}"
        )
