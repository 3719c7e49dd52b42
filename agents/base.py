"""Abstract capability interfaces the orchestrator depends on.

Concrete implementations talk to gcc, the code-generation model and the
Flux compiler; tests substitute deterministic stand-ins.
"""

from abc import ABC, abstractmethod


class CompilerProbeBase(ABC):
    """Compiles a source string and reports its diagnostics."""

    @abstractmethod
    def check(self, code):
        """Return a GeneratedCode with the warnings and errors for `code`."""

    @abstractmethod
    def compiles(self, code):
        """Return True if `code` compiles with no warning flags."""


class CodeGenerator(ABC):
    """Produces C source from an idea and repairs it from diagnostics."""

    @abstractmethod
    def generate_code(self, idea, characteristics):
        """Return C source implementing `idea`."""

    @abstractmethod
    def improve_code(self, code, warnings, errors):
        """Return a corrected copy of `code`; the result replaces it wholesale."""


class CircuitCompiler(ABC):
    """Compiles C source into a hardware circuit description."""

    @abstractmethod
    def compile_to_circuit(self, request):
        """Return a CircuitResult for a CircuitRequest."""
