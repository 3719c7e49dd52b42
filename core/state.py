"""Pipeline state models shared across all stages."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GeneratedCode:
    code: str
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    line_count: int = 0

    @classmethod
    def from_output(cls, code, warnings=(), errors=()):
        return cls(
            code=code,
            warnings=tuple(warnings),
            errors=tuple(errors),
            line_count=len(code.split("\n")),
        )

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def is_clean(self) -> bool:
        return not self.errors and not self.warnings


@dataclass(frozen=True)
class ValidationIssue:
    message: str
    severity: str               # "error" or "warning"
    line: int | None
    column: int | None
    category: str               # syntax|semantic|type|undeclared|unused|other
    suggestion: str | None
    full_message: str


@dataclass(frozen=True)
class ValidationReport:
    errors: tuple[ValidationIssue, ...]
    warnings: tuple[ValidationIssue, ...]
    pre_issues: tuple[ValidationIssue, ...]
    summary: str


@dataclass
class TestResult:
    __test__ = False            # keep pytest from collecting this class

    type: str                   # UX|regression|unit|blackbox|A-B
    passed: bool
    message: str

    def to_dict(self):
        return {"type": self.type, "passed": self.passed, "message": self.message}


@dataclass
class DesignCheck:
    passed: bool
    issues: list[str] = field(default_factory=list)
    patterns: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class CircuitRequest:
    code: str
    target: str
    optimization_level: int = 3


@dataclass
class CircuitResult:
    schematic: str
    optimized: bool
    target: str
    metadata: dict = field(default_factory=dict)

    @property
    def is_mock(self) -> bool:
        return bool(self.metadata.get("mock"))

    def to_dict(self):
        return {
            "schematic": self.schematic,
            "optimized": self.optimized,
            "target": self.target,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class RepairState:
    code: str
    attempt: int
    validation: GeneratedCode
    status: str = "validating"  # generated|validating|clean|has_errors|has_warnings


@dataclass
class ConversionResult:
    idea: str
    target: str
    code: str = ""
    tests: list[TestResult] = field(default_factory=list)
    design_check: DesignCheck | None = None
    circuit: CircuitResult | None = None
    attempts: int = 0
    validation: GeneratedCode | None = None
    status: str = "generated"   # generated|validating|finalized|failed
    output_files: dict[str, str] = field(default_factory=dict)
