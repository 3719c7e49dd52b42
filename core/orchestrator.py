"""Main pipeline orchestrator: generate and repair, then test and compile to circuit."""

import json
import os
from dataclasses import replace

from agents.circuit import CircuitClient
from agents.generator import CodeGenClient
from agents.tester import ShallowTestOracle
from config.defaults import DEFAULTS
from config.targets import CHARACTERISTICS, normalize_target, HARDWARE_TARGETS
from core.compiler import CompilerProbe
from core.errors import UnresolvedErrorsError
from core.quality import quality_gates_pass, validation_status
from core.state import CircuitRequest, ConversionResult, RepairState
from utils.annotate import add_copyright
from utils.folder_naming import output_paths


def _emit(on_event, event, **payload):
    if on_event:
        on_event(event, payload)


def repair_step(state: RepairState, probe, generator) -> RepairState:
    """Run one repair attempt and return the next state.

    Errors present: the repair request cites warnings and errors.
    Warnings only: it cites warnings alone. Either way the returned
    source replaces the old one and is validated once.
    """
    validation = state.validation
    if validation.errors:
        code = generator.improve_code(state.code, list(validation.warnings), list(validation.errors))
    else:
        code = generator.improve_code(state.code, list(validation.warnings), [])

    result = probe.check(code)
    return replace(
        state,
        code=code,
        attempt=state.attempt + 1,
        validation=result,
        status=validation_status(result),
    )


def run_repair_loop(code, probe, generator, max_retries, on_event=None) -> RepairState:
    """Validate `code`, then repair until clean or `max_retries` attempts are spent."""
    validation = probe.check(code)
    state = RepairState(code=code, attempt=0, validation=validation,
                        status=validation_status(validation))
    _emit(on_event, "validated", state=state)

    while not state.validation.is_clean and state.attempt < max_retries:
        _emit(on_event, "repairing", state=state, max_retries=max_retries)
        previous = state
        state = repair_step(state, probe, generator)
        _emit(on_event, "repaired", state=state, previous=previous)

    return state


class Orchestrator:
    """Runs the pipeline: generate → validate/repair → annotate → test → circuit.

    Collaborators are injectable; by default the real gcc probe, code-gen
    client and Flux client are built. Progress is reported through the
    optional on_event(event, payload) callback.
    """

    def __init__(self, probe=None, generator=None, tester=None, circuit=None):
        self.probe = probe or CompilerProbe()
        self.generator = generator or CodeGenClient()
        self.tester = tester or ShallowTestOracle(probe=self.probe)
        self.circuit = circuit or CircuitClient()

    def convert(self, idea, target, max_retries=None, optimization_level=None,
                on_event=None) -> ConversionResult:
        """Turn an idea into validated C and a circuit description.

        Raises:
            ValueError: unknown hardware target or empty idea.
            UnresolvedErrorsError: compiler errors survived every repair attempt.
            CodeGenError / CircuitError: upstream failures.
        """
        canonical = normalize_target(target)
        if canonical is None:
            raise ValueError(
                f"Invalid target: {target}. Valid targets: {', '.join(HARDWARE_TARGETS)}"
            )
        if not idea or not idea.strip():
            raise ValueError("Idea must not be empty")

        hard_max = DEFAULTS["hard_max_retries"]
        max_retries = min(DEFAULTS["max_retries"] if max_retries is None else max_retries, hard_max)
        if optimization_level is None:
            optimization_level = DEFAULTS["optimization_level"]

        result = ConversionResult(idea=idea, target=canonical)

        # Step 1: generate
        _emit(on_event, "generating", idea=idea, target=canonical)
        code = self.generator.generate_code(idea, CHARACTERISTICS)
        _emit(on_event, "generated", code=code)

        # Step 2: validate / repair
        result.status = "validating"
        state = run_repair_loop(code, self.probe, self.generator, max_retries, on_event)
        result.code = state.code
        result.attempts = state.attempt
        result.validation = state.validation

        if not quality_gates_pass(state.validation):
            result.status = "failed"
            _emit(on_event, "failed", state=state)
            raise UnresolvedErrorsError(state.validation.errors, state.attempt)
        _emit(on_event, "validation_passed", state=state)

        # Step 3: annotate
        result.code = add_copyright(result.code)

        # Step 4: shallow tests + design check
        result.tests = self.tester.generate_and_run_tests(result.code)
        _emit(on_event, "tested", tests=result.tests)
        result.design_check = self.tester.check_design_patterns(result.code)
        _emit(on_event, "design_checked", design_check=result.design_check)

        # Step 5: circuit
        _emit(on_event, "compiling_circuit", target=canonical)
        request = CircuitRequest(code=result.code, target=canonical,
                                 optimization_level=optimization_level)
        result.circuit = self.circuit.compile_to_circuit(request)
        _emit(on_event, "circuit_compiled", circuit=result.circuit)

        result.status = "finalized"
        return result

    def write_outputs(self, result: ConversionResult, output_dir=None):
        """Write the .c source and the tests/circuit JSON files; return their paths."""
        if result.status != "finalized":
            raise ValueError(f"Refusing to write outputs for a {result.status} conversion")

        output_dir = output_dir or os.environ.get("FLUX_CIRCUITS_OUTPUT_DIR") or DEFAULTS["output_dir"]
        paths = output_paths(output_dir)
        os.makedirs(output_dir, exist_ok=True)

        with open(paths["code"], "w", encoding="utf-8") as fp:
            fp.write(result.code)
        with open(paths["tests"], "w", encoding="utf-8") as fp:
            json.dump([t.to_dict() for t in result.tests], fp, indent=2)
        with open(paths["circuit"], "w", encoding="utf-8") as fp:
            json.dump(result.circuit.to_dict(), fp, indent=2)

        result.output_files = paths
        return paths
