"""Tests for core.orchestrator with stub probe, generator and circuit client."""

import json
import os
from unittest.mock import MagicMock

import pytest

from agents.tester import ShallowTestOracle
from core.errors import UnresolvedErrorsError
from core.orchestrator import Orchestrator, repair_step, run_repair_loop
from core.state import CircuitResult, ConversionResult, GeneratedCode, RepairState

BLINK = """#include <stdio.h>

int main(void) {
    printf("LED on\\n");
    return 0;
}
"""
ERROR = "t.c:4:5: error: expected ';' before 'return'"
WARNING = "t.c:3:9: warning: unused variable 'pin' [-Wunused-variable]"


def _clean(code=BLINK):
    return GeneratedCode.from_output(code)


def _broken(code=BLINK):
    return GeneratedCode.from_output(code, errors=[ERROR])


def _warned(code=BLINK):
    return GeneratedCode.from_output(code, warnings=[WARNING])


def _stubs(checks):
    probe = MagicMock()
    probe.check.side_effect = checks
    probe.compiles.return_value = True
    generator = MagicMock()
    generator.generate_code.return_value = BLINK
    generator.improve_code.return_value = BLINK
    circuit = MagicMock()
    circuit.compile_to_circuit.return_value = CircuitResult(
        schematic="<schematic/>", optimized=True, target="FPGA", metadata={"gates": 4},
    )
    return probe, generator, circuit


def _orchestrator(checks):
    probe, generator, circuit = _stubs(checks)
    return Orchestrator(probe=probe, generator=generator,
                        tester=ShallowTestOracle(probe=probe), circuit=circuit)


# --- repair step / loop ---

def test_repair_step_cites_errors_and_warnings():
    probe, generator, _ = _stubs([_clean()])
    state = RepairState(code=BLINK, attempt=0,
                        validation=GeneratedCode.from_output(BLINK, [WARNING], [ERROR]))
    nxt = repair_step(state, probe, generator)
    generator.improve_code.assert_called_once_with(BLINK, [WARNING], [ERROR])
    assert nxt.attempt == 1
    assert nxt.status == "clean"
    assert state.attempt == 0


def test_repair_step_warnings_only():
    probe, generator, _ = _stubs([_clean()])
    state = RepairState(code=BLINK, attempt=2, validation=_warned())
    repair_step(state, probe, generator)
    generator.improve_code.assert_called_once_with(BLINK, [WARNING], [])


def test_repair_loop_stops_when_clean():
    probe, generator, _ = _stubs([_broken(), _broken(), _clean()])
    state = run_repair_loop(BLINK, probe, generator, max_retries=5)
    assert state.validation.is_clean
    assert state.attempt == 2
    assert probe.check.call_count == 3


def test_repair_loop_is_bounded():
    probe, generator, _ = _stubs([_broken()] * 10)
    state = run_repair_loop(BLINK, probe, generator, max_retries=3)
    assert state.attempt == 3
    assert generator.improve_code.call_count == 3
    assert state.validation.has_errors


def test_repair_loop_emits_events():
    probe, generator, _ = _stubs([_broken(), _clean()])
    events = []
    run_repair_loop(BLINK, probe, generator, 5, on_event=lambda e, p: events.append(e))
    assert events == ["validated", "repairing", "repaired"]


# --- convert ---

def test_clean_first_time():
    orch = _orchestrator([_clean()])
    result = orch.convert("blink an LED", "fpga")

    assert result.status == "finalized"
    assert result.attempts == 0
    assert result.target == "FPGA"
    orch.generator.improve_code.assert_not_called()
    assert "Copyright" in result.code
    assert len(result.tests) == len([l for l in result.code.split("\n") if l.strip()]) * 20
    assert result.design_check is not None
    assert not result.circuit.is_mock

    request = orch.circuit.compile_to_circuit.call_args.args[0]
    assert request.target == "FPGA"
    assert request.optimization_level == 3
    assert request.code == result.code


def test_characteristics_sent_with_idea():
    orch = _orchestrator([_clean()])
    orch.convert("blink an LED", "ASIC")
    idea, characteristics = orch.generator.generate_code.call_args.args
    assert idea == "blink an LED"
    assert len(characteristics) == 16


def test_persistent_error_raises_after_max_retries():
    orch = _orchestrator([_broken()] * 20)
    with pytest.raises(UnresolvedErrorsError) as exc:
        orch.convert("blink an LED", "FPGA", max_retries=4)
    assert exc.value.attempts == 4
    assert exc.value.errors == [ERROR]
    assert str(exc.value).startswith("Failed to fix all errors after 4 attempt(s)")
    orch.circuit.compile_to_circuit.assert_not_called()


def test_max_retries_capped():
    orch = _orchestrator([_broken()] * 50)
    with pytest.raises(UnresolvedErrorsError) as exc:
        orch.convert("blink an LED", "FPGA", max_retries=100)
    assert exc.value.attempts == 10


def test_zero_retries_fails_fast():
    orch = _orchestrator([_broken()])
    with pytest.raises(UnresolvedErrorsError) as exc:
        orch.convert("blink an LED", "FPGA", max_retries=0)
    assert exc.value.attempts == 0
    orch.generator.improve_code.assert_not_called()


def test_warnings_only_result_is_accepted():
    orch = _orchestrator([_warned()] * 6)
    result = orch.convert("blink an LED", "GPU")
    assert result.status == "finalized"
    assert result.attempts == 5
    assert result.validation.has_warnings


def test_invalid_target():
    orch = _orchestrator([])
    with pytest.raises(ValueError, match="Invalid target"):
        orch.convert("blink an LED", "CPU")
    orch.generator.generate_code.assert_not_called()


def test_empty_idea():
    orch = _orchestrator([])
    with pytest.raises(ValueError):
        orch.convert("   ", "FPGA")


def test_event_sequence():
    orch = _orchestrator([_clean()])
    events = []
    orch.convert("blink an LED", "FPGA", on_event=lambda e, p: events.append(e))
    assert events == [
        "generating", "generated", "validated", "validation_passed",
        "tested", "design_checked", "compiling_circuit", "circuit_compiled",
    ]


# --- write_outputs ---

def test_write_outputs(tmp_path):
    orch = _orchestrator([_clean()])
    result = orch.convert("blink an LED", "FPGA")
    paths = orch.write_outputs(result, output_dir=str(tmp_path))

    assert set(paths) == {"code", "tests", "circuit"}
    assert all(os.path.exists(p) for p in paths.values())
    assert paths["code"].endswith("_code.c")
    with open(paths["code"], encoding="utf-8") as fp:
        assert fp.read() == result.code
    with open(paths["tests"], encoding="utf-8") as fp:
        assert len(json.load(fp)) == len(result.tests)
    with open(paths["circuit"], encoding="utf-8") as fp:
        assert json.load(fp)["target"] == "FPGA"
    assert result.output_files == paths


def test_write_outputs_twice_does_not_overwrite(tmp_path):
    orch = _orchestrator([_clean(), _clean()])
    first = orch.write_outputs(orch.convert("blink an LED", "FPGA"), output_dir=str(tmp_path))
    second = orch.write_outputs(orch.convert("blink an LED", "FPGA"), output_dir=str(tmp_path))
    assert first["code"] != second["code"]


def test_write_outputs_refuses_unfinished(tmp_path):
    orch = _orchestrator([])
    with pytest.raises(ValueError):
        orch.write_outputs(ConversionResult(idea="x", target="FPGA"), output_dir=str(tmp_path))
