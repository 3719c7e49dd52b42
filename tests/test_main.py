"""Tests for the flux-circuits CLI."""

from unittest.mock import patch, MagicMock

import pytest

import main
from core.errors import UnresolvedErrorsError
from core.state import CircuitResult, ConversionResult, DesignCheck, GeneratedCode, TestResult


@pytest.fixture(autouse=True)
def no_dotenv():
    with patch("main.load_dotenv"):
        yield


def _finalized():
    result = ConversionResult(idea="blink an LED", target="FPGA")
    result.code = "#include <stdio.h>\nint main(void) { return 0; }"
    result.status = "finalized"
    result.validation = GeneratedCode.from_output(result.code)
    result.tests = [TestResult(type="UX", passed=True, message="UX Test 1: ok")]
    result.design_check = DesignCheck(passed=True)
    result.circuit = CircuitResult(schematic="<schematic/>", optimized=True, target="FPGA")
    return result


def _paths():
    return {"code": "out/c_code.c", "tests": "out/c_tests.json", "circuit": "out/c_circuit.json"}


def test_missing_target_exits_1(capsys):
    with pytest.raises(SystemExit) as exc:
        main.main(["convert", "blink an LED"])
    assert exc.value.code == 1
    assert "Usage" in capsys.readouterr().err


def test_invalid_target_exits_1(capsys):
    with pytest.raises(SystemExit) as exc:
        main.main(["convert", "blink an LED", "CPU"])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "Invalid target: CPU" in err
    assert "FPGA" in err


def test_no_command_exits_1():
    with pytest.raises(SystemExit) as exc:
        main.main([])
    assert exc.value.code == 1


def test_targets(capsys):
    main.main(["targets"])
    out = capsys.readouterr().out
    for name in ("ASIC", "FPGA", "TPU", "QPU", "OPU", "LPU", "GPU"):
        assert name in out


def test_convert_success(capsys):
    with patch("main.Orchestrator") as mock_cls:
        orch = mock_cls.return_value
        orch.convert.return_value = _finalized()
        orch.write_outputs.return_value = _paths()
        main.main(["convert", "blink an LED", "fpga", "--max-retries", "3"])

    args, kwargs = orch.convert.call_args
    assert args == ("blink an LED", "FPGA")
    assert kwargs["max_retries"] == 3
    out = capsys.readouterr().out
    assert "RESULTS" in out
    assert "UX: 1/1 passed" in out
    assert "out/c_code.c" in out
    assert "Conversion complete." in out


def test_convert_unresolved_exits_1(capsys):
    with patch("main.Orchestrator") as mock_cls:
        mock_cls.return_value.convert.side_effect = UnresolvedErrorsError(["t.c:1:1: error: x"], 5)
        with pytest.raises(SystemExit) as exc:
            main.main(["convert", "blink an LED", "FPGA", "--verbose"])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "Failed to fix all errors after 5 attempt(s)" in err
    assert "t.c:1:1: error: x" in err


def test_event_printer_narrates_mock_circuit(capsys):
    on_event = main._event_printer(MagicMock(), verbose=False)
    circuit = CircuitResult(schematic="{}", optimized=False, target="FPGA",
                            metadata={"mock": True, "reason": "offline"})
    on_event("circuit_compiled", {"circuit": circuit})
    assert "mock circuit (offline)" in capsys.readouterr().out


def test_validate_file(tmp_path, capsys):
    source = tmp_path / "blink.c"
    source.write_text("#include <stdio.h>\nint main(void) { return 0 }\n", encoding="utf-8")
    out = ("", "t.c:2:28: error: expected ';' before '}' token\n", 1)
    with patch("core.compiler.run_in_sandbox", return_value=out):
        with pytest.raises(SystemExit) as exc:
            main.main(["validate", str(source)])
    assert exc.value.code == 1
    printed = capsys.readouterr().out
    assert "Errors: 1" in printed
    assert "(syntax)" in printed


def test_validate_missing_file(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main.main(["validate", str(tmp_path / "nope.c")])
    assert exc.value.code == 1
