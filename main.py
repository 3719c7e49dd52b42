#!/usr/bin/env python3
"""Flux Circuits - turn an idea into validated C code and a hardware circuit.

Usage:
    python main.py convert "blink an LED" FPGA                       # full pipeline
    python main.py convert "..." ASIC --max-retries 3 --verbose      # with options
    python main.py convert "..." GPU --output-dir results            # custom output dir
    python main.py validate path/to/file.c                           # compile + report only
    python main.py targets
"""

import argparse
import os
import sys
import traceback

from dotenv import load_dotenv

from agents.tester import summarize
from config.defaults import DEFAULTS
from config.targets import HARDWARE_TARGETS, TARGET_DESCRIPTIONS, normalize_target
from core.compiler import CompilerProbe, code_context
from core.errors import FluxCircuitsError, UnresolvedErrorsError
from core.orchestrator import Orchestrator

RULE = "=" * 60
THIN = "-" * 60


def _load_env():
    """Load .env from the working directory, then ~/.flux-circuits/.env."""
    load_dotenv()
    load_dotenv(os.path.join(os.path.expanduser("~"), ".flux-circuits", ".env"))


def _format_issues(issues, code=None, limit=None):
    """Format classified issues for CLI display."""
    lines = []
    for idx, issue in enumerate(issues[:limit] if limit else issues, 1):
        loc = f"line {issue.line}" if issue.line else "line ?"
        marker = "ERROR" if issue.severity == "error" else "WARN"
        lines.append(f"  {idx}. [{marker}] [{loc}] ({issue.category}) {issue.message}")
        if issue.suggestion:
            lines.append(f"       Fix: {issue.suggestion}")
        if code and issue.line:
            context = code_context(code, issue.line)
            if context:
                lines.extend(f"       {row}" for row in context.split("\n"))
    return "\n".join(lines)


def _line_count(code):
    return len(code.split("\n"))


def _usage_error(message):
    print(message, file=sys.stderr)
    print('Usage: flux-circuits convert "<idea>" <target>', file=sys.stderr)
    print(f"Targets: {', '.join(HARDWARE_TARGETS)}", file=sys.stderr)
    sys.exit(1)


def _event_printer(probe, verbose):
    """Build an on_event callback that narrates pipeline progress."""

    def on_event(event, payload):
        if event == "generating":
            print(f"\nConverting idea to {payload['target']} circuit...")
            print(f'Idea: "{payload["idea"]}"\n')
            print("Step 1: Generating C code from idea...")
        elif event == "generated":
            print(f"  Generated {_line_count(payload['code'])} lines of code")
            print("\nStep 2: Validating and improving code...")
        elif event == "validated":
            state = payload["state"]
            if not state.validation.is_clean:
                report = probe.report(state.code, state.validation)
                print("  Validation report:")
                print("    " + report.summary.replace("\n", "\n    "))
                if report.errors:
                    print("  Top issues to fix:")
                    print(_format_issues(list(report.errors), state.code,
                                         limit=None if verbose else 3))
        elif event == "repairing":
            state = payload["state"]
            print(f"\n  Revision attempt {state.attempt + 1}/{payload['max_retries']}")
            print(f"  Current state: {len(state.validation.errors)} errors, "
                  f"{len(state.validation.warnings)} warnings")
        elif event == "repaired":
            state, previous = payload["state"], payload["previous"]
            print(f"  Received improved code ({_line_count(state.code)} lines)")
            before, after = len(previous.validation.errors), len(state.validation.errors)
            if after < before:
                print(f"  Progress: fixed {before - after} error(s)")
            elif after > before:
                print(f"  Errors increased from {before} to {after}")
            elif not before:
                fixed = len(previous.validation.warnings) - len(state.validation.warnings)
                if fixed > 0:
                    print(f"  Progress: fixed {fixed} warning(s)")
        elif event == "failed":
            state = payload["state"]
            report = probe.report(state.code, state.validation)
            print("\n  Final validation report:")
            print("    " + report.summary.replace("\n", "\n    "))
        elif event == "validation_passed":
            state = payload["state"]
            print("\n  Code validated successfully")
            if state.validation.warnings:
                print(f"  {len(state.validation.warnings)} acceptable warning(s) remain")
            else:
                print("  No errors or warnings")
            print("\nStep 3: Adding copyright notice...")
            print(f"\nStep 4: Generating and running tests ({DEFAULTS['tests_per_line']} tests per line)...")
        elif event == "tested":
            tests = payload["tests"]
            passed = sum(1 for t in tests if t.passed)
            print(f"  Tests completed: {passed}/{len(tests)} passed")
            print("\nStep 5: Checking design patterns...")
        elif event == "design_checked":
            check = payload["design_check"]
            if check.passed:
                print("  Design patterns validated")
            else:
                print(f"  Design pattern issues: {', '.join(check.issues)}")
        elif event == "compiling_circuit":
            print(f"\nStep 6: Compiling to {payload['target']} circuit using Flux compiler...")
        elif event == "circuit_compiled":
            circuit = payload["circuit"]
            if circuit.is_mock:
                print(f"  Flux API not available, generated mock circuit ({circuit.metadata.get('reason')})")
            else:
                print(f"  Circuit generated for {circuit.target}")

    return on_event


def cmd_convert(args):
    """Run the full idea-to-circuit pipeline."""
    if not args.idea or not args.target:
        _usage_error("Missing idea or target.")
    target = normalize_target(args.target)
    if target is None:
        _usage_error(f"Invalid target: {args.target}")

    try:
        orchestrator = Orchestrator()
        probe = orchestrator.probe
        result = orchestrator.convert(
            args.idea,
            target,
            max_retries=args.max_retries,
            optimization_level=args.optimization_level,
            on_event=_event_printer(probe, args.verbose),
        )
        paths = orchestrator.write_outputs(result, args.output_dir)
    except UnresolvedErrorsError as e:
        print(f"\nError: {e.message}", file=sys.stderr)
        if args.verbose:
            for err in e.errors:
                print(f"  {err}", file=sys.stderr)
        sys.exit(1)
    except FluxCircuitsError as e:
        print(f"\nError: {e.message}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)

    print("\n" + RULE)
    print("RESULTS")
    print(RULE)
    print("\nGenerated C code:")
    print(THIN)
    print(result.code)
    print("\nTest results summary:")
    print(THIN)
    for test_type, stats in summarize(result.tests).items():
        print(f"{test_type}: {stats['passed']}/{stats['total']} passed")
    print("\nCircuit schematic:")
    print(THIN)
    print(result.circuit.schematic)
    print("\nFiles saved:")
    print(f"  - C code:  {paths['code']}")
    print(f"  - Tests:   {paths['tests']}")
    print(f"  - Circuit: {paths['circuit']}")
    print(f"\nRepair attempts: {result.attempts}")
    print("Conversion complete.\n")


def cmd_validate(args):
    """Compile-probe a local C file and print its report. No network calls."""
    try:
        with open(args.file, encoding="utf-8") as fp:
            code = fp.read()
    except OSError as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        sys.exit(1)

    probe = CompilerProbe()
    report = probe.report(code)
    print(report.summary)
    if report.errors:
        print("\nErrors:")
        print(_format_issues(list(report.errors), code))
    if report.warnings:
        print("\nWarnings:")
        print(_format_issues(list(report.warnings), code if args.verbose else None))
    if report.errors:
        sys.exit(1)


def cmd_targets(args):
    print("Available hardware targets:")
    for name in HARDWARE_TARGETS:
        print(f"  {name:5s} - {TARGET_DESCRIPTIONS[name]}")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="flux-circuits",
        description="Convert ideas into hardware circuits via C code generation",
    )
    subparsers = parser.add_subparsers(dest="command")

    convert_parser = subparsers.add_parser("convert", help="Run the idea-to-circuit pipeline")
    convert_parser.add_argument("idea", nargs="?", help="Natural language idea")
    convert_parser.add_argument("target", nargs="?",
                                help=f"Hardware target: {', '.join(HARDWARE_TARGETS)}")
    convert_parser.add_argument("--max-retries", type=int, default=DEFAULTS["max_retries"],
                                help=f"Max repair attempts (default: {DEFAULTS['max_retries']})")
    convert_parser.add_argument("--optimization-level", type=int,
                                default=DEFAULTS["optimization_level"],
                                help=f"Circuit optimization level (default: {DEFAULTS['optimization_level']})")
    convert_parser.add_argument("--output-dir", default=None,
                                help=f"Output directory (default: {DEFAULTS['output_dir']})")
    convert_parser.add_argument("--verbose", action="store_true",
                                help="Show every issue with code context")

    validate_parser = subparsers.add_parser("validate", help="Compile and report on a C file")
    validate_parser.add_argument("file", help="Path to a .c file")
    validate_parser.add_argument("--verbose", action="store_true",
                                 help="Show code context for warnings too")

    subparsers.add_parser("targets", help="List hardware targets")
    return parser


def main(argv=None):
    _load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "convert":
        cmd_convert(args)
    elif args.command == "validate":
        cmd_validate(args)
    elif args.command == "targets":
        cmd_targets(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
