"""Default pipeline settings."""

import os
import tempfile

DEFAULTS = {
    "max_retries": 5,
    "hard_max_retries": 10,     # absolute ceiling, cannot be overridden
    "model": "claude-sonnet-4-5-20250929",
    "max_tokens": 4000,
    "generate_temperature": 0.3,
    "repair_temperature": 0.2,
    "min_code_length": 10,
    "repair_warning_limit": 5,
    "optimization_level": 3,
    "sandbox_timeout": 60,
    "http_timeout": 60,
    "allowed_commands": ["gcc", "cc", "clang"],
    "compiler": "gcc",
    "compiler_flags": ["-Wall", "-Wextra", "-pedantic", "-std=c11"],
    "strict_flags": ["-Werror"],
    "temp_dir": os.path.join(tempfile.gettempdir(), "flux-circuits"),
    "output_dir": "output",
    "output_prefix": "circuit",
    "tests_per_line": 20,
    # percent of the test budget per category, rounded up per category
    "test_weights": {"UX": 20, "regression": 20, "unit": 30, "blackbox": 20, "A-B": 10},
    "copyright_notice": "Copyright (C) 2025, Flux Circuits contributors",
}
