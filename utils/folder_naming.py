"""Output file naming: timestamp prefixes with dedup."""

import os
from datetime import datetime, timezone

from config.defaults import DEFAULTS

MAX_DEDUP = 1000

_SUFFIXES = {
    "code": "_code.c",
    "tests": "_tests.json",
    "circuit": "_circuit.json",
}


def timestamp(now=None):
    """UTC timestamp safe for filenames, e.g. 2025-03-01T14-05-09."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S")


def _taken(output_dir, prefix):
    return any(os.path.exists(os.path.join(output_dir, prefix + s)) for s in _SUFFIXES.values())


def output_paths(output_dir, now=None):
    """Return {"code", "tests", "circuit"} paths for one run.

    Two runs inside the same second get _2, _3, ... suffixes instead of
    overwriting each other.
    """
    base = f"{DEFAULTS['output_prefix']}_{timestamp(now)}"
    prefix = base
    if _taken(output_dir, prefix):
        for counter in range(2, MAX_DEDUP + 2):
            prefix = f"{base}_{counter}"
            if not _taken(output_dir, prefix):
                break
        else:
            raise RuntimeError(f"Too many outputs (>{MAX_DEDUP}) for timestamp: {base}")

    return {key: os.path.join(output_dir, prefix + suffix) for key, suffix in _SUFFIXES.items()}
