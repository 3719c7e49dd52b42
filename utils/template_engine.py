"""Loads and renders the prompt files shipped in agents/prompts/."""

import os
from functools import lru_cache
from string import Template

PROMPTS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "agents", "prompts")


def prompt_names():
    """Sorted names of the available prompt files."""
    return sorted(name for name in os.listdir(PROMPTS_DIR) if name.endswith(".txt"))


@lru_cache(maxsize=None)
def load_prompt(name):
    """Return the text of a prompt file such as "generator.txt".

    Only bare file names from the prompts directory are accepted. Each file
    is read once per process.
    """
    if os.path.basename(name) != name or name not in prompt_names():
        raise ValueError(f"Unknown prompt: {name}. Available: {', '.join(prompt_names())}")
    with open(os.path.join(PROMPTS_DIR, name), "r", encoding="utf-8") as fp:
        return fp.read()


def render_prompt(name, variables):
    """Fill $placeholders in a prompt; unknown ones are left as-is."""
    return Template(load_prompt(name)).safe_substitute(variables)
