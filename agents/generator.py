"""Generator agent: produces C code from an idea and repairs it from diagnostics."""

from agents.base import CodeGenerator
from agents.patch_composer import PatchComposer
from config.defaults import DEFAULTS
from core.errors import InvalidResponseError
from utils.llm import call_llm, extract_code, get_client
from utils.template_engine import load_prompt, render_prompt


class CodeGenClient(CodeGenerator):
    """Talks to the code-generation model. One LLM call per method."""

    name = "generator"

    def __init__(self, client=None, patch_composer=None):
        # Raises ConfigurationError when no usable key is set
        self.client = client or get_client()
        self.patch_composer = patch_composer or PatchComposer()

    def generate_code(self, idea, characteristics):
        user_message = render_prompt("idea.txt", {
            "idea": idea,
            "characteristics": ", ".join(characteristics),
        })
        response = call_llm(
            self.client,
            load_prompt("generator.txt"),
            user_message,
            temperature=DEFAULTS["generate_temperature"],
        )
        return self._checked(extract_code(response))

    def improve_code(self, code, warnings, errors):
        user_message = self.patch_composer.compose(code, warnings, errors)
        response = call_llm(
            self.client,
            load_prompt("repair.txt"),
            user_message,
            temperature=DEFAULTS["repair_temperature"],
        )
        return self._checked(extract_code(response))

    def _checked(self, code):
        if not code or len(code.strip()) < DEFAULTS["min_code_length"]:
            raise InvalidResponseError()
        return code
