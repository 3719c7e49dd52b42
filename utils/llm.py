"""Claude API client for C code generation."""

import os
import re
import time

import anthropic

from config.defaults import DEFAULTS
from core.errors import (
    ConfigurationError,
    CodeGenAPIError,
    CodeGenAuthError,
    CodeGenConnectionError,
    CodeGenRateLimitError,
)

MODEL = DEFAULTS["model"]
MAX_TOKENS = DEFAULTS["max_tokens"]
DEFAULT_BASE_URL = "https://api.anthropic.com"

_PLACEHOLDER = re.compile(r"^your[_-].*[_-]here$", re.IGNORECASE)

_FENCED = re.compile(r"```(?:c|C)?\s*([\s\S]*?)```")


def get_base_url():
    return os.environ.get("ANTHROPIC_BASE_URL") or DEFAULT_BASE_URL


def get_client():
    """Return an Anthropic client. Raises if no usable API key is set.

    ANTHROPIC_BASE_URL must point at an Anthropic-compatible Messages API
    endpoint; the SDK authenticates with an x-api-key header.
    """
    api_key = (os.environ.get("ANTHROPIC_API_KEY") or "").strip()
    if not api_key or _PLACEHOLDER.match(api_key):
        raise ConfigurationError(
            "ANTHROPIC_API_KEY is not configured. "
            "Get a key at https://console.anthropic.com/ and run:\n"
            "  export ANTHROPIC_API_KEY='your-key-here'\n"
            "or add it to .env / ~/.flux-circuits/.env"
        )
    return anthropic.Anthropic(api_key=api_key, base_url=get_base_url())


def _upstream_message(error):
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        detail = body.get("error")
        if isinstance(detail, dict) and detail.get("message"):
            return detail["message"]
    return getattr(error, "message", None) or str(error)


def call_llm(client, system_prompt, user_message, temperature=None):
    """Send one chat turn and return the response text.

    Maps SDK failures onto the pipeline's error types. A 5xx response is
    retried once; everything else surfaces immediately.
    """
    if temperature is None:
        temperature = DEFAULTS["generate_temperature"]

    for attempt in range(2):
        try:
            response = client.messages.create(
                model=MODEL,
                max_tokens=MAX_TOKENS,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_message}],
            )
            return "".join(
                block.text for block in response.content
                if getattr(block, "type", "text") == "text"
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            raise CodeGenAuthError(e.status_code, _upstream_message(e)) from e
        except anthropic.RateLimitError as e:
            raise CodeGenRateLimitError(_upstream_message(e)) from e
        except anthropic.InternalServerError as e:
            if attempt == 0:
                time.sleep(2)
                continue
            raise CodeGenAPIError(e.status_code, _upstream_message(e)) from e
        except anthropic.APIStatusError as e:
            raise CodeGenAPIError(e.status_code, _upstream_message(e)) from e
        except anthropic.APIConnectionError as e:
            raise CodeGenConnectionError(get_base_url(), _upstream_message(e)) from e


def extract_code(response):
    """Pull C source out of a model response.

    Takes the first fenced block (```c, ```C or bare). Without a fence,
    collects everything from the first line that looks like code: an
    #include, a // comment, or a brace. Falls back to the raw text.
    """
    match = _FENCED.search(response)
    if match and match.group(1).strip():
        return match.group(1).strip()

    code = []
    in_code = False
    for line in response.split("\n"):
        stripped = line.strip()
        if stripped.startswith("#include") or stripped.startswith("//") or "{" in line or "}" in line:
            in_code = True
        if in_code:
            code.append(line)

    return "\n".join(code) if code else response
