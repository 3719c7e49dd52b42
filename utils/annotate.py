"""Copyright annotation for generated sources."""

from config.defaults import DEFAULTS

_LEADING = ("/*", "//", "*")


def add_copyright(code, notice=None):
    """Insert a copyright block after any leading comments or blank lines.

    Idempotent: code that already carries the notice is returned unchanged.
    """
    notice = notice or DEFAULTS["copyright_notice"]
    if notice in code:
        return code

    lines = code.split("\n")
    insert_at = 0
    while insert_at < len(lines):
        stripped = lines[insert_at].strip()
        if stripped and not stripped.startswith(_LEADING):
            break
        insert_at += 1

    block = ["/*", f" * {notice}", " */", ""]
    return "\n".join(lines[:insert_at] + block + lines[insert_at:])
