"""Tests for utils.annotate."""

from utils.annotate import add_copyright

NOTICE = "Copyright (C) 2025, Flux Circuits contributors"


def test_inserted_at_top():
    code = add_copyright("#include <stdio.h>\nint main(void) { return 0; }")
    lines = code.split("\n")
    assert lines[:3] == ["/*", f" * {NOTICE}", " */"]
    assert "#include <stdio.h>" in lines


def test_inserted_after_leading_comments():
    code = add_copyright("// blink.c\n\n#include <stdio.h>\n")
    lines = code.split("\n")
    assert lines[0] == "// blink.c"
    assert lines.index(f" * {NOTICE}") < lines.index("#include <stdio.h>")


def test_idempotent():
    once = add_copyright("int x;")
    assert add_copyright(once) == once


def test_custom_notice():
    assert "ACME" in add_copyright("int x;", notice="Copyright ACME")
