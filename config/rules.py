"""Keyword rules for compiler diagnostics and design-pattern detection."""

import re

# Ordered by priority: the first matching rule decides the category.
# Each entry: (category, keyword_regex, exclude_regex, generic_suggestion)
# exclude_regex vetoes the rule even when the keywords match.
DIAGNOSTIC_RULES = [
    (
        "syntax",
        re.compile(r"syntax|expected|parse error|stray|missing terminating|unterminated", re.IGNORECASE),
        re.compile(r"undeclared", re.IGNORECASE),
        "Check for missing semicolons, brackets or parentheses near this line",
    ),
    (
        "undeclared",
        re.compile(r"undeclared|implicit declaration|undefined reference|not declared", re.IGNORECASE),
        None,
        "Declare the identifier before use or add the missing #include",
    ),
    (
        "type",
        re.compile(r"type|incompatible|conversion|cast|pointer from integer|integer from pointer", re.IGNORECASE),
        None,
        "Make the types agree or add an explicit cast",
    ),
    (
        "unused",
        re.compile(r"unused|set but not used|defined but not used", re.IGNORECASE),
        None,
        "Remove the unused symbol or mark it with (void)",
    ),
    (
        "semantic",
        re.compile(
            r"return|control reaches|uninitiali[sz]ed|may be used|redefinition|conflicting|"
            r"too many arguments|too few arguments|division by zero|overflow",
            re.IGNORECASE,
        ),
        None,
        "Review the logic around this statement",
    ),
]

DID_YOU_MEAN = re.compile(r"did you mean\s+['‘\"]([^'’\"]+)['’\"]", re.IGNORECASE)

_HEADER_FILE = re.compile(r"\w+\.h")

# Each entry: (name, detector, failure_message, failure_applies)
# A pattern only fails the check when failure_message is set, failure_applies(code)
# holds and the detector did not fire.
DESIGN_PATTERN_RULES = [
    ("singleton", lambda code: "static" in code and "getInstance" in code, None, None),
    ("factory", lambda code: bool(re.search(r"create\w+|factory", code, re.IGNORECASE)), None, None),
    ("observer", lambda code: "callback" in code or "notify" in code, None, None),
    ("strategy", lambda code: "function pointer" in code or bool(re.search(r"\(\*.*\)\(", code)), None, None),
    (
        "modular",
        lambda code: "#include" in code and bool(_HEADER_FILE.search(code)),
        "Missing modular design",
        lambda code: True,
    ),
    (
        "error_handling",
        lambda code: "error" in code or "Error" in code or "NULL" in code,
        "Missing error handling",
        lambda code: True,
    ),
    (
        "memory_safety",
        lambda code: "malloc" in code and "free" in code,
        "Memory management incomplete",
        lambda code: "malloc" in code,
    ),
    ("thread_safety", lambda code: "mutex" in code or "pthread" in code or "atomic" in code, None, None),
    ("encryption", lambda code: "encrypt" in code or "crypto" in code or "AES" in code, None, None),
    ("protocol", lambda code: "protocol" in code or "packet" in code or "header" in code, None, None),
]

# Function-like declarations, used for component extraction and unit checks
FUNCTION_SIGNATURE = re.compile(r"(?:void|int|float|double|char|struct|enum)\s+(\w+)\s*\(")
