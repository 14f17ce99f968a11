"""Dynamic ``import()`` interop rewrite.

When commonjs-compiled code is pulled in through ``import()``, the namespace
arrives wrapped as ``{ default: <module.exports> }``. Each dynamic import is
suffixed with a ``.then`` that unwraps such namespaces, so the importer sees
the same object it would under module semantics. Nothing else is touched.
"""

from .base import TransformResult

UNWRAP_ES_MODULE = (
    ".then((mod)=>{const exports=Object.keys(mod);"
    "if(exports.length===1&&exports[0]==='default'&&mod.default&&mod.default.__esModule)"
    "{return mod.default}return mod})"
)

_QUOTES = "'\"`"


def _skip_string(code: str, i: int) -> int:
    """Index just past the string literal opening at ``i``."""
    quote = code[i]
    i += 1
    while i < len(code):
        char = code[i]
        if char == "\\":
            i += 2
            continue
        if char == quote:
            return i + 1
        if quote != "`" and char == "\n":
            return i
        i += 1
    return i


def _skip_comment(code: str, i: int) -> int | None:
    """Index past a comment starting at ``i``, or None when there is none."""
    if code.startswith("//", i):
        end = code.find("\n", i)
        return len(code) if end == -1 else end
    if code.startswith("/*", i):
        end = code.find("*/", i + 2)
        return len(code) if end == -1 else end + 2
    return None


def _is_identifier_char(char: str) -> bool:
    return char.isalnum() or char in "_$"


def _closing_paren(code: str, i: int) -> int | None:
    """Index of the parenthesis closing the one at ``i``."""
    depth = 0
    while i < len(code):
        char = code[i]
        if char in _QUOTES:
            i = _skip_string(code, i)
            continue
        skipped = _skip_comment(code, i)
        if skipped is not None:
            i = skipped
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def _next_non_space(code: str, i: int) -> int:
    while i < len(code) and code[i] in " \t\r\n":
        i += 1
    return i


def _scan(code: str, i: int, ends: list[int], *, in_substitution: bool = False) -> int:
    """Collect dynamic import end offsets from ``i`` onwards.

    Inside a template substitution the scan stops past the ``}`` that closes it.
    """
    depth = 0
    while i < len(code):
        char = code[i]
        if char == "`":
            i = _scan_template(code, i + 1, ends)
            continue
        if char in "'\"":
            i = _skip_string(code, i)
            continue
        skipped = _skip_comment(code, i)
        if skipped is not None:
            i = skipped
            continue

        if in_substitution:
            if char == "{":
                depth += 1
            elif char == "}":
                if depth == 0:
                    return i + 1
                depth -= 1

        if code.startswith("import", i):
            before = code[i - 1] if i else ""
            after = i + len("import")
            if before and (_is_identifier_char(before) or before == "."):
                i = after
                continue
            j = _next_non_space(code, after)
            if j < len(code) and code[j] == "(":
                close = _closing_paren(code, j)
                if close is not None:
                    follow = _next_non_space(code, close + 1)
                    # a body after the parameters means a method named ``import``
                    if not code.startswith("{", follow):
                        ends.append(close + 1)
            i = after
            continue
        i += 1
    return i


def _scan_template(code: str, i: int, ends: list[int]) -> int:
    """Index past the template literal whose body starts at ``i``."""
    while i < len(code):
        char = code[i]
        if char == "\\":
            i += 2
            continue
        if char == "`":
            return i + 1
        if code.startswith("${", i):
            i = _scan(code, i + 2, ends, in_substitution=True)
            continue
        i += 1
    return i


def find_dynamic_imports(code: str) -> list[int]:
    """End offsets (exclusive) of every ``import(...)`` expression in ``code``, ascending."""
    ends: list[int] = []
    _scan(code, 0, ends)
    return sorted(ends)


def rewrite_dynamic_imports(code: str, path: str) -> TransformResult | None:
    """Append the unwrap step to each dynamic import.

    Returns:
        Rewritten code, or None when ``code`` has no dynamic import
    """
    if "import" not in code:
        return None

    ends = find_dynamic_imports(code)
    if not ends:
        return None

    pieces = []
    last = 0
    for end in ends:
        pieces.append(code[last:end])
        pieces.append(UNWRAP_ES_MODULE)
        last = end
    pieces.append(code[last:])
    return TransformResult(code="".join(pieces))
