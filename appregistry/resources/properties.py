"""Reading and writing ``.properties`` text.

Supports the subset of the format used for app import files:

- ``key=value``, ``key: value`` and ``key value`` separators
- ``#`` and ``!`` comment lines
- backslash line continuation
- backslash escapes (``\\t``, ``\\n``, ``\\=``, ``\\:``, ``\\uXXXX`` ...)

Properties files are ISO-8859-1 encoded; anything outside that range is
written as ``\\uXXXX`` (UTF-16 code units, so astral characters become a
surrogate pair).
"""

from __future__ import annotations

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SEPARATORS = "=:"

ENCODING = "iso-8859-1"


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``.properties`` text into an ordered dict."""
    result: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_line(line)
        result[_unescape(key)] = _unescape(value)
    return result


def format_properties(values: dict[str, str]) -> str:
    """Render a mapping as ``.properties`` text, one ``key=value`` per line."""
    lines = []
    for key, value in values.items():
        lines.append(f"{_escape(key, is_key=True)}={_escape(value)}")
    return "\n".join(lines) + ("\n" if lines else "")


def _logical_lines(text: str):
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        if _ends_with_continuation(line):
            pending += line[:-1]
            continue
        pending += line
        if pending:
            yield pending
        pending = ""
    if pending:
        yield pending


def _ends_with_continuation(line: str) -> bool:
    backslashes = len(line) - len(line.rstrip("\\"))
    return backslashes % 2 == 1


def _split_line(line: str) -> tuple[str, str]:
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in _SEPARATORS or ch.isspace():
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip()
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip()
    return key, rest


def _unescape(value: str) -> str:
    out = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch != "\\" or i + 1 >= len(value):
            out.append(ch)
            i += 1
            continue
        nxt = value[i + 1]
        if nxt == "u" and i + 6 <= len(value):
            try:
                out.append(chr(int(value[i + 2 : i + 6], 16)))
                i += 6
                continue
            except ValueError:
                pass
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return _join_surrogates("".join(out))


def _escape(value: str, is_key: bool = False) -> str:
    out = []
    for i, ch in enumerate(value):
        if ch == "\\":
            out.append("\\\\")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch in "=:#!" and (is_key or i == 0):
            out.append("\\" + ch)
        elif ch == " " and (is_key or i == 0):
            out.append("\\ ")
        elif ord(ch) > 0xFF:
            out.append(_unicode_escape(ch))
        else:
            out.append(ch)
    return "".join(out)


def _unicode_escape(ch: str) -> str:
    units = ch.encode("utf-16-be")
    return "".join(
        f"\\u{int.from_bytes(units[i : i + 2], 'big'):04x}" for i in range(0, len(units), 2)
    )


def _join_surrogates(value: str) -> str:
    if not any("\ud800" <= ch <= "\udfff" for ch in value):
        return value
    return value.encode("utf-16-be", "surrogatepass").decode("utf-16-be", "replace")
