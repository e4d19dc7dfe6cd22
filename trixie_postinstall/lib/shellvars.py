"""Structured editing of shell-style ``KEY=value`` files.

Used for /etc/default/grub and /etc/cryptsetup-initramfs/conf-hook. Lines
that are not simple assignments (comments, blanks, conditionals) are kept
byte for byte; only the keys that are changed get re-rendered.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

_ASSIGN = re.compile(r"^(?P<key>[A-Za-z_][A-Za-z0-9_]*)=(?P<value>.*)$")
# An unquoted "#" only starts a comment after whitespace.
_COMMENT = re.compile(r"\s+#.*$")


@dataclass
class _Line:
    raw: str
    key: Optional[str] = None
    value: Optional[str] = None
    quote: str = ""
    trailer: str = ""
    dirty: bool = False

    def render(self) -> str:
        if not self.dirty or self.key is None:
            return self.raw
        value = self.value or ""
        quote = self.quote
        if not quote and (not value or re.search(r"\s", value)):
            quote = '"'
        return f"{self.key}={quote}{value}{quote}{self.trailer}"


def _split_value(text: str) -> tuple[str, str, str]:
    """Split an assignment's right-hand side into (value, quote, trailer).

    trailer is what follows the value, usually ``  # comment``, and is kept
    verbatim when the line is re-rendered. Anything that is not a single
    quoted word plus an optional comment is taken as an unquoted value.
    """

    q = text[:1]
    if q in {'"', "'"}:
        i = 1
        while i < len(text):
            ch = text[i]
            if ch == "\\" and q == '"':
                i += 2
                continue
            if ch == q:
                rest = text[i + 1 :]
                if not rest.strip() or rest.lstrip().startswith("#"):
                    return text[1:i], q, rest
                break
            i += 1

    m = _COMMENT.search(text)
    end = m.start() if m else len(text.rstrip())
    return text[:end], "", text[end:]


class ShellVarsFile:
    def __init__(self, lines: List[_Line], trailing_newline: bool = True) -> None:
        self._lines = lines
        self._trailing_newline = trailing_newline

    @classmethod
    def parse(cls, text: str) -> "ShellVarsFile":
        lines: List[_Line] = []
        for raw in text.splitlines():
            m = _ASSIGN.match(raw)
            if m:
                value, quote, trailer = _split_value(m.group("value"))
                lines.append(_Line(raw=raw, key=m.group("key"), value=value, quote=quote, trailer=trailer))
            else:
                lines.append(_Line(raw=raw))
        return cls(lines, trailing_newline=text.endswith("\n") or not text)

    def _find(self, key: str) -> Optional[_Line]:
        # The shell evaluates top to bottom, so the last assignment wins.
        found = None
        for ln in self._lines:
            if ln.key == key:
                found = ln
        return found

    def keys(self) -> list[str]:
        return [ln.key for ln in self._lines if ln.key]

    def get(self, key: str) -> Optional[str]:
        ln = self._find(key)
        return ln.value if ln else None

    def set(self, key: str, value: str) -> bool:
        """Set key to value; append the assignment if missing. Returns True on change."""

        ln = self._find(key)
        if ln is None:
            self._lines.append(_Line(raw="", key=key, value=value, dirty=True))
            return True
        if ln.value == value:
            return False
        ln.value = value
        ln.dirty = True
        return True

    def ensure_token(self, key: str, token: str, *, after: Optional[str] = None) -> bool:
        """Make token part of a space-delimited value, leaving others untouched.

        When after is given and present, the token is inserted right after it,
        otherwise appended. Missing keys are created holding just the token.
        """

        current = self.get(key)
        tokens = (current or "").split()
        if token in tokens:
            return False
        if after is not None and after in tokens:
            tokens.insert(tokens.index(after) + 1, token)
        else:
            tokens.append(token)
        return self.set(key, " ".join(tokens))

    def render(self) -> str:
        out = "\n".join(ln.render() for ln in self._lines)
        if self._trailing_newline and self._lines:
            out += "\n"
        return out


def ensure_line(text: str, line: str) -> str:
    """Return text with line present exactly once; other lines keep their order."""

    seen = set()
    out: list[str] = []
    for ln in text.splitlines():
        if ln == line:
            if line in seen:
                continue
            seen.add(line)
        out.append(ln)
    if line not in seen:
        out.append(line)
    return "\n".join(out) + "\n"
