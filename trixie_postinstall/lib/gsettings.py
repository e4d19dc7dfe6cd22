from __future__ import annotations

import ast
import logging
import re
from typing import Any, Optional, Sequence

from .system import System

logger = logging.getLogger(__name__)

# "@as []", "uint32 5", "int32 -1" ... gsettings prefixes a type annotation
# whenever the literal alone would be ambiguous.
_TYPE_PREFIX = re.compile(r"^(@[a-z{}()]+|u?int(16|32|64)|byte|double|objectpath|signature)\s+")


def parse_gvariant(text: str) -> Any:
    """Parse the text form printed by ``gsettings get`` into Python values.

    Covers what the provisioning steps read: strings, booleans, numbers and
    arrays of those. Anything else is returned as the stripped text.
    """

    s = _TYPE_PREFIX.sub("", text.strip())
    if s == "true":
        return True
    if s == "false":
        return False
    try:
        return ast.literal_eval(s)
    except (ValueError, SyntaxError):
        return s


def _quote(s: str) -> str:
    return "'" + s.replace("\\", "\\\\").replace("'", "\\'") + "'"


def to_gvariant(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_gvariant(v) for v in value) + "]"
    raise TypeError(f"Unsupported gsettings value: {value!r}")


def schema_arg(schema: str, path: Optional[str] = None) -> str:
    """Relocatable schemas are addressed as SCHEMA:PATH."""

    return f"{schema}:{path}" if path else schema


class GSettings:
    """Read-compare-write access to the desktop preference store."""

    def __init__(self, system: System) -> None:
        self.system = system

    def available(self) -> bool:
        return self.system.which("gsettings") is not None

    def get(self, schema: str, key: str, path: Optional[str] = None) -> Any:
        r = self.system.query(["gsettings", "get", schema_arg(schema, path), key])
        if not r.ok:
            raise RuntimeError(f"gsettings get {schema} {key} failed: {r.stderr.strip()}")
        return parse_gvariant(r.stdout)

    def set(self, schema: str, key: str, value: Any, path: Optional[str] = None) -> None:
        self.system.run(["gsettings", "set", schema_arg(schema, path), key, to_gvariant(value)])

    def ensure(self, schema: str, key: str, value: Any, path: Optional[str] = None) -> bool:
        """Write value unless the key already holds it. Returns True on write."""

        try:
            current = self.get(schema, key, path)
        except RuntimeError:
            current = None
        if _same(current, value):
            logger.debug("gsettings %s %s already %r", schema_arg(schema, path), key, value)
            return False
        self.set(schema, key, value, path)
        return True

    def ensure_in_array(self, schema: str, key: str, items: Sequence[str]) -> list[str]:
        """Append each missing item to a string-array key; return what was added."""

        current = self.get(schema, key)
        if not isinstance(current, list):
            raise RuntimeError(f"{schema} {key} is not an array: {current!r}")
        added = [i for i in items if i not in current]
        if added:
            self.set(schema, key, [*current, *added])
        return added


def _same(current: Any, desired: Any) -> bool:
    if isinstance(desired, tuple):
        desired = list(desired)
    if isinstance(current, tuple):
        current = list(current)
    return current == desired
