from __future__ import annotations

import re
from typing import List, Optional

_SECTION = re.compile(r"^\s*\[(?P<name>[^\]]+)\]\s*$")
_ENTRY = re.compile(r"^(?P<key>[^=#;\s][^=]*?)\s*=\s*(?P<value>.*)$")


class KeyFile:
    """Minimal ``[Section]`` / ``key=value`` editor (AccountsService records).

    configparser would lowercase keys and drop comments; this keeps every
    line it does not touch.
    """

    def __init__(self, lines: List[str]) -> None:
        self._lines = lines

    @classmethod
    def parse(cls, text: str) -> "KeyFile":
        return cls(text.splitlines())

    def _section_bounds(self, section: str) -> Optional[tuple[int, int]]:
        start = None
        for i, ln in enumerate(self._lines):
            m = _SECTION.match(ln)
            if not m:
                continue
            if start is not None:
                return start, i
            if m.group("name").strip() == section:
                start = i
        if start is None:
            return None
        return start, len(self._lines)

    def get(self, section: str, key: str) -> Optional[str]:
        bounds = self._section_bounds(section)
        if bounds is None:
            return None
        for ln in self._lines[bounds[0] + 1 : bounds[1]]:
            m = _ENTRY.match(ln)
            if m and m.group("key") == key:
                return m.group("value")
        return None

    def set(self, section: str, key: str, value: str) -> bool:
        bounds = self._section_bounds(section)
        if bounds is None:
            if self._lines and self._lines[-1].strip():
                self._lines.append("")
            self._lines += [f"[{section}]", f"{key}={value}"]
            return True

        start, end = bounds
        for i in range(start + 1, end):
            m = _ENTRY.match(self._lines[i])
            if m and m.group("key") == key:
                if m.group("value") == value:
                    return False
                self._lines[i] = f"{key}={value}"
                return True

        # Insert after the section's last non-blank line.
        insert_at = end
        while insert_at - 1 > start and not self._lines[insert_at - 1].strip():
            insert_at -= 1
        self._lines.insert(insert_at, f"{key}={value}")
        return True

    def render(self) -> str:
        return "\n".join(self._lines) + "\n"
