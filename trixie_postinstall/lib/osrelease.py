from __future__ import annotations

import platform
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

OS_RELEASE = "/etc/os-release"


@dataclass(frozen=True)
class OsIdentity:
    id: str
    codename: str
    pretty: str

    def matches(self, want_id: str, want_codename: str) -> bool:
        return self.id == want_id and self.codename == want_codename

    def describe(self) -> str:
        return f"{self.pretty} ({self.codename})" if self.codename else self.pretty


def parse_os_release(text: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value]
        out[key.strip()] = parts[0] if parts else ""
    return out


def read_os_identity(path: str = OS_RELEASE) -> OsIdentity:
    p = Path(path)
    if not p.is_file():
        return OsIdentity(id="", codename="", pretty=f"{platform.system()} {platform.release()}")
    data = parse_os_release(p.read_text(encoding="utf-8"))
    return OsIdentity(
        id=data.get("ID", ""),
        codename=data.get("VERSION_CODENAME", ""),
        pretty=data.get("PRETTY_NAME") or data.get("ID", ""),
    )
