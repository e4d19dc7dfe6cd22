from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Sequence

from .system import System

logger = logging.getLogger(__name__)

# sudo resets the environment, so the frontend goes on the command line.
NONINTERACTIVE = ["env", "DEBIAN_FRONTEND=noninteractive"]


def is_installed(system: System, package: str) -> bool:
    r = system.query(["dpkg-query", "-W", "-f=${Status}", package])
    return r.ok and r.stdout.strip().endswith(" installed")


def missing_packages(system: System, packages: Iterable[str]) -> List[str]:
    return [p for p in packages if not is_installed(system, p)]


def apt_update(system: System) -> None:
    system.run(["apt-get", "update"], privileged=True, interactive=True)


def apt_upgrade(system: System) -> None:
    system.run([*NONINTERACTIVE, "apt-get", "-y", "upgrade"], privileged=True, interactive=True)


def apt_install(system: System, packages: Sequence[str], *, update: bool = False) -> List[str]:
    """Install whichever of packages are not installed yet; return those."""

    todo = missing_packages(system, packages)
    if not todo:
        logger.info("All %d packages already installed", len(packages))
        return []
    if update:
        apt_update(system)
    system.run(
        [*NONINTERACTIVE, "apt-get", "install", "-y", *todo],
        privileged=True,
        interactive=True,
    )
    return todo


def render_deb822(stanzas: Sequence[Mapping[str, object]]) -> str:
    """Render apt Deb822 source stanzas; list values are space-joined."""

    blocks: List[str] = []
    for stanza in stanzas:
        lines: List[str] = []
        for key, value in stanza.items():
            if isinstance(value, (list, tuple)):
                value = " ".join(str(v) for v in value)
            elif isinstance(value, bool):
                value = "yes" if value else "no"
            lines.append(f"{key}: {value}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def debian_stanzas(*, suite: str, mirror: str, security_mirror: str, components: Sequence[str]) -> List[Dict[str, object]]:
    keyring = "/usr/share/keyrings/debian-archive-keyring.gpg"
    return [
        {
            "Types": ["deb", "deb-src"],
            "URIs": mirror,
            "Suites": [suite, f"{suite}-updates"],
            "Components": list(components),
            "Enabled": True,
            "Signed-By": keyring,
        },
        {
            "Types": ["deb", "deb-src"],
            "URIs": security_mirror,
            "Suites": [f"{suite}-security"],
            "Components": list(components),
            "Enabled": True,
            "Signed-By": keyring,
        },
    ]
