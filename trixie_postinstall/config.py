from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

MANIFEST_DIR = Path(__file__).resolve().parent / "manifests"

ICON_THEME_URL = "https://github.com/yeyushengfan258/Win11-icon-theme/archive/refs/heads/main.zip"
ARCMENU_URL = "https://extensions.gnome.org/extension-data/arcmenuarcmenu.com.v69.shell-extension.zip"


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    return raw.get(name) or {}


@dataclass(frozen=True)
class PostinstallConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def assets_dir(self) -> Path:
        return Path(_section(self.raw, "paths").get("assets_dir") or "Windows")

    @property
    def linux_dir(self) -> Path:
        return Path(_section(self.raw, "paths").get("linux_dir") or "Linux")

    @property
    def user_uid(self) -> int:
        return int(_section(self.raw, "user").get("uid", 1000))

    @property
    def debian_suite(self) -> str:
        return str(_section(self.raw, "debian").get("suite") or "trixie")

    @property
    def debian_mirror(self) -> str:
        return str(_section(self.raw, "debian").get("mirror") or "https://deb.debian.org/debian")

    @property
    def debian_security_mirror(self) -> str:
        return str(
            _section(self.raw, "debian").get("security_mirror") or "https://security.debian.org/debian-security"
        )

    @property
    def debian_components(self) -> List[str]:
        return list(
            _section(self.raw, "debian").get("components") or ["main", "non-free-firmware", "contrib", "non-free"]
        )

    @property
    def fonts_destination(self) -> Path:
        return Path(_section(self.raw, "fonts").get("destination") or "/usr/local/share/fonts")

    @property
    def wallpapers_destination(self) -> Path:
        return Path(_section(self.raw, "wallpapers").get("destination") or "/usr/share/backgrounds/Win11")

    @property
    def wallpaper_light(self) -> str:
        return str(_section(self.raw, "wallpapers").get("light") or "img0.jpg")

    @property
    def wallpaper_dark(self) -> str:
        return str(_section(self.raw, "wallpapers").get("dark") or "img19.jpg")

    @property
    def icons_url(self) -> str:
        return str(_section(self.raw, "icons").get("url") or ICON_THEME_URL)

    @property
    def icons_theme_name(self) -> str:
        return str(_section(self.raw, "icons").get("theme_name") or "Win11")

    @property
    def arcmenu_url(self) -> str:
        return str(_section(self.raw, "extensions").get("arcmenu_url") or ARCMENU_URL)

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    @property
    def offer_logout(self) -> bool:
        return bool(self.raw.get("offer_logout", True))

    @property
    def collector_sources(self) -> Dict[str, List[str]]:
        sources = _section(_section(self.raw, "collector"), "sources")
        return {str(k): [str(p) for p in (v or [])] for k, v in sources.items()}

    def with_overrides(self, **paths: Optional[str]) -> "PostinstallConfig":
        """Return a copy with CLI path flags (assets_dir, linux_dir) applied."""

        raw = dict(self.raw)
        section = dict(_section(raw, "paths"))
        for key, value in paths.items():
            if value is not None:
                section[key] = value
        raw["paths"] = section
        return PostinstallConfig(raw=raw)


def _load_yaml(p: Path) -> Dict[str, Any]:
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{p} must contain a mapping/object")
    return data


def load_config(path: Optional[str]) -> PostinstallConfig:
    """Load a YAML config file; no path means all defaults."""

    if not path:
        return PostinstallConfig()

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("config must be YAML")
    return PostinstallConfig(raw=_load_yaml(p))


def load_manifest(name: str) -> Dict[str, Any]:
    """Load a packaged manifest (manifests/<name>.yaml)."""

    return _load_yaml(MANIFEST_DIR / f"{name}.yaml")
