"""
Shared fixtures: a recording stand-in for the System seam and small
generated font files.
"""

import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from trixie_postinstall.config import PostinstallConfig
from trixie_postinstall.lib.command import CmdResult
from trixie_postinstall.lib.gsettings import GSettings
from trixie_postinstall.lib.system import System, UserAccount
from trixie_postinstall.pipeline import StepContext


class FakeSystem(System):
    """Records commands instead of running them.

    gsettings keys live in ``self.settings`` as the text ``gsettings get``
    would print, keyed by (schema[:path], key).
    """

    def __init__(
        self,
        *,
        files: Optional[Dict[str, str]] = None,
        paths: Iterable[str] = (),
        dirs: Iterable[str] = (),
        commands: Iterable[str] = (),
        users: Optional[Dict[int, UserAccount]] = None,
        groups: Optional[Dict[str, List[str]]] = None,
        settings: Optional[Dict[tuple, str]] = None,
        installed_packages: Iterable[str] = (),
        plymouth_theme: str = "",
        fail_commands: Iterable[str] = (),
        dry_run: bool = False,
    ):
        super().__init__(dry_run=dry_run)
        self.files = dict(files or {})
        self.paths = set(paths)
        self.dirs = set(dirs)
        self.commands_available = set(commands)
        self.users = dict(users or {})
        self.groups = dict(groups or {})
        self.settings = dict(settings or {})
        self.installed_packages = set(installed_packages)
        self.plymouth_theme = plymouth_theme
        self.fail_commands = set(fail_commands)
        self.calls: List[dict] = []

    # commands -------------------------------------------------------------

    def is_root(self):
        return False

    def run(self, argv, *, privileged=False, via="sudo", check=True, input_text=None, cwd=None, env=None, interactive=False):
        argv = list(argv)
        self.calls.append({"argv": argv, "privileged": privileged, "via": via, "input": input_text, "cwd": cwd})
        if argv[0] in self.fail_commands:
            if check:
                raise RuntimeError(f"Command failed (1): {' '.join(argv)}")
            return CmdResult(argv=argv, returncode=1, stdout="", stderr="boom")
        if argv[:2] == ["gsettings", "set"]:
            self.settings[(argv[2], argv[3])] = argv[4]
        elif argv[0] == "tee":
            self.files[argv[1]] = input_text
        return CmdResult(argv=argv, returncode=0, stdout="", stderr="")

    def query(self, argv):
        argv = list(argv)
        if argv[:2] == ["gsettings", "get"]:
            value = self.settings.get((argv[2], argv[3]))
            if value is None:
                return CmdResult(argv=argv, returncode=1, stdout="", stderr="No such key")
            return CmdResult(argv=argv, returncode=0, stdout=value + "\n", stderr="")
        if argv[0] == "dpkg-query":
            pkg = argv[-1]
            if pkg in self.installed_packages:
                return CmdResult(argv=argv, returncode=0, stdout="install ok installed", stderr="")
            return CmdResult(argv=argv, returncode=1, stdout="", stderr="not installed")
        if argv[0] == "plymouth-set-default-theme":
            return CmdResult(argv=argv, returncode=0, stdout=self.plymouth_theme + "\n", stderr="")
        return CmdResult(argv=argv, returncode=1, stdout="", stderr="")

    def argvs(self) -> List[List[str]]:
        return [c["argv"] for c in self.calls]

    def ran(self, *prefix) -> bool:
        return any(a[: len(prefix)] == list(prefix) for a in self.argvs())

    # filesystem -----------------------------------------------------------

    def which(self, cmd):
        return f"/usr/bin/{cmd}" if cmd in self.commands_available else None

    def exists(self, path):
        p = str(path)
        return p in self.files or p in self.paths or p in self.dirs

    def is_dir(self, path):
        return str(path) in self.dirs

    def read_text(self, path, *, privileged=False):
        return self.files.get(str(path))

    def write_text(self, path, content, *, mode="0644", privileged=True, via="sudo"):
        self.calls.append({"argv": ["write", str(path), mode], "privileged": privileged, "via": via, "input": content, "cwd": None})
        self.files[str(path)] = content

    def install_file(self, src, dst, *, mode="0644"):
        self.calls.append({"argv": ["install", str(src), str(dst), mode], "privileged": True, "via": "sudo", "input": None, "cwd": None})
        Path(dst).parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)

    def make_dirs(self, path, *, mode="0755"):
        self.calls.append({"argv": ["mkdir", str(path)], "privileged": True, "via": "sudo", "input": None, "cwd": None})
        Path(path).mkdir(parents=True, exist_ok=True)

    # accounts -------------------------------------------------------------

    def lookup_user(self, uid):
        return self.users.get(uid)

    def user_groups(self, username):
        return list(self.groups.get(username, []))


@pytest.fixture
def fake_system():
    return FakeSystem(commands={"gsettings"})


def make_context(system, raw=None, answers=None):
    """StepContext around a FakeSystem; answers are consumed by ask() in order."""

    queue = list(answers or [])
    asked = []

    def ask(question, default):
        asked.append(question)
        return queue.pop(0) if queue else default

    ctx = StepContext(
        system=system,
        config=PostinstallConfig(raw=raw or {}),
        gsettings=GSettings(system),
        ask=ask,
    )
    ctx.asked = asked
    return ctx


@pytest.fixture
def context_factory():
    return make_context


def build_font(path: Path, family: str, style: str, weight: int = 400, italic: bool = False) -> Path:
    """Write a minimal TrueType font with the given naming and style bits."""
    from fontTools.fontBuilder import FontBuilder
    from fontTools.pens.ttGlyphPen import TTGlyphPen

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef"])
    fb.setupCharacterMap({})
    fb.setupGlyf({".notdef": TTGlyphPen(None).glyph()})
    fb.setupHorizontalMetrics({".notdef": (500, 0)})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": family, "styleName": style})
    fb.setupOS2(usWeightClass=weight, fsSelection=0x01 if italic else 0x40)
    fb.setupPost()
    path.parent.mkdir(parents=True, exist_ok=True)
    fb.save(str(path))
    return path


@pytest.fixture
def font_factory():
    return build_font
