import pytest

from trixie_postinstall.lib.gsettings import GSettings, parse_gvariant, schema_arg, to_gvariant

from conftest import FakeSystem

IFACE = "org.gnome.desktop.interface"


class TestGVariantText:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("@as []", []),
            ("['a@b', 'c']", ["a@b", "c"]),
            ("uint32 5", 5),
            ("true", True),
            ("false", False),
            ("'Win11'", "Win11"),
            ("0.5", 0.5),
            ("Adwaita", "Adwaita"),
        ],
    )
    def test_parse(self, text, expected):
        assert parse_gvariant(text + "\n") == expected

    def test_format(self):
        assert to_gvariant(True) == "true"
        assert to_gvariant(3) == "3"
        assert to_gvariant("it's") == "'it\\'s'"
        assert to_gvariant(["a", "b"]) == "['a', 'b']"
        assert to_gvariant([]) == "[]"

    def test_format_rejects_unknown(self):
        with pytest.raises(TypeError):
            to_gvariant({"a": 1})

    def test_schema_arg(self):
        assert schema_arg("s") == "s"
        assert schema_arg("s", "/p/") == "s:/p/"


class TestGSettings:
    def test_ensure_skips_when_equal(self):
        system = FakeSystem(settings={(IFACE, "icon-theme"): "'Win11'"})
        assert GSettings(system).ensure(IFACE, "icon-theme", "Win11") is False
        assert system.calls == []

    def test_ensure_writes_when_different(self):
        system = FakeSystem(settings={(IFACE, "icon-theme"): "'Adwaita'"})
        assert GSettings(system).ensure(IFACE, "icon-theme", "Win11") is True
        assert system.settings[(IFACE, "icon-theme")] == "'Win11'"

    def test_ensure_writes_unreadable_key(self):
        system = FakeSystem()
        assert GSettings(system).ensure(IFACE, "clock-format", "24h") is True
        assert system.ran("gsettings", "set", IFACE, "clock-format", "'24h'")

    def test_ensure_relocatable_path(self):
        system = FakeSystem()
        GSettings(system).ensure("org.example.binding", "name", "x", path="/a/b/")
        assert system.settings[("org.example.binding:/a/b/", "name")] == "'x'"

    def test_ensure_in_array(self):
        key = ("org.gnome.shell", "enabled-extensions")
        system = FakeSystem(settings={key: "['one@x']"})
        gs = GSettings(system)
        assert gs.ensure_in_array("org.gnome.shell", "enabled-extensions", ["one@x", "two@y"]) == ["two@y"]
        assert system.settings[key] == "['one@x', 'two@y']"
        assert gs.ensure_in_array("org.gnome.shell", "enabled-extensions", ["two@y"]) == []

    def test_ensure_in_array_requires_array(self):
        system = FakeSystem(settings={("s", "k"): "'text'"})
        with pytest.raises(RuntimeError):
            GSettings(system).ensure_in_array("s", "k", ["x"])

    def test_get_failure_raises(self):
        with pytest.raises(RuntimeError):
            GSettings(FakeSystem()).get("s", "missing")

    def test_available(self):
        assert GSettings(FakeSystem(commands={"gsettings"})).available()
        assert not GSettings(FakeSystem()).available()
