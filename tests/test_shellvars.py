from trixie_postinstall.lib.keyfile import KeyFile
from trixie_postinstall.lib.shellvars import ShellVarsFile, ensure_line
from trixie_postinstall.steps.step_06_crypt_gui import edit_cryptsetup_hook, edit_grub_defaults
from trixie_postinstall.steps.step_10_profile_photo import set_user_icon

GRUB_BEFORE = """\
# If you change this file, run 'update-grub' afterwards.
GRUB_DEFAULT=0
GRUB_TIMEOUT=5
GRUB_DISTRIBUTOR=`( . /etc/os-release && echo ${NAME} )`
GRUB_CMDLINE_LINUX_DEFAULT="quiet"
GRUB_CMDLINE_LINUX=""
"""

GRUB_AFTER = """\
# If you change this file, run 'update-grub' afterwards.
GRUB_DEFAULT=0
GRUB_TIMEOUT=3
GRUB_DISTRIBUTOR=`( . /etc/os-release && echo ${NAME} )`
GRUB_CMDLINE_LINUX_DEFAULT="quiet splash"
GRUB_CMDLINE_LINUX=""
"""


class TestShellVarsFile:
    def test_untouched_file_renders_verbatim(self):
        assert ShellVarsFile.parse(GRUB_BEFORE).render() == GRUB_BEFORE

    def test_last_assignment_wins(self):
        f = ShellVarsFile.parse("A=1\nB=x\nA=2\n")
        assert f.get("A") == "2"
        f.set("A", "3")
        assert f.render() == "A=1\nB=x\nA=3\n"

    def test_set_same_value_is_no_change(self):
        f = ShellVarsFile.parse('X="a b"\n')
        assert f.set("X", "a b") is False

    def test_missing_key_is_appended(self):
        f = ShellVarsFile.parse("# only a comment\n")
        assert f.set("NEW", "on") is True
        assert f.render() == "# only a comment\nNEW=on\n"

    def test_quotes_kept_or_added(self):
        f = ShellVarsFile.parse("A='x'\nB=y\n")
        f.set("A", "z")
        f.set("B", "two words")
        assert f.render() == "A='z'\nB=\"two words\"\n"

    def test_ensure_token_after(self):
        f = ShellVarsFile.parse('CMD="loglevel=3 quiet nomodeset"\n')
        f.ensure_token("CMD", "splash", after="quiet")
        assert f.get("CMD") == "loglevel=3 quiet splash nomodeset"

    def test_ensure_token_present(self):
        f = ShellVarsFile.parse('CMD="quiet splash"\n')
        assert f.ensure_token("CMD", "splash") is False

    def test_keys(self):
        assert ShellVarsFile.parse("# c\nA=1\n\nB=2\n").keys() == ["A", "B"]

    def test_trailing_comment_kept(self):
        f = ShellVarsFile.parse('A="x"  # keep me\nB=y # note\n')
        assert f.get("A") == "x"
        assert f.get("B") == "y"
        f.set("A", "x z")
        f.set("B", "w")
        assert f.render() == 'A="x z"  # keep me\nB=w # note\n'

    def test_hash_inside_quotes_is_value(self):
        f = ShellVarsFile.parse('A="a # b"\n')
        assert f.get("A") == "a # b"

    def test_command_substitution_untouched(self):
        line = "GRUB_DISTRIBUTOR=`( . /etc/os-release && echo ${NAME} )`"
        f = ShellVarsFile.parse(line + "\n")
        assert f.get("GRUB_DISTRIBUTOR") == line.split("=", 1)[1]
        assert f.render() == line + "\n"


class TestEnsureLine:
    def test_appends(self):
        assert ensure_line("dm_crypt", "plymouth") == "dm_crypt\nplymouth\n"

    def test_empty(self):
        assert ensure_line("", "plymouth") == "plymouth\n"

    def test_dedups(self):
        assert ensure_line("a\nplymouth\nb\nplymouth\n", "plymouth") == "a\nplymouth\nb\n"


class TestGrubAndHook:
    def test_grub_edit(self):
        assert edit_grub_defaults(GRUB_BEFORE) == GRUB_AFTER

    def test_grub_edit_is_idempotent(self):
        assert edit_grub_defaults(GRUB_AFTER) == GRUB_AFTER

    def test_grub_missing_cmdline(self):
        out = edit_grub_defaults("GRUB_TIMEOUT=10\n")
        assert out == 'GRUB_TIMEOUT=3\nGRUB_CMDLINE_LINUX_DEFAULT="quiet splash"\n'

    def test_grub_cmdline_with_comment(self):
        before = 'GRUB_CMDLINE_LINUX_DEFAULT="quiet"  # keep it quiet\n'
        assert edit_grub_defaults(before) == (
            'GRUB_CMDLINE_LINUX_DEFAULT="quiet splash"  # keep it quiet\nGRUB_TIMEOUT=3\n'
        )

    def test_cryptsetup_hook(self):
        before = "# CRYPTSETUP=\n#KEYFILE_PATTERN=\n"
        after = edit_cryptsetup_hook(before)
        assert after == "# CRYPTSETUP=\n#KEYFILE_PATTERN=\nCRYPTSETUP=y\nPLYMOUTH=y\n"
        assert edit_cryptsetup_hook(after) == after


class TestKeyFile:
    def test_insert_into_existing_section(self):
        text = "[User]\nLanguage=\nXSession=gnome\nSystemAccount=false\n"
        assert set_user_icon(text, "/var/lib/AccountsService/icons/alice") == (
            "[User]\nLanguage=\nXSession=gnome\nSystemAccount=false\n"
            "Icon=/var/lib/AccountsService/icons/alice\n"
        )

    def test_insert_before_next_section(self):
        text = "[User]\nXSession=\n\n[InputSource0]\nxkb=us\n"
        assert set_user_icon(text, "/i") == "[User]\nXSession=\nIcon=/i\n\n[InputSource0]\nxkb=us\n"

    def test_replace_existing_value(self):
        kf = KeyFile.parse("[User]\nIcon=/old\n")
        assert kf.set("User", "Icon", "/new") is True
        assert kf.render() == "[User]\nIcon=/new\n"

    def test_same_value_is_no_change(self):
        kf = KeyFile.parse("[User]\nIcon=/i\n")
        assert kf.set("User", "Icon", "/i") is False

    def test_missing_record(self):
        assert set_user_icon("", "/i") == "[User]\nIcon=/i\n"

    def test_missing_section_appended(self):
        assert set_user_icon("[Other]\na=b\n", "/i") == "[Other]\na=b\n\n[User]\nIcon=/i\n"

    def test_get_only_reads_its_section(self):
        kf = KeyFile.parse("[A]\nk=1\n[B]\nk=2\n")
        assert kf.get("B", "k") == "2"
        assert kf.get("C", "k") is None
