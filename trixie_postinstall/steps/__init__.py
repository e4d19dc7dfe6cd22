from .step_01_sudo_nopass import SudoNoPasswordStep
from .step_02_gnome_shortcut import GnomeShortcutStep
from .step_03_terminal_theme import TerminalThemeStep
from .step_04_sources import UpdateSourcesStep
from .step_05_apps import InstallAppsStep
from .step_06_crypt_gui import CryptGuiStep
from .step_07_import_fonts import ImportWindowsFontsStep
from .step_08_wallpapers import InstallWallpapersStep
from .step_09_icon_theme import InstallIconThemeStep
from .step_10_profile_photo import SetProfilePhotoStep
from .step_11_gnome_extensions import GnomeExtensionsStep
from .step_12_gnome_settings import GnomeSettingsStep

__all__ = [
    "SudoNoPasswordStep",
    "GnomeShortcutStep",
    "TerminalThemeStep",
    "UpdateSourcesStep",
    "InstallAppsStep",
    "CryptGuiStep",
    "ImportWindowsFontsStep",
    "InstallWallpapersStep",
    "InstallIconThemeStep",
    "SetProfilePhotoStep",
    "GnomeExtensionsStep",
    "GnomeSettingsStep",
]
