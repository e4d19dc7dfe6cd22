"""Post-install toolkit for a Debian Trixie GNOME desktop.

Two halves, no shared runtime:
- trixie-collect: exports fonts, wallpapers and the account picture from a
  Windows installation into a flat, collision-safe folder tree
- trixie-postinstall: applies a catalogue of idempotent provisioning steps,
  some of which consume that tree
"""

__all__ = []
__version__ = "1.0.0"
