"""Textual status panel: CPU · GPU · RAM."""

from .app import RyzmonApp, cmd_panel

__all__ = ["RyzmonApp", "cmd_panel"]
