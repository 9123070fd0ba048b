"""Backend choice for runs on the current pyplot figure.

Only reached when :func:`figpolish.beautify` is called without a target, in
which case pyplot may not have been imported yet.  Interactive legends need a
GUI backend to receive clicks; styling and export work under Agg.
"""
from __future__ import annotations

import importlib.util
import os
import sys

import matplotlib

from figpolish.utils.logging import logger

GUI_BACKEND = "TkAgg"


def gui_available() -> bool:
    """A display is reachable and Tk can be imported."""
    if sys.platform.startswith("linux"):
        if not os.environ.get("DISPLAY") and not os.environ.get("WAYLAND_DISPLAY"):
            return False
    return importlib.util.find_spec("tkinter") is not None


def choose_backend() -> str:
    return os.environ.get("MPLBACKEND") or (GUI_BACKEND if gui_available() else "Agg")


def current_figure():
    """pyplot's current figure; picks a backend first if pyplot is not loaded yet."""
    if "matplotlib.pyplot" not in sys.modules:
        backend = choose_backend()
        try:
            matplotlib.use(backend)
        except ValueError as exc:
            logger.warning("[backend] %s rejected (%s); using Agg", backend, exc)
            matplotlib.use("Agg")

    import matplotlib.pyplot as plt

    try:
        return plt.gcf()
    except ImportError as exc:
        logger.warning("[backend] %s", exc)
        plt.switch_backend("Agg")
        return plt.gcf()


__all__ = ["choose_backend", "current_figure", "gui_available"]
