"""Figure export.

Picks the output path, format and resolution from
:class:`~figpolish.config.ExportSettings` and hands the rendering to
``Figure.savefig``.  Export problems are logged, never raised.
"""
from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Optional

from figpolish.utils.logging import logger

_FORMAT_ALIASES = {"jpg": "jpeg", "tif": "tiff"}
_EXTENSIONS = {"jpeg": "jpg", "tiff": "tif"}
RASTER_FORMATS = frozenset({"png", "jpeg", "tiff"})
VECTOR_FORMATS = frozenset({"pdf", "eps", "svg"})
_KNOWN_SUFFIXES = {f".{f}" for f in (*RASTER_FORMATS, *VECTOR_FORMATS, *_FORMAT_ALIASES)}


def normalize_format(fmt: str) -> str:
    fmt = fmt.lower().lstrip(".")
    return _FORMAT_ALIASES.get(fmt, fmt)


def output_path(filename: str, fmt: str) -> Path:
    """``filename`` with the extension of ``fmt``; an empty stem gets a default."""
    fmt = normalize_format(fmt)
    path = Path(filename.strip() or "beautified_figure")
    if path.suffix.lower() in _KNOWN_SUFFIXES:
        path = path.with_suffix("")
    if not path.name:
        path = path / "beautified_figure"
    return path.with_name(f"{path.name}.{_EXTENSIONS.get(fmt, fmt)}")


def open_with_viewer(path: Path) -> bool:
    """Open ``path`` with the desktop's default application."""
    try:
        if sys.platform.startswith("win"):
            os.startfile(str(path))  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            subprocess.Popen(["open", str(path)])
        else:
            subprocess.Popen(["xdg-open", str(path)])
    except OSError as exc:
        logger.warning("[export] could not open %s: %s", path, exc)
        return False
    return True


def export_figure(fig, settings) -> Optional[Path]:
    """Write ``fig`` according to ``settings``; returns the path or ``None``."""
    fmt = normalize_format(settings.format)
    path = output_path(settings.filename, fmt)
    kind = "raster" if fmt in RASTER_FORMATS else "vector"
    try:
        if path.parent != Path("."):
            path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(
            path,
            format=fmt,
            dpi=settings.resolution,
            transparent=settings.transparent,
            facecolor=fig.get_facecolor(),
            bbox_inches="tight" if settings.bbox_tight else None,
        )
    except (OSError, ValueError, RuntimeError) as exc:
        logger.warning("[export] failed to write %s: %s", path, exc)
        return None
    logger.info("[export] wrote %s (%s, %s dpi)", path, kind, settings.resolution)
    if settings.open_exported_file:
        open_with_viewer(path)
    return path


__all__ = ["export_figure", "output_path", "normalize_format", "open_with_viewer"]
