from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from matplotlib.axes import Axes
from matplotlib.figure import Figure, FigureBase

from figpolish.config.layering import resolve
from figpolish.config.schema import DERIVED_FIELDS, ConfigRecord
from figpolish.utils.logging import log_level_scope, logger
from figpolish.viz.backend import current_figure
from figpolish.viz.export import export_figure
from figpolish.viz.legend import apply_legend
from figpolish.viz.overlays import (
    PANEL_LABEL_GID,
    STATS_GID,
    add_panel_label,
    add_stats_overlay,
    remove_overlay,
)
from figpolish.viz.scaling import ScalingTable, scale_factor
from figpolish.viz.stylist import font_family, style_panel, style_text
from figpolish.viz.walker import PanelEntry, entries_for_axes, enumerate_panels

Target = Union[None, FigureBase, Axes, Sequence[Axes]]


class InvalidTargetError(ValueError):
    """Raised when :func:`beautify` is given nothing it can style."""


# ---------- target handling ----------


def root_figure(container) -> Figure:
    fig = container
    while not isinstance(fig, Figure):
        fig = fig.figure
    return fig


def _resolve_target(target: Target) -> Tuple[FigureBase, Optional[List[Axes]]]:
    """Return ``(container, explicit_axes)``; ``explicit_axes`` is None for whole-figure runs."""
    if target is None:
        return current_figure(), None
    if isinstance(target, FigureBase):
        return target, None
    if isinstance(target, Axes):
        return target.figure, [target]
    if isinstance(target, (list, tuple)) and target and all(isinstance(a, Axes) for a in target):
        return target[0].figure, list(target)
    raise InvalidTargetError(
        f"expected a Figure, SubFigure, Axes or list of Axes, got {type(target).__name__}"
    )


def _collect_overrides(overrides: Any, kwargs: Mapping[str, Any]) -> Any:
    if isinstance(overrides, ConfigRecord):
        overrides = overrides.model_dump(exclude=set(DERIVED_FIELDS))
    elif overrides is None:
        overrides = {}
    if not isinstance(overrides, Mapping):
        # handed to the resolver as-is, which reports and ignores it
        return overrides
    return {**overrides, **kwargs}


# ---------- figure-level text ----------


def _iter_containers(root):
    stack = [root]
    while stack:
        container = stack.pop()
        yield container
        stack.extend(reversed(getattr(container, "subfigs", [])))


def style_suptitles(root, cfg: ConfigRecord) -> int:
    """Restyle the suptitle of ``root`` and of every nested subfigure."""
    base = cfg.effective_base_font_size
    size = max(
        round(base * cfg.title_scale * cfg.max_scale_factor * 1.15),
        round(base * 1.6),
    )
    count = 0
    for container in _iter_containers(root):
        title = getattr(container, "_suptitle", None)
        if title is None:
            continue
        style_text(title, size, cfg.text_color, font_family(cfg), "bold")
        count += 1
    return count


# ---------- per panel ----------


def _process_panel(
    entry: PanelEntry, index: int, total: int, cfg: ConfigRecord, table: ScalingTable
) -> None:
    ax = entry.panel
    sf = scale_factor(entry.group.density, table)
    result = style_panel(ax, cfg, sf)
    state = apply_legend(ax, result.legend_entries, cfg, result.sizes)

    if cfg.panel_labeling.enabled and total > 1:
        add_panel_label(ax, index, cfg, result.sizes)
    else:
        remove_overlay(ax, PANEL_LABEL_GID)
    if cfg.stats_overlay.enabled and getattr(ax, "name", "") == "rectilinear":
        add_stats_overlay(ax, cfg, result.sizes)
    else:
        remove_overlay(ax, STATS_GID)

    logger.debug(
        "[beautify] %s density=%d scale=%.2f candidates=%d legend=%s",
        type(ax).__name__, entry.group.density, sf, len(result.candidates), state.value,
    )


# ---------- public API ----------


def beautify(
    target: Target = None,
    overrides: Optional[Union[Mapping[str, Any], ConfigRecord]] = None,
    **kwargs: Any,
) -> ConfigRecord:
    """Restyle an existing matplotlib figure in place.

    Parameters
    ----------
    target:
        ``None`` for the current pyplot figure, a ``Figure`` or ``SubFigure``
        (every panel inside it, subfigures included), a single ``Axes`` or a
        list of ``Axes``.
    overrides:
        Mapping of configuration fields (see :class:`ConfigRecord`), e.g.
        ``{"style_preset": "publication", "legend_location": "none"}``.
        Keyword arguments are merged on top.

    Returns
    -------
    ConfigRecord
        The resolved configuration actually applied.

    Raises
    ------
    InvalidTargetError
        If ``target`` is not something that holds panels.  Every other
        problem (bad config values, a failing element) is logged and skipped.
    """
    container, explicit = _resolve_target(target)
    cfg, issues = resolve(user_overrides=_collect_overrides(overrides, kwargs))

    with log_level_scope(cfg.log_level):
        for issue in issues:
            logger.warning("[config] %s", issue)
        logger.info("[beautify] preset=%s theme=%s", cfg.style_preset, cfg.theme)

        if explicit is None:
            container.set_facecolor(cfg.figure_background_color)
            entries = enumerate_panels(container, cfg)
        else:
            entries = entries_for_axes(explicit, cfg)

        table = ScalingTable.from_config(cfg)
        styled = 0
        for index, entry in enumerate(entries):
            try:
                _process_panel(entry, index, len(entries), cfg, table)
            except Exception as exc:  # noqa: BLE001
                logger.warning("[beautify] panel %r skipped: %s", entry.panel, exc)
                continue
            styled += 1

        if explicit is None and cfg.beautify_suptitle:
            style_suptitles(container, cfg)

        logger.info("[beautify] styled %d of %d panel(s)", styled, len(entries))

        if cfg.export_settings.enabled:
            export_figure(root_figure(container), cfg.export_settings)

    return cfg


__all__ = ["beautify", "InvalidTargetError", "root_figure", "style_suptitles"]
