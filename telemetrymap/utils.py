from __future__ import annotations

import re
from typing import Any, List

import numpy as np

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?")


def clamp(value: float, vmin: float = 0.0, vmax: float = 1.0) -> float:
    """Clamp numeric values to [vmin, vmax]."""
    lo = float(vmin)
    hi = float(vmax)
    if lo > hi:
        lo, hi = hi, lo

    try:
        v = float(value)
    except (TypeError, ValueError):
        return lo

    if not np.isfinite(v):
        return lo

    return float(np.clip(v, lo, hi))


def parse_float(value: Any, default: float) -> float:
    """Lenient float parsing for panel options.

    Accepts numbers and strings with a leading number ("0.8", "12px").
    Anything else returns ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        v = float(value)
        return v if np.isfinite(v) else default
    if isinstance(value, str):
        m = _LEADING_NUMBER.match(value)
        if m:
            return float(m.group(0))
    return default


def parse_int(value: Any, default: int) -> int:
    """Lenient integer parsing, truncating toward zero like ``parseInt``."""
    v = parse_float(value, float("nan"))
    if not np.isfinite(v):
        return default
    return int(v)


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def parse_bool(value: Any, default: bool) -> bool:
    """Lenient boolean parsing for panel options (``"false"`` is False)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        s = value.strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
    return default


def colormap_gradient(name: str, steps: int = 5) -> List[str]:
    """Sample a matplotlib colormap into a list of ``#rrggbb`` stops.

    Returns an empty list for an empty name, meaning "use the renderer's
    default gradient". Unknown names raise ``ValueError``.
    """
    if not name:
        return []

    from matplotlib import colormaps
    from matplotlib import colors as mcolors

    try:
        cmap = colormaps[name]
    except KeyError as e:
        raise ValueError(f"Unknown colormap: {name!r}") from e

    n = max(2, int(steps))
    return [mcolors.to_hex(cmap(x)) for x in np.linspace(0.0, 1.0, n)]
