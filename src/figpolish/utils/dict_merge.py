from copy import deepcopy
from typing import Mapping, Any


def deep_update(base: dict, override: Mapping[str, Any]) -> dict:
    """Return a copy of *base* recursively updated with *override*.

    Nested mappings in ``override`` are merged into copies of the matching
    sub-dictionaries in ``base``; any other value replaces the entry.  Neither
    input is modified.
    """
    result = deepcopy(base)
    stack = [(result, override)]
    while stack:
        dst, src = stack.pop()
        for key, value in src.items():
            if isinstance(value, Mapping) and isinstance(dst.get(key), dict):
                dst[key] = deepcopy(dst[key])
                stack.append((dst[key], value))
            else:
                dst[key] = deepcopy(value)
    return result


def diff_keys(a: Mapping[str, Any], b: Mapping[str, Any]) -> list[str]:
    """Top-level keys whose values differ between two mappings."""
    out = []
    for key in sorted(set(a) | set(b)):
        if key not in a or key not in b or a[key] != b[key]:
            out.append(key)
    return out
