"""Click option helpers."""

from __future__ import annotations


def split_commas(_ctx, _param, values: tuple[str, ...]) -> tuple[str, ...] | None:
    """Return a flat tuple from a *repeatable* / comma-separated Click option.

    Order and duplicates are preserved, blank tokens are kept so validation
    can reject them.  An option that was never given yields ``None`` so the
    configured default applies.
    """
    if not values:
        return None
    flat: list[str] = []
    for v in values:
        flat.extend(x.strip() for x in v.split(","))
    return tuple(flat)
