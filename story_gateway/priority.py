"""Provider priority lists: parsing and per-request-class ordering.

Priority lists come from comma-separated settings such as
``AI_PROVIDER_PRIORITY=gemini,claude,openai``.
"""

from __future__ import annotations

import difflib
from collections.abc import Iterable, Sequence

from loguru import logger


def _normalize(s: str) -> str:
    """Strip surrounding whitespace and lowercase."""
    return s.strip().lower()


def parse_priority(raw: str | Iterable[str]) -> tuple[str, ...]:
    """Split a priority setting into normalized names.

    Empty entries are dropped; a repeated name keeps its first position.
    """
    parts = raw.split(",") if isinstance(raw, str) else raw
    seen: dict[str, None] = {}
    for part in parts:
        name = _normalize(part)
        if name and name not in seen:
            seen[name] = None
    return tuple(seen)


def suggest(name: str, known: Iterable[str]) -> str | None:
    """Closest registered name for a typo, if there is exactly one."""
    candidates = difflib.get_close_matches(name, list(known), n=2, cutoff=0.7)
    if len(candidates) == 1:
        return candidates[0]
    return None


def resolve_order(
    priority: Sequence[str],
    registry: Sequence[str],
    *,
    append_unlisted: bool,
) -> list[str]:
    """Order registered provider names for one request class.

    Unknown names in ``priority`` are ignored. With ``append_unlisted`` the
    registered providers missing from ``priority`` follow in registry order;
    without it, an unlisted provider is never part of the result.
    """
    known = set(registry)
    ordered: list[str] = []
    for name in priority:
        if name in known:
            if name not in ordered:
                ordered.append(name)
            continue
        hint = suggest(name, registry)
        logger.warning(
            f"Ignoring unknown provider '{name}' in priority list"
            + (f" (did you mean '{hint}'?)" if hint else "")
        )

    if append_unlisted:
        ordered.extend(name for name in registry if name not in ordered)
    return ordered
