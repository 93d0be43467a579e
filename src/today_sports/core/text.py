from __future__ import annotations

import re

_whitespace_re = re.compile(r"\s+")


def collapse_whitespace(value: str) -> str:
    return _whitespace_re.sub(" ", value).strip()


def join_name_parts(*parts: object) -> str:
    """Join the non-empty string parts of a display name with single spaces."""

    kept = [p for p in parts if isinstance(p, str) and p.strip()]
    return collapse_whitespace(" ".join(kept))
