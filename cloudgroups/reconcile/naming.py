"""Deterministic GCE resource names for per-zone managed groups.

GCE names must match ``[a-z]([-a-z0-9]*[a-z0-9])?`` and be at most 63
characters long. Everything here is pure: identical inputs always give
identical names, and invalid characters are rewritten rather than rejected.
"""

from __future__ import annotations

import base64
import hashlib
import re
from typing import Final

MAX_NAME_LENGTH: Final[int] = 63
_DIGEST_LENGTH: Final[int] = 6

_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_DASH_RUNS = re.compile(r"-{2,}")


def sanitize_name(name: str) -> str:
    """Rewrite ``name`` into GCE's name charset (no length limit applied)."""
    safe = _INVALID_CHARS.sub("-", name.lower())
    safe = _DASH_RUNS.sub("-", safe).strip("-")
    if not safe or not safe[0].isalpha():
        safe = f"x{safe}" if safe else "x"
    return safe


def _digest(value: str) -> str:
    raw = hashlib.sha256(value.encode()).digest()
    return base64.b32encode(raw).decode().lower()[:_DIGEST_LENGTH]


def limited_length_name(name: str, limit: int = MAX_NAME_LENGTH, *, key: str | None = None) -> str:
    """Truncate ``name`` to ``limit`` characters, keeping it unique.

    Names already within the limit are returned unchanged. Longer names
    are cut and suffixed with a short digest of ``key`` (defaults to the
    name itself), so two long inputs sharing a prefix stay distinct.

    Parameters
    ----------
    name
        Candidate name.
    limit
        Maximum length of the result.
    key
        Value the digest is computed from.

    Returns
    -------
    str
        A name of at most ``limit`` characters.

    Raises
    ------
    ValueError
        If ``limit`` leaves no room for a character plus the digest suffix.
    """
    if limit < _DIGEST_LENGTH + 2:
        raise ValueError(f"limit must be at least {_DIGEST_LENGTH + 2}, got {limit}")
    if len(name) <= limit:
        return name
    suffix = _digest(key if key is not None else name)
    base = name[: limit - len(suffix) - 1].rstrip("-")
    return f"{base}-{suffix}"


def safe_object_name(name: str, cluster_name: str) -> str:
    """Scope ``name`` to a cluster and make it a valid GCE name."""
    scoped = f"{name}-{cluster_name}"
    return limited_length_name(sanitize_name(scoped), key=scoped)


def derive_name(zone: str, instance_group: str, cluster_name: str) -> str:
    """Name of the managed group backing ``instance_group`` in ``zone``.

    This is the only way the expected live name of a declared group is
    computed, both when matching discovered groups and when predicting a
    name before the group is created.

    Example:
        >>> derive_name("us-east1-b", "nodes", "c1")
        'us-east1-b-nodes-c1'
    """
    return safe_object_name(f"{zone}.{instance_group}", cluster_name)
