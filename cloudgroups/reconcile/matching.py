from __future__ import annotations

from collections.abc import Sequence

from cloudgroups.api import DeclaredInstanceGroup, ManagedGroup
from cloudgroups.core.exceptions import AmbiguousMatchError

from .naming import derive_name


def match_instance_group(
    group: ManagedGroup,
    cluster_name: str,
    instance_groups: Sequence[DeclaredInstanceGroup],
) -> DeclaredInstanceGroup | None:
    """Find the declared instance group a live managed group belongs to.

    Each declared group's expected name is derived for the live group's
    zone and compared with the live name.

    Returns
    -------
    DeclaredInstanceGroup | None
        The single match, or None when nothing matches.

    Raises
    ------
    AmbiguousMatchError
        If more than one declared group derives the live name.
    """
    matches = [
        ig for ig in instance_groups
        if derive_name(group.zone, ig.name, cluster_name) == group.name
    ]

    match matches:
        case []:
            return None
        case [only]:
            return only
        case _:
            raise AmbiguousMatchError(group.name, [ig.name for ig in matches])
