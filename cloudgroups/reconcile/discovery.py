"""Discovery of the managed groups backing a cluster's instance groups.

The strategy:

* Find the instance templates owned by the cluster (metadata tag).
* Find managed groups, zone by zone and page by page, that use one of
  those templates.
* Match each group to a declared instance group by derived name.
* Classify the group's instances against its current template.

A pass is all-or-nothing: any listing failure or ambiguous match aborts
the whole call and no partial inventory is returned.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from loguru import logger

from cloudgroups.api import (
    CloudInstanceGroup,
    ClusterNode,
    ConfigurationTemplate,
    DeclaredInstanceGroup,
    ManagedGroup,
    OwnerFilter,
)
from cloudgroups.core.exceptions import ListingError, ProviderError
from cloudgroups.observability.logging import group_context
from cloudgroups.providers.provider import ComputeProvider

from .matching import match_instance_group
from .members import NodeMap, classify_members, get_node_map

log = logger.bind(component="discovery")

type CloudGroups = dict[str, CloudInstanceGroup]


@dataclass(frozen=True, slots=True)
class _PassContext:
    """Read-only inputs shared by every zone of one discovery pass."""

    cluster_name: str
    instance_groups: Sequence[DeclaredInstanceGroup]
    nodes_by_external_id: NodeMap
    templates: Mapping[str, ConfigurationTemplate]
    warn_unmatched: bool


class GroupDiscoverer:
    """Builds the reconciled view of a cluster's managed groups.

    Zones are listed concurrently (at most ``zone_concurrency`` at a time).
    Each zone fills its own result dict; the dicts are merged in zone order
    once every zone has finished.
    """

    def __init__(self, provider: ComputeProvider, *, zone_concurrency: int = 4) -> None:
        if zone_concurrency < 1:
            raise ValueError("zone_concurrency must be at least 1")
        self._provider = provider
        self._zone_concurrency = zone_concurrency

    async def discover(
        self,
        cluster_name: str,
        instance_groups: Sequence[DeclaredInstanceGroup],
        nodes: Sequence[ClusterNode],
        *,
        warn_unmatched: bool = False,
    ) -> CloudGroups:
        """Map live managed-group names to reconciled CloudInstanceGroups.

        Parameters
        ----------
        cluster_name
            Cluster identifier; scopes template ownership and derived names.
        instance_groups
            Declared instance groups from the cluster spec.
        nodes
            Kubernetes nodes, correlated to instances by external id.
        warn_unmatched
            Log a warning for owned groups no declared group matches.

        Raises
        ------
        ListingError
            If any zone, template, group or instance listing fails.
        AmbiguousMatchError
            If a live group matches more than one declared group.
        """
        bound = log.bind(cluster=cluster_name)

        ctx = _PassContext(
            cluster_name=cluster_name,
            instance_groups=tuple(instance_groups),
            nodes_by_external_id=get_node_map(nodes),
            templates=await self._owned_templates(OwnerFilter(cluster_name)),
            warn_unmatched=warn_unmatched,
        )
        zones = await self._zones()
        bound.debug(
            "Discovering managed groups in {n} zones with {t} owned templates",
            n=len(zones), t=len(ctx.templates),
        )

        per_zone = await self._gather_zones(zones, ctx)

        groups: CloudGroups = {}
        for found in per_zone:
            groups.update(found)

        bound.info("Discovered {n} cloud instance groups", n=len(groups))
        return groups

    async def _owned_templates(self, owner: OwnerFilter) -> dict[str, ConfigurationTemplate]:
        try:
            templates = await self._provider.list_templates(owner)
        except ProviderError as e:
            raise ListingError("instance templates", reason=str(e)) from e
        return {t.ref.self_link: t for t in templates}

    async def _zones(self) -> Sequence[str]:
        try:
            return await self._provider.list_zones()
        except ProviderError as e:
            raise ListingError("zones", reason=str(e)) from e

    async def _gather_zones(self, zones: Sequence[str], ctx: _PassContext) -> list[CloudGroups]:
        semaphore = asyncio.Semaphore(self._zone_concurrency)

        async def _bounded(zone: str) -> CloudGroups:
            async with semaphore:
                return await self._discover_zone(zone, ctx)

        tasks = [asyncio.create_task(_bounded(z), name=f"discover-{z}") for z in zones]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _discover_zone(self, zone: str, ctx: _PassContext) -> CloudGroups:
        found: CloudGroups = {}
        pages = 0
        try:
            async for page in self._provider.list_managed_groups(zone):
                pages += 1
                for group in page.items:
                    if (cig := await self._reconcile_group(group, ctx)) is not None:
                        found[group.name] = cig
        except ProviderError as e:
            raise ListingError("managed groups", zone=zone, reason=str(e)) from e

        log.debug(
            "Zone {zone}: {n} groups across {pages} pages",
            zone=zone, n=len(found), pages=pages,
        )
        return found

    async def _reconcile_group(
        self, group: ManagedGroup, ctx: _PassContext,
    ) -> CloudInstanceGroup | None:
        bound = log.bind(cluster=ctx.cluster_name, **group_context(group))
        if group.template.self_link not in ctx.templates:
            bound.debug(
                "Ignoring managed group {name} with unmanaged instance template: {link}",
                name=group.name, link=group.template.self_link,
            )
            return None

        ig = match_instance_group(group, ctx.cluster_name, ctx.instance_groups)
        if ig is None:
            if ctx.warn_unmatched:
                bound.warning(
                    "Found managed group with no corresponding instance group {name}",
                    name=group.name,
                )
            return None

        cig = CloudInstanceGroup(
            human_name=group.name,
            instance_group=ig,
            min_size=group.target_size,
            max_size=group.target_size,
            managed_group=group,
        )

        try:
            instances = await self._provider.list_instances(group)
        except ProviderError as e:
            raise ListingError(
                f"instances of managed group {group.name}", zone=group.zone, reason=str(e),
            ) from e

        cig.ready, cig.need_update = classify_members(
            group.name, instances, group.template, ctx.nodes_by_external_id,
        )
        return cig


async def get_cloud_groups(
    provider: ComputeProvider,
    cluster_name: str,
    instance_groups: Sequence[DeclaredInstanceGroup],
    nodes: Sequence[ClusterNode],
    *,
    warn_unmatched: bool = False,
    zone_concurrency: int = 4,
) -> CloudGroups:
    """One-shot discovery pass. See GroupDiscoverer.discover."""
    discoverer = GroupDiscoverer(provider, zone_concurrency=zone_concurrency)
    return await discoverer.discover(
        cluster_name, instance_groups, nodes, warn_unmatched=warn_unmatched,
    )
