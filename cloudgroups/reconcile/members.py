from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from loguru import logger

from cloudgroups.api import ClusterNode, CloudInstanceGroupMember, LiveInstance, TemplateRef

log = logger.bind(component="members")

type NodeMap = Mapping[str, ClusterNode]


def get_node_map(nodes: Iterable[ClusterNode]) -> dict[str, ClusterNode]:
    """Index nodes by external id. Nodes without one are skipped."""
    return {node.external_id: node for node in nodes if node.external_id}


def classify_members(
    group_name: str,
    instances: Sequence[LiveInstance],
    latest_template: TemplateRef,
    nodes_by_external_id: NodeMap,
) -> tuple[list[CloudInstanceGroupMember], list[CloudInstanceGroupMember]]:
    """Split a group's instances into up-to-date and stale members.

    An instance is ready when it was created from ``latest_template``; any
    other template, or none recorded at all, means it needs an update.
    Provider order is preserved within each partition.

    Returns
    -------
    tuple[list, list]
        ``(ready, need_update)``.
    """
    ready: list[CloudInstanceGroupMember] = []
    need_update: list[CloudInstanceGroupMember] = []

    for instance in instances:
        member = CloudInstanceGroupMember(id=instance.id, group_name=group_name)

        node = nodes_by_external_id.get(str(instance.numeric_id))
        if node is not None:
            member.node = node
        else:
            log.trace("Unable to find node for instance: {id}", id=instance.id)

        if instance.template is not None and instance.template == latest_template:
            ready.append(member)
        else:
            need_update.append(member)

    return ready, need_update
