"""cloudgroups - reconcile a cluster's declared instance groups with live GCE managed groups.

Example:

    from cloudgroups import DeclaredInstanceGroup, GroupDiscoverer, delete_group
    from cloudgroups.providers.gcp import GCP

    provider = await GCP(region="us-east1").create_provider()
    groups = await GroupDiscoverer(provider).discover(
        "c1.example.com",
        [DeclaredInstanceGroup(name="nodes", zones=("us-east1-b",))],
        nodes,
        warn_unmatched=True,
    )
    for name, group in groups.items():
        print(name, len(group.ready), len(group.need_update))
"""

from loguru import logger

from cloudgroups.api import (
    CloudInstanceGroup,
    CloudInstanceGroupMember,
    ClusterNode,
    ConfigurationTemplate,
    DeclaredInstanceGroup,
    LiveInstance,
    ManagedGroup,
    ManagedGroupRef,
    OwnerFilter,
    Page,
    TemplateRef,
)
from cloudgroups.core.exceptions import (
    AmbiguousMatchError,
    CloudGroupsError,
    ConfigurationError,
    DeletionError,
    GroupDeletionError,
    InstanceDeletionError,
    ListingError,
    ProviderError,
    ResourceNotFoundError,
    TemplateDeletionError,
)
from cloudgroups.observability.logging import LogConfig, setup_logging, teardown_logging
from cloudgroups.providers.provider import ComputeProvider
from cloudgroups.reconcile import (
    GroupDiscoverer,
    classify_members,
    delete_group,
    delete_member,
    derive_name,
    get_cloud_groups,
    get_node_map,
    match_instance_group,
)

# Library behavior: silent until the embedding tool calls setup_logging.
logger.disable("cloudgroups")

__all__ = [
    "AmbiguousMatchError",
    "CloudGroupsError",
    "CloudInstanceGroup",
    "CloudInstanceGroupMember",
    "ClusterNode",
    "ComputeProvider",
    "ConfigurationError",
    "ConfigurationTemplate",
    "DeclaredInstanceGroup",
    "DeletionError",
    "GroupDeletionError",
    "GroupDiscoverer",
    "InstanceDeletionError",
    "ListingError",
    "LiveInstance",
    "LogConfig",
    "ManagedGroup",
    "ManagedGroupRef",
    "OwnerFilter",
    "Page",
    "ProviderError",
    "ResourceNotFoundError",
    "TemplateDeletionError",
    "TemplateRef",
    "classify_members",
    "delete_group",
    "delete_member",
    "derive_name",
    "get_cloud_groups",
    "get_node_map",
    "match_instance_group",
    "setup_logging",
    "teardown_logging",
]
