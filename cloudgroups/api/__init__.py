from cloudgroups.api.model import (
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
    last_component,
)

__all__ = [
    "CloudInstanceGroup",
    "CloudInstanceGroupMember",
    "ClusterNode",
    "ConfigurationTemplate",
    "DeclaredInstanceGroup",
    "LiveInstance",
    "ManagedGroup",
    "ManagedGroupRef",
    "OwnerFilter",
    "Page",
    "TemplateRef",
    "last_component",
]
