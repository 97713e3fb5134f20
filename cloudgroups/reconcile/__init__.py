from .deletion import delete_group, delete_member
from .discovery import CloudGroups, GroupDiscoverer, get_cloud_groups
from .matching import match_instance_group
from .members import classify_members, get_node_map
from .naming import derive_name, limited_length_name, safe_object_name, sanitize_name

__all__ = [
    "CloudGroups",
    "GroupDiscoverer",
    "classify_members",
    "delete_group",
    "delete_member",
    "derive_name",
    "get_cloud_groups",
    "get_node_map",
    "limited_length_name",
    "match_instance_group",
    "safe_object_name",
    "sanitize_name",
]
