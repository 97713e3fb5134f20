"""Custom exception hierarchy for cloudgroups.

All cloudgroups-specific exceptions inherit from CloudGroupsError, enabling
callers to catch every reconciliation failure with a single except clause.

Unmatched managed groups and templates owned by another cluster are not
errors and never surface here.
"""

from __future__ import annotations

from collections.abc import Sequence


class CloudGroupsError(Exception):
    """Base exception for all cloudgroups errors."""


class ConfigurationError(CloudGroupsError):
    """Raised for invalid configuration or missing required settings."""


class ProviderError(CloudGroupsError):
    """Raised when a call to the cloud provider fails."""


class ResourceNotFoundError(ProviderError):
    """Raised when the provider reports the resource does not exist."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(f"Resource not found: {resource}")


class ListingError(CloudGroupsError):
    """Raised when enumerating provider resources fails during discovery."""

    def __init__(self, resource: str, zone: str | None = None, reason: str = "") -> None:
        self.resource = resource
        self.zone = zone
        where = f" in zone {zone}" if zone else ""
        suffix = f": {reason}" if reason else ""
        super().__init__(f"Error listing {resource}{where}{suffix}")


class AmbiguousMatchError(CloudGroupsError):
    """Raised when a managed group matches more than one declared instance group."""

    def __init__(self, group_name: str, candidates: Sequence[str]) -> None:
        self.group_name = group_name
        self.candidates = tuple(candidates)
        super().__init__(
            f"Found multiple instance groups matching managed group {group_name!r}: "
            f"{', '.join(self.candidates)}"
        )


class DeletionError(CloudGroupsError):
    """Raised when tearing down a managed group fails."""


class GroupDeletionError(DeletionError):
    """Raised when the managed group itself could not be deleted.

    The template is left untouched.
    """

    def __init__(self, group_name: str, reason: str = "unknown") -> None:
        self.group_name = group_name
        self.reason = reason
        super().__init__(f"Error deleting managed group {group_name}: {reason}")


class TemplateDeletionError(DeletionError):
    """Raised when the group is gone but its template could not be deleted."""

    def __init__(self, template: str, group_name: str, reason: str = "unknown") -> None:
        self.template = template
        self.group_name = group_name
        self.reason = reason
        super().__init__(
            f"Deleted managed group {group_name} but failed to delete "
            f"instance template {template}: {reason}"
        )


class InstanceDeletionError(DeletionError):
    """Raised when a single group member could not be deleted."""

    def __init__(self, instance_id: str, reason: str = "unknown") -> None:
        self.instance_id = instance_id
        self.reason = reason
        super().__init__(f"Error deleting instance {instance_id}: {reason}")
