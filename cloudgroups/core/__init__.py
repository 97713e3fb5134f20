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

__all__ = [
    "AmbiguousMatchError",
    "CloudGroupsError",
    "ConfigurationError",
    "DeletionError",
    "GroupDeletionError",
    "InstanceDeletionError",
    "ListingError",
    "ProviderError",
    "ResourceNotFoundError",
    "TemplateDeletionError",
]
