from collections.abc import AsyncIterator, Sequence
from typing import Protocol, runtime_checkable

from cloudgroups.api import (
    ConfigurationTemplate,
    LiveInstance,
    ManagedGroup,
    ManagedGroupRef,
    OwnerFilter,
    Page,
    TemplateRef,
)


@runtime_checkable
class ComputeProvider(Protocol):
    """Capability the reconciler needs from a cloud provider.

    Implementations are stateless apart from immutable config and API
    clients. Every method is a fallible remote call: a missing resource
    raises ResourceNotFoundError, anything else raises ProviderError.
    Retrying transient failures is the implementation's concern.
    """

    async def list_zones(self) -> Sequence[str]:
        """Zones the cluster spans."""
        ...

    def list_managed_groups(self, zone: str) -> AsyncIterator[Page[ManagedGroup]]:
        """Managed groups in a zone, one provider page at a time.

        Parameters
        ----------
        zone
            Zone name (e.g. "us-east1-b").

        Returns
        -------
        AsyncIterator[Page[ManagedGroup]]
            Pages in provider order. Iteration ends after the page
            whose ``next_token`` is None.
        """
        ...

    async def list_instances(self, group: ManagedGroup) -> Sequence[LiveInstance]:
        """Instances currently managed by a group, in provider order."""
        ...

    async def list_templates(self, owner: OwnerFilter) -> Sequence[ConfigurationTemplate]:
        """Instance templates accepted by ``owner``.

        Parameters
        ----------
        owner
            Ownership predicate; only templates it matches are returned.
        """
        ...

    async def delete_managed_group(self, ref: ManagedGroupRef) -> None:
        """Delete a managed group and wait for the operation to finish."""
        ...

    async def delete_template(self, ref: TemplateRef) -> None:
        """Delete an instance template and wait for the operation to finish."""
        ...

    async def delete_instance(self, instance_id: str) -> None:
        """Delete a single instance, identified by its self-link."""
        ...
