"""Ordered teardown of managed groups.

A managed group is deleted before the instance template it references, so
a template is never removed while a group that might use it still exists.
A group deleted with its template left behind is only clutter; the
reverse would leave the group pointing at a missing template.

Deleting something that is already gone counts as success, so a failed
teardown can simply be retried.
"""

from __future__ import annotations

from loguru import logger

from cloudgroups.api import CloudInstanceGroup, CloudInstanceGroupMember
from cloudgroups.core.exceptions import (
    GroupDeletionError,
    InstanceDeletionError,
    ProviderError,
    ResourceNotFoundError,
    TemplateDeletionError,
)
from cloudgroups.observability.logging import group_context
from cloudgroups.providers.provider import ComputeProvider

log = logger.bind(component="deletion")


async def delete_group(provider: ComputeProvider, group: CloudInstanceGroup) -> None:
    """Delete a group's managed group, then its current instance template.

    Raises
    ------
    GroupDeletionError
        If the managed group could not be deleted. The template is untouched.
    TemplateDeletionError
        If the managed group is gone but the template could not be deleted.
        Retrying cleans up the template.
    """
    mig = group.managed_group
    template = mig.template
    bound = log.bind(**group_context(mig))

    try:
        await provider.delete_managed_group(mig.ref)
        bound.info("Deleted managed group {name}", name=mig.name)
    except ResourceNotFoundError:
        bound.info("Managed group not found, assuming deleted: {name}", name=mig.name)
    except ProviderError as e:
        raise GroupDeletionError(mig.name, reason=str(e)) from e

    try:
        await provider.delete_template(template)
        bound.info("Deleted instance template {name}", name=template.name)
    except ResourceNotFoundError:
        bound.info("Instance template not found, assuming deleted: {name}", name=template.name)
    except ProviderError as e:
        raise TemplateDeletionError(template.self_link, mig.name, reason=str(e)) from e


async def delete_member(provider: ComputeProvider, member: CloudInstanceGroupMember) -> None:
    """Delete a single instance of a managed group.

    The group recreates it from its current template, which is how a
    member needing an update gets replaced.
    """
    bound = log.bind(group=member.group_name, instance_id=member.id)
    try:
        await provider.delete_instance(member.id)
        bound.info("Deleted instance {id}", id=member.id)
    except ResourceNotFoundError:
        bound.info("Instance not found, assuming deleted: {id}", id=member.id)
    except ProviderError as e:
        raise InstanceDeletionError(member.id, reason=str(e)) from e
