from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


def last_component(url: str) -> str:
    """Return the final path segment of a GCE resource URL (or the value itself)."""
    return url.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True, slots=True)
class DeclaredInstanceGroup:
    """The cluster spec's intent for one pool of machines."""
    name: str
    zones: tuple[str, ...] = ()
    template: str | None = None


@dataclass(frozen=True, slots=True)
class TemplateRef:
    self_link: str

    @property
    def name(self) -> str:
        return last_component(self.self_link)


@dataclass(frozen=True, slots=True)
class ManagedGroupRef:
    project: str
    zone: str
    name: str


@dataclass(frozen=True, slots=True)
class ManagedGroup:
    """Live snapshot of a managed instance group."""
    ref: ManagedGroupRef
    template: TemplateRef
    target_size: int
    self_link: str = ""

    @property
    def name(self) -> str:
        return self.ref.name

    @property
    def zone(self) -> str:
        return self.ref.zone


@dataclass(frozen=True, slots=True)
class ConfigurationTemplate:
    ref: TemplateRef
    metadata: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.ref.name


@dataclass(frozen=True, slots=True)
class LiveInstance:
    id: str
    numeric_id: int
    template: TemplateRef | None = None


@dataclass(frozen=True, slots=True)
class ClusterNode:
    name: str
    external_id: str


@dataclass(frozen=True, slots=True)
class Page[T]:
    items: tuple[T, ...]
    next_token: str | None = None


@dataclass(frozen=True, slots=True)
class OwnerFilter:
    """Recognizes templates belonging to a cluster by a metadata tag.

    Templates are stamped with ``cluster-name=<cluster>`` at creation. Values
    are compared with surrounding whitespace removed.
    """

    cluster_name: str
    metadata_key: str = "cluster-name"

    def matches(self, template: ConfigurationTemplate) -> bool:
        value = template.metadata.get(self.metadata_key)
        if value is None:
            return False
        return value.strip() == self.cluster_name.strip()


@dataclass(slots=True)
class CloudInstanceGroupMember:
    id: str
    group_name: str
    node: ClusterNode | None = None


@dataclass(slots=True)
class CloudInstanceGroup:
    """Reconciled view of one managed group and its members."""

    human_name: str
    instance_group: DeclaredInstanceGroup
    min_size: int
    max_size: int
    managed_group: ManagedGroup
    ready: list[CloudInstanceGroupMember] = field(default_factory=list)
    need_update: list[CloudInstanceGroupMember] = field(default_factory=list)

    @property
    def members(self) -> list[CloudInstanceGroupMember]:
        return [*self.ready, *self.need_update]

    @property
    def status(self) -> str:
        if self.need_update:
            return "NeedsUpdate"
        return "Ready"
