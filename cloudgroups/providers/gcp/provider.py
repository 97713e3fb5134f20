"""GCP Compute Engine provider for cloudgroups.

Implements the ComputeProvider protocol using sync GCP clients dispatched
to a dedicated thread pool. Transient API errors are retried with
tenacity; 404s become ResourceNotFoundError and everything else becomes
ProviderError.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator, Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Final

from loguru import logger
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from cloudgroups.api import (
    ConfigurationTemplate,
    LiveInstance,
    ManagedGroup,
    ManagedGroupRef,
    OwnerFilter,
    Page,
    TemplateRef,
    last_component,
)
from cloudgroups.core.exceptions import ProviderError, ResourceNotFoundError
from cloudgroups.providers.provider import ComputeProvider

from .config import GCP

log = logger.bind(provider="gcp")

_TRANSIENT_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


class GCPProvider(ComputeProvider):
    """Stateless GCP provider. Holds only immutable config + sync clients."""

    def __init__(
        self,
        config: GCP,
        group_managers_client: object,
        templates_client: object,
        instances_client: object,
        zones_client: object,
        project: str,
        thread_pool: ThreadPoolExecutor,
    ) -> None:
        self._config = config
        self._group_managers = group_managers_client
        self._templates = templates_client
        self._instances = instances_client
        self._zones = zones_client
        self._project = project
        self._pool = thread_pool

    async def _run[T](self, fn: Callable[..., T], *args: object, **kwargs: object) -> T:
        loop = asyncio.get_running_loop()
        if kwargs:
            return await loop.run_in_executor(
                self._pool, lambda: fn(*args, **kwargs),
            )
        return await loop.run_in_executor(self._pool, fn, *args)

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._config.retry_attempts),
            wait=wait_exponential(multiplier=0.5, max=self._config.retry_max_wait),
            retry=retry_if_exception(_is_transient),
            before_sleep=_log_retry,
            reraise=True,
        )

    async def _api[T](self, resource: str, fn: Callable[..., T], *args: object, **kwargs: object) -> T:
        """Run a blocking API call off-loop, retrying transient failures."""
        try:
            return await self._run(self._retrying(), fn, *args, **kwargs)
        except Exception as e:
            if _status_code(e) == 404:
                raise ResourceNotFoundError(resource) from e
            raise ProviderError(f"{resource}: {e}") from e

    @classmethod
    async def create(cls, config: GCP) -> GCPProvider:
        from google.cloud import compute_v1  # type: ignore[reportMissingImports]

        project = _resolve_project(config.project)
        log.info("Resolved GCP project: {project}", project=project)

        thread_pool = ThreadPoolExecutor(
            max_workers=config.thread_pool_size,
            thread_name_prefix="gcp-io",
        )

        return cls(
            config=config,
            group_managers_client=compute_v1.InstanceGroupManagersClient(),
            templates_client=compute_v1.InstanceTemplatesClient(),
            instances_client=compute_v1.InstancesClient(),
            zones_client=compute_v1.ZonesClient(),
            project=project,
            thread_pool=thread_pool,
        )

    def close(self) -> None:
        self._pool.shutdown(wait=False)

    async def list_zones(self) -> Sequence[str]:
        from google.cloud import compute_v1  # type: ignore[reportMissingImports]

        if self._config.zones:
            return list(self._config.zones)

        all_zones = await self._api(
            "zones",
            _collect_pager,
            self._zones.list,  # type: ignore[union-attr]
            request=compute_v1.ListZonesRequest(project=self._project),
        )
        region = self._config.region
        return sorted(z.name for z in all_zones if last_component(z.region) == region)

    async def list_managed_groups(self, zone: str) -> AsyncIterator[Page[ManagedGroup]]:
        from google.cloud import compute_v1  # type: ignore[reportMissingImports]

        token: str | None = None
        while True:
            request = compute_v1.ListInstanceGroupManagersRequest(
                project=self._project,
                zone=zone,
                max_results=self._config.page_size,
            )
            if token:
                request.page_token = token

            response = await self._api(
                f"instanceGroupManagers in {zone}",
                _fetch_page,
                self._group_managers.list,  # type: ignore[union-attr]
                request,
            )
            token = response.next_page_token or None
            yield Page(
                items=tuple(_to_managed_group(self._project, zone, m) for m in response.items),
                next_token=token,
            )
            if token is None:
                return

    async def list_instances(self, group: ManagedGroup) -> Sequence[LiveInstance]:
        from google.cloud import compute_v1  # type: ignore[reportMissingImports]

        managed = await self._api(
            f"instances of {group.name}",
            _collect_pager,
            self._group_managers.list_managed_instances,  # type: ignore[union-attr]
            request=compute_v1.ListManagedInstancesInstanceGroupManagersRequest(
                project=group.ref.project,
                zone=group.zone,
                instance_group_manager=group.name,
            ),
        )
        return [_to_live_instance(i) for i in managed]

    async def list_templates(self, owner: OwnerFilter) -> Sequence[ConfigurationTemplate]:
        from google.cloud import compute_v1  # type: ignore[reportMissingImports]

        all_templates = await self._api(
            "instanceTemplates",
            _collect_pager,
            self._templates.list,  # type: ignore[union-attr]
            request=compute_v1.ListInstanceTemplatesRequest(project=self._project),
        )
        templates = [_to_template(t) for t in all_templates]
        owned = [t for t in templates if owner.matches(t)]
        log.debug(
            "Found {owned}/{total} instance templates owned by {cluster}",
            owned=len(owned), total=len(templates), cluster=owner.cluster_name,
        )
        return owned

    async def delete_managed_group(self, ref: ManagedGroupRef) -> None:
        from google.cloud import compute_v1  # type: ignore[reportMissingImports]

        log.info("Deleting instance group manager {name}", name=ref.name)
        await self._api(
            f"instanceGroupManager {ref.zone}/{ref.name}",
            _wait,
            self._group_managers.delete,  # type: ignore[union-attr]
            request=compute_v1.DeleteInstanceGroupManagerRequest(
                project=ref.project,
                zone=ref.zone,
                instance_group_manager=ref.name,
            ),
        )

    async def delete_template(self, ref: TemplateRef) -> None:
        from google.cloud import compute_v1  # type: ignore[reportMissingImports]

        log.info("Deleting instance template {name}", name=ref.name)
        await self._api(
            f"instanceTemplate {ref.name}",
            _wait,
            self._templates.delete,  # type: ignore[union-attr]
            request=compute_v1.DeleteInstanceTemplateRequest(
                project=_segment_after(ref.self_link, "projects") or self._project,
                instance_template=ref.name,
            ),
        )

    async def delete_instance(self, instance_id: str) -> None:
        from google.cloud import compute_v1  # type: ignore[reportMissingImports]

        zone = _segment_after(instance_id, "zones")
        name = _segment_after(instance_id, "instances")
        if not zone or not name:
            raise ProviderError(f"Cannot parse instance reference: {instance_id}")

        log.info("Deleting instance {name}", name=name)
        await self._api(
            f"instance {zone}/{name}",
            _wait,
            self._instances.delete,  # type: ignore[union-attr]
            request=compute_v1.DeleteInstanceRequest(
                project=_segment_after(instance_id, "projects") or self._project,
                zone=zone,
                instance=name,
            ),
        )


# =============================================================================
# Pure helper functions (no GCP API calls)
# =============================================================================


def _status_code(error: BaseException) -> int | None:
    """HTTP status carried by a google.api_core exception, if any."""
    code = getattr(error, "code", None)
    return code if isinstance(code, int) else None


def _is_transient(error: BaseException) -> bool:
    return _status_code(error) in _TRANSIENT_CODES


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    log.warning(
        "Retry {attempt} after {kind}: {err}",
        attempt=state.attempt_number, kind=type(error).__name__, err=error,
    )


def _resolve_project(explicit: str | None) -> str:
    """Resolve GCP project: explicit > env > ADC."""
    if explicit:
        return explicit

    if env_project := os.environ.get("GOOGLE_CLOUD_PROJECT"):
        return env_project

    if env_project := os.environ.get("GCLOUD_PROJECT"):
        return env_project

    try:
        import google.auth  # type: ignore[reportMissingImports]

        _, project = google.auth.default()
        if project:
            return project
    except Exception as e:
        log.debug("Application Default Credentials unavailable: {err}", err=e)

    raise ProviderError(
        "No GCP project found. Set GOOGLE_CLOUD_PROJECT env var, "
        "pass project= to GCP(), or configure Application Default Credentials."
    )


def _collect_pager(list_fn: Callable[..., Any], **kwargs: object) -> list[Any]:
    """Call a list method and collect every item across all pages."""
    return list(list_fn(**kwargs))


def _fetch_page(list_fn: Callable[..., Any], request: object) -> Any:
    """Call a list method and return only its first raw page response."""
    return next(iter(list_fn(request=request).pages))


def _wait(call_fn: Callable[..., Any], **kwargs: object) -> None:
    """Start an operation and block until it completes."""
    operation = call_fn(**kwargs)
    result = getattr(operation, "result", None)
    if callable(result):
        result()


def resource_path(link: str) -> str:
    """Normalize a resource URL to its ``projects/...`` path."""
    idx = link.find("projects/")
    return link[idx:] if idx >= 0 else link


def _segment_after(link: str, collection: str) -> str | None:
    parts = resource_path(link).split("/")
    try:
        return parts[parts.index(collection) + 1] or None
    except (ValueError, IndexError):
        return None


def _to_managed_group(project: str, zone: str, mig: Any) -> ManagedGroup:
    return ManagedGroup(
        ref=ManagedGroupRef(
            project=project,
            zone=last_component(mig.zone) if mig.zone else zone,
            name=mig.name,
        ),
        template=TemplateRef(resource_path(mig.instance_template)),
        target_size=int(mig.target_size),
        self_link=mig.self_link,
    )


def _to_live_instance(managed: Any) -> LiveInstance:
    template = managed.version.instance_template if managed.version else ""
    return LiveInstance(
        id=managed.instance,
        numeric_id=int(managed.id),
        template=TemplateRef(resource_path(template)) if template else None,
    )


def _to_template(template: Any) -> ConfigurationTemplate:
    metadata = template.properties.metadata if template.properties else None
    items = metadata.items if metadata else []
    return ConfigurationTemplate(
        ref=TemplateRef(resource_path(template.self_link)),
        metadata={item.key: item.value for item in items},
    )
