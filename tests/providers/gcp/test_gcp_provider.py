from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from cloudgroups.api import ManagedGroupRef, OwnerFilter, TemplateRef
from cloudgroups.core.exceptions import ProviderError, ResourceNotFoundError
from cloudgroups.providers.gcp.config import GCP
from cloudgroups.providers.gcp.provider import GCPProvider, _resolve_project, resource_path

pytestmark = [pytest.mark.unit]

API = "https://www.googleapis.com/compute/v1/projects/proj"
TEMPLATE_URL = f"{API}/global/instanceTemplates/nodes-v2"


class _ApiError(Exception):
    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"HTTP {code}")


def _mig(name: str, zone: str = "us-east1-b", size: int = 2) -> SimpleNamespace:
    return SimpleNamespace(
        name=name,
        zone=f"{API}/zones/{zone}",
        instance_template=TEMPLATE_URL,
        target_size=size,
        self_link=f"{API}/zones/{zone}/instanceGroupManagers/{name}",
    )


def _page(items: list, token: str = "") -> SimpleNamespace:
    return SimpleNamespace(pages=iter([SimpleNamespace(items=items, next_page_token=token)]))


def _template(name: str, cluster: str | None) -> SimpleNamespace:
    items = [SimpleNamespace(key="cluster-name", value=cluster)] if cluster else []
    return SimpleNamespace(
        self_link=f"{API}/global/instanceTemplates/{name}",
        properties=SimpleNamespace(metadata=SimpleNamespace(items=items)),
    )


@pytest.fixture
def clients() -> SimpleNamespace:
    return SimpleNamespace(
        group_managers=MagicMock(),
        templates=MagicMock(),
        instances=MagicMock(),
        zones=MagicMock(),
    )


def _provider(clients: SimpleNamespace, **config: object) -> GCPProvider:
    return GCPProvider(
        config=GCP(project="proj", retry_max_wait=0.01, **config),  # type: ignore[arg-type]
        group_managers_client=clients.group_managers,
        templates_client=clients.templates,
        instances_client=clients.instances,
        zones_client=clients.zones,
        project="proj",
        thread_pool=ThreadPoolExecutor(max_workers=2),
    )


class TestListManagedGroups:
    @pytest.mark.asyncio
    async def test_follows_page_tokens(self, clients):
        clients.group_managers.list.side_effect = [
            _page([_mig("a"), _mig("b")], token="tok-1"),
            _page([_mig("c")]),
        ]
        provider = _provider(clients, page_size=2)

        pages = [page async for page in provider.list_managed_groups("us-east1-b")]

        assert [[g.name for g in p.items] for p in pages] == [["a", "b"], ["c"]]
        assert [p.next_token for p in pages] == ["tok-1", None]
        first, second = (c.kwargs["request"] for c in clients.group_managers.list.call_args_list)
        assert first.page_token == ""
        assert second.page_token == "tok-1"
        assert second.max_results == 2

    @pytest.mark.asyncio
    async def test_normalizes_zone_and_template(self, clients):
        clients.group_managers.list.return_value = _page([_mig("a", size=3)])
        provider = _provider(clients)

        [page] = [page async for page in provider.list_managed_groups("us-east1-b")]

        group = page.items[0]
        assert group.ref == ManagedGroupRef(project="proj", zone="us-east1-b", name="a")
        assert group.template == TemplateRef("projects/proj/global/instanceTemplates/nodes-v2")
        assert group.target_size == 3
        assert group.self_link == f"{API}/zones/us-east1-b/instanceGroupManagers/a"

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self, clients):
        clients.group_managers.list.side_effect = [_ApiError(503), _page([_mig("a")])]
        provider = _provider(clients)

        pages = [page async for page in provider.list_managed_groups("us-east1-b")]

        assert len(pages) == 1
        assert clients.group_managers.list.call_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_attempts(self, clients):
        clients.group_managers.list.side_effect = _ApiError(503)
        provider = _provider(clients, retry_attempts=2)

        with pytest.raises(ProviderError, match="us-east1-b"):
            async for _ in provider.list_managed_groups("us-east1-b"):
                pass
        assert clients.group_managers.list.call_count == 2

    @pytest.mark.asyncio
    async def test_does_not_retry_client_errors(self, clients):
        clients.group_managers.list.side_effect = _ApiError(403)
        provider = _provider(clients)

        with pytest.raises(ProviderError):
            async for _ in provider.list_managed_groups("us-east1-b"):
                pass
        assert clients.group_managers.list.call_count == 1


class TestListInstances:
    @pytest.mark.asyncio
    async def test_converts_managed_instances(self, clients):
        clients.group_managers.list_managed_instances.return_value = [
            SimpleNamespace(
                instance=f"{API}/zones/us-east1-b/instances/i-1",
                id=101,
                version=SimpleNamespace(instance_template=TEMPLATE_URL),
            ),
            SimpleNamespace(
                instance=f"{API}/zones/us-east1-b/instances/i-2",
                id=102,
                version=None,
            ),
        ]
        provider = _provider(clients)
        clients.group_managers.list.return_value = _page([_mig("a")])
        [page] = [page async for page in provider.list_managed_groups("us-east1-b")]

        first, second = await provider.list_instances(page.items[0])

        assert first.numeric_id == 101
        assert first.template == page.items[0].template
        assert second.template is None
        request = clients.group_managers.list_managed_instances.call_args.kwargs["request"]
        assert request.instance_group_manager == "a"
        assert request.zone == "us-east1-b"


class TestListTemplates:
    @pytest.mark.asyncio
    async def test_filters_by_owner(self, clients):
        clients.templates.list.return_value = [
            _template("mine", " c1 "),
            _template("theirs", "c2"),
            _template("untagged", None),
        ]
        provider = _provider(clients)

        owned = await provider.list_templates(OwnerFilter("c1"))

        assert [t.name for t in owned] == ["mine"]
        assert owned[0].ref.self_link == "projects/proj/global/instanceTemplates/mine"


class TestListZones:
    @pytest.mark.asyncio
    async def test_explicit_zones_skip_api(self, clients):
        provider = _provider(clients, zones=("us-east1-c", "us-east1-b"))
        assert await provider.list_zones() == ["us-east1-c", "us-east1-b"]
        clients.zones.list.assert_not_called()

    @pytest.mark.asyncio
    async def test_filters_by_region(self, clients):
        clients.zones.list.return_value = [
            SimpleNamespace(name="us-east1-c", region=f"{API}/regions/us-east1"),
            SimpleNamespace(name="europe-west1-b", region=f"{API}/regions/europe-west1"),
            SimpleNamespace(name="us-east1-b", region=f"{API}/regions/us-east1"),
        ]
        provider = _provider(clients, region="us-east1")
        assert await provider.list_zones() == ["us-east1-b", "us-east1-c"]


class TestDeletes:
    @pytest.mark.asyncio
    async def test_delete_group_waits_for_operation(self, clients):
        operation = MagicMock()
        clients.group_managers.delete.return_value = operation
        provider = _provider(clients)

        await provider.delete_managed_group(ManagedGroupRef("proj", "us-east1-b", "a"))

        operation.result.assert_called_once()
        request = clients.group_managers.delete.call_args.kwargs["request"]
        assert (request.project, request.zone, request.instance_group_manager) == (
            "proj", "us-east1-b", "a",
        )

    @pytest.mark.asyncio
    async def test_delete_template_not_found(self, clients):
        clients.templates.delete.side_effect = _ApiError(404)
        provider = _provider(clients)

        with pytest.raises(ResourceNotFoundError):
            await provider.delete_template(TemplateRef(TEMPLATE_URL))

    @pytest.mark.asyncio
    async def test_delete_template_uses_name(self, clients):
        provider = _provider(clients)
        await provider.delete_template(TemplateRef(TEMPLATE_URL))
        request = clients.templates.delete.call_args.kwargs["request"]
        assert request.instance_template == "nodes-v2"
        assert request.project == "proj"

    @pytest.mark.asyncio
    async def test_delete_instance_parses_self_link(self, clients):
        provider = _provider(clients)
        await provider.delete_instance(f"{API}/zones/us-east1-b/instances/i-1")
        request = clients.instances.delete.call_args.kwargs["request"]
        assert (request.zone, request.instance) == ("us-east1-b", "i-1")

    @pytest.mark.asyncio
    async def test_delete_instance_rejects_bad_reference(self, clients):
        provider = _provider(clients)
        with pytest.raises(ProviderError, match="Cannot parse"):
            await provider.delete_instance("i-1")


class TestHelpers:
    def test_resource_path(self):
        assert resource_path(TEMPLATE_URL) == "projects/proj/global/instanceTemplates/nodes-v2"
        assert resource_path("nodes-v2") == "nodes-v2"

    def test_explicit_project_wins(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "from-env")
        assert _resolve_project("explicit") == "explicit"

    def test_env_project(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "from-env")
        assert _resolve_project(None) == "from-env"

    def test_gcloud_env_fallback(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
        monkeypatch.setenv("GCLOUD_PROJECT", "legacy")
        assert _resolve_project(None) == "legacy"
