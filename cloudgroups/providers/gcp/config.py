"""GCP provider configuration.

Immutable configuration dataclass for the GCP Compute Engine provider.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass

if typing.TYPE_CHECKING:
    from cloudgroups.providers.gcp.provider import GCPProvider


@dataclass(frozen=True, slots=True)
class GCP:
    """GCP Compute Engine provider configuration.

    The project is auto-detected from Application Default Credentials
    or the GOOGLE_CLOUD_PROJECT environment variable if not specified.

    Example:
        >>> from cloudgroups.providers.gcp import GCP
        >>> config = GCP(region="us-east1")

    Args:
        project: GCP project ID. Auto-detected from ADC or GOOGLE_CLOUD_PROJECT.
        region: Region whose zones the cluster spans. Default: us-central1.
        zones: Explicit zones. When set, zones are not listed from the API.
        page_size: Maximum managed groups requested per page. Default: 500.
        retry_attempts: Attempts for transient API errors. Default: 5.
        retry_max_wait: Upper bound in seconds between retries. Default: 30.
        thread_pool_size: Threads used for blocking API calls. Default: 8.
    """

    project: str | None = None
    region: str = "us-central1"
    zones: tuple[str, ...] = ()
    page_size: int = 500
    retry_attempts: int = 5
    retry_max_wait: float = 30.0
    thread_pool_size: int = 8

    async def create_provider(self) -> GCPProvider:
        from cloudgroups.providers.gcp.provider import GCPProvider
        return await GCPProvider.create(self)
