"""Cloud provider capabilities used by the reconciler.

NOTE: Only the protocol is imported at package level to avoid deps.
For the GCP implementation, import explicitly:

    from cloudgroups.providers.gcp.provider import GCPProvider
"""

from .provider import ComputeProvider

__all__ = ["ComputeProvider"]
