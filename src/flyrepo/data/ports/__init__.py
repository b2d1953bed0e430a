"""flyrepo data ports."""

from flyrepo.data.ports.outbound import QueryBackendPort

__all__ = ["QueryBackendPort"]
