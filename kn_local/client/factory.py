"""Construction of serving clients."""

import logging
from pathlib import Path

from kn_local.exceptions import KnException

from .client import ServingClient
from .gitops import GitOpsServingClient

__all__ = [
    "new_serving_client",
]

_LOGGER = logging.getLogger(__name__)


def new_serving_client(namespace: str, target: Path | None) -> ServingClient:
    """Return the client for the request.

    A target directory selects the gitops client. Cluster access is provided by
    a separate backend that is not configured in this tool.
    """
    if target is None:
        raise KnException(
            "No cluster backend is configured, use --target to manage a local directory"
        )
    _LOGGER.debug("Using gitops client for %s (namespace %r)", target, namespace)
    return GitOpsServingClient(namespace, target)
