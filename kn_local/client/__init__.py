"""
The client module holds the interface used by commands to manage serving
resources, and the backends implementing it.

- `ServingClient` is the interface. Commands only hold this type.
- `GitOpsServingClient` stores services as YAML files in a local directory.
- `update_service_with_retry` is the optimistic fetch, mutate and commit loop
  shared by all backends.
"""

from .client import (
    ServingClient,
    ListConfig,
    UpdateFunc,
    MessageCallback,
    UpdateStatus,
    UpdateResult,
    update_service_with_retry,
)
from .gitops import GitOpsServingClient
from .factory import new_serving_client

__all__ = [
    "ServingClient",
    "ListConfig",
    "UpdateFunc",
    "MessageCallback",
    "UpdateStatus",
    "UpdateResult",
    "update_service_with_retry",
    "GitOpsServingClient",
    "new_serving_client",
]
