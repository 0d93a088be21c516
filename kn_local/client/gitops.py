"""Serving client that manages resources in a local directory.

The gitops client stores each service as a YAML file so that a directory
checked into git can be managed with the same commands used against a
cluster. It differs from a cluster in a few deliberate ways:

  - `create_service` replaces an existing file with the same name.
  - `update_service` replaces the whole file, nothing is merged.
  - `delete_service` of a missing service raises the `FileNotFoundError` from
    the filesystem rather than a `NotFoundError`.
  - Only services are stored. Every other kind, `apply_service` and watches
    raise `UnsupportedOperationError`.

There is no cache, every call reads or writes the files.
"""

from collections.abc import Iterator
import logging
from pathlib import Path
from typing import Any

from kn_local import layout
from kn_local.codec import decode_file, write_file
from kn_local.exceptions import (
    InputException,
    NotFoundError,
    UnsupportedOperationError,
)
from kn_local.resource import (
    SERVICE_KIND,
    Configuration,
    Revision,
    RevisionList,
    Route,
    RouteList,
    Service,
    ServiceList,
)
from kn_local.scanner import scan

from .client import (
    ListConfig,
    MessageCallback,
    ServingClient,
    UpdateFunc,
    UpdateResult,
    update_service_with_retry,
)

__all__ = [
    "GitOpsServingClient",
]

_LOGGER = logging.getLogger(__name__)

NOMINAL_WAIT_SECONDS = 1.0


class GitOpsServingClient(ServingClient):
    """Serving client backed by YAML files below a root directory."""

    def __init__(self, namespace: str, root: Path) -> None:
        """Initialize GitOpsServingClient."""
        self._namespace = namespace
        self._root = Path(root)

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def root(self) -> Path:
        """Directory holding all stored resources."""
        return self._root

    def _service_path(self, name: str) -> Path:
        return layout.resource_path(self._root, self._namespace, SERVICE_KIND, name)

    def get_service(self, name: str) -> Service:
        path = self._service_path(name)
        try:
            return decode_file(path, Service)
        except FileNotFoundError as err:
            raise NotFoundError(SERVICE_KIND, name) from err

    def watch_service(self, name: str, timeout: float) -> Iterator[Any]:
        raise UnsupportedOperationError("watch_service")

    def watch_revision(self, name: str, timeout: float) -> Iterator[Any]:
        raise UnsupportedOperationError("watch_revision")

    def list_services(self, *config: ListConfig) -> ServiceList:
        """List the services below the namespace directory.

        With an empty namespace the whole root is scanned. The order of the
        items follows the directory traversal.
        """
        root = layout.scan_root(self._root, self._namespace)
        protected_depth = 1 if self._namespace else 2
        services = list(scan(root, SERVICE_KIND, Service, protected_depth))
        for list_config in config:
            _LOGGER.debug("Filtering services with %s", list_config)
            services = [svc for svc in services if list_config.matches(svc)]
        return ServiceList(items=services)

    def create_service(self, service: Service) -> None:
        if not (name := service.name):
            raise InputException("Service is missing metadata.name")
        layout.kind_dir(self._root, self._namespace, SERVICE_KIND).mkdir(
            parents=True, exist_ok=True
        )
        path = self._service_path(name)
        if path.exists():
            _LOGGER.debug("Replacing existing service file %s", path)
        write_file(path, service)

    def update_service(self, service: Service) -> None:
        self.get_service(service.name)
        self.create_service(service)

    def update_service_with_retry(
        self, name: str, update_func: UpdateFunc, max_attempts: int
    ) -> UpdateResult:
        return update_service_with_retry(self, name, update_func, max_attempts)

    def apply_service(self, service: Service) -> bool:
        raise UnsupportedOperationError("apply_service")

    def delete_service(self, name: str, timeout: float) -> None:
        path = self._service_path(name)
        _LOGGER.debug("Removing service file %s", path)
        path.unlink()

    def wait_for_service(
        self, name: str, timeout: float, msg_callback: MessageCallback | None = None
    ) -> float:
        """Return immediately, files have nothing to reconcile."""
        return NOMINAL_WAIT_SECONDS

    def get_configuration(self, name: str) -> Configuration:
        raise UnsupportedOperationError("get_configuration")

    def get_revision(self, name: str) -> Revision:
        raise UnsupportedOperationError("get_revision")

    def get_base_revision(self, service: Service) -> Revision:
        raise UnsupportedOperationError("get_base_revision")

    def create_revision(self, revision: Revision) -> None:
        raise UnsupportedOperationError("create_revision")

    def update_revision(self, revision: Revision) -> None:
        raise UnsupportedOperationError("update_revision")

    def delete_revision(self, name: str, timeout: float) -> None:
        raise UnsupportedOperationError("delete_revision")

    def list_revisions(self, *config: ListConfig) -> RevisionList:
        raise UnsupportedOperationError("list_revisions")

    def get_route(self, name: str) -> Route:
        raise UnsupportedOperationError("get_route")

    def list_routes(self, *config: ListConfig) -> RouteList:
        raise UnsupportedOperationError("list_routes")
