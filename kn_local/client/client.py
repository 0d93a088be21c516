"""Client interface for serving resources.

The command line actions only ever hold a `ServingClient`. Whether requests
are answered by a cluster or by a local directory is decided when the client
is constructed.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
import copy
from dataclasses import dataclass
from enum import StrEnum
import logging
from typing import Any

from kn_local.exceptions import ConflictError, KnException, NotFoundError
from kn_local.resource import (
    BaseResource,
    Configuration,
    Revision,
    RevisionList,
    Route,
    RouteList,
    Service,
    ServiceList,
)

__all__ = [
    "ServingClient",
    "ListConfig",
    "UpdateFunc",
    "MessageCallback",
    "UpdateStatus",
    "UpdateResult",
    "update_service_with_retry",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_UPDATE_ATTEMPTS = 3

UpdateFunc = Callable[[Service], Service]
"""Produce the new version of a service from a copy of the current one."""

MessageCallback = Callable[[float, str], None]
"""Receives the elapsed seconds and a progress message while waiting."""


@dataclass
class ListConfig:
    """Optional filters for list calls."""

    name: str | None = None
    """Only include the object with this name."""

    label_selector: dict[str, str] | None = None
    """Only include objects with all of these labels."""

    def matches(self, obj: BaseResource) -> bool:
        """Return true if the object passes the filters."""
        if self.name is not None and obj.name != self.name:
            return False
        if self.label_selector:
            labels = obj.labels
            for key, value in self.label_selector.items():
                if labels.get(key) != value:
                    return False
        return True


class UpdateStatus(StrEnum):
    """Outcome of an update with retries."""

    SUCCEEDED = "Succeeded"
    ABORTED = "Aborted"
    EXHAUSTED = "Exhausted"


@dataclass
class UpdateResult:
    """Result of `update_service_with_retry`.

    An aborted or exhausted result carries the underlying error that ended the
    update, never a synthesized one.
    """

    status: UpdateStatus
    attempts: int
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status == UpdateStatus.SUCCEEDED

    @property
    def not_found(self) -> bool:
        return isinstance(self.error, NotFoundError)

    def raise_for_error(self) -> None:
        """Raise the carried error if the update did not succeed."""
        if self.error is not None:
            raise self.error


class ServingClient(ABC):
    """Operations on serving resources within a single namespace."""

    @property
    @abstractmethod
    def namespace(self) -> str:
        """Return the namespace this client operates on."""

    @abstractmethod
    def get_service(self, name: str) -> Service:
        """Return the service with the name or raise `NotFoundError`."""

    @abstractmethod
    def watch_service(self, name: str, timeout: float) -> Iterator[Any]:
        """Return a stream of change events for a service."""

    @abstractmethod
    def watch_revision(self, name: str, timeout: float) -> Iterator[Any]:
        """Return a stream of change events for a revision."""

    @abstractmethod
    def list_services(self, *config: ListConfig) -> ServiceList:
        """List the services in the namespace, or all namespaces if empty."""

    @abstractmethod
    def create_service(self, service: Service) -> None:
        """Create a new service."""

    @abstractmethod
    def update_service(self, service: Service) -> None:
        """Replace an existing service."""

    @abstractmethod
    def update_service_with_retry(
        self, name: str, update_func: UpdateFunc, max_attempts: int
    ) -> UpdateResult:
        """Update a service by applying a function to its current version.

        See `update_service_with_retry` for the protocol.
        """

    @abstractmethod
    def apply_service(self, service: Service) -> bool:
        """Create or merge the service, returning true if anything changed."""

    @abstractmethod
    def delete_service(self, name: str, timeout: float) -> None:
        """Delete a service, waiting up to timeout seconds when non-zero."""

    @abstractmethod
    def wait_for_service(
        self, name: str, timeout: float, msg_callback: MessageCallback | None = None
    ) -> float:
        """Wait for the service to become ready and return the elapsed seconds."""

    @abstractmethod
    def get_configuration(self, name: str) -> Configuration:
        """Return the configuration with the name."""

    @abstractmethod
    def get_revision(self, name: str) -> Revision:
        """Return the revision with the name."""

    @abstractmethod
    def get_base_revision(self, service: Service) -> Revision:
        """Return the revision the service template was derived from."""

    @abstractmethod
    def create_revision(self, revision: Revision) -> None:
        """Create a revision."""

    @abstractmethod
    def update_revision(self, revision: Revision) -> None:
        """Replace an existing revision."""

    @abstractmethod
    def delete_revision(self, name: str, timeout: float) -> None:
        """Delete a revision, waiting up to timeout seconds when non-zero."""

    @abstractmethod
    def list_revisions(self, *config: ListConfig) -> RevisionList:
        """List the revisions in the namespace."""

    @abstractmethod
    def get_route(self, name: str) -> Route:
        """Return the route with the name."""

    @abstractmethod
    def list_routes(self, *config: ListConfig) -> RouteList:
        """List the routes in the namespace."""


def _is_retryable(err: Exception) -> bool:
    return isinstance(err, (ConflictError, OSError))


def update_service_with_retry(
    client: ServingClient, name: str, update_func: UpdateFunc, max_attempts: int
) -> UpdateResult:
    """Fetch, mutate and commit a service, retrying on conflicts.

    Every attempt re-reads the current service, passes a copy to the update
    function and writes the result. Conflicts and I/O errors start another
    attempt until `max_attempts` attempts were made. Any other error, including
    `NotFoundError`, ends the update immediately. There is no locking: another
    writer may still change the service between the read and the write of an
    attempt.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            service = client.get_service(name)
            if service.deletion_timestamp:
                raise KnException(
                    f"can't update service {name} because it has been marked for deletion"
                )
            updated = update_func(copy.deepcopy(service))
            client.update_service(updated)
        except (KnException, OSError) as err:
            if not _is_retryable(err):
                _LOGGER.debug("Update of service %s aborted: %s", name, err)
                return UpdateResult(UpdateStatus.ABORTED, attempt, err)
            _LOGGER.debug(
                "Update of service %s failed (attempt %d/%d): %s",
                name,
                attempt,
                max_attempts,
                err,
            )
            last_error = err
            continue
        _LOGGER.debug("Updated service %s after %d attempt(s)", name, attempt)
        return UpdateResult(UpdateStatus.SUCCEEDED, attempt)
    return UpdateResult(UpdateStatus.EXHAUSTED, max_attempts, last_error)
