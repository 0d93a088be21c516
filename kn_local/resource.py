"""Representation of Knative Serving resources.

Resources are kept close to their serialized form: `metadata`, `spec` and
`status` are plain mappings so that any field written by another tool survives
a read and write through this library. Only the type identity (`apiVersion`
and `kind`) is owned by the library and is re-stamped on every read and write.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, ClassVar, TypeVar

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .exceptions import InputException

__all__ = [
    "NamedResource",
    "BaseResource",
    "Service",
    "Revision",
    "Route",
    "Configuration",
    "ServiceList",
    "RevisionList",
    "RouteList",
    "new_service",
]

_LOGGER = logging.getLogger(__name__)

SERVING_API_VERSION = "serving.knative.dev/v1"
SERVICE_KIND = "Service"
REVISION_KIND = "Revision"
ROUTE_KIND = "Route"
CONFIGURATION_KIND = "Configuration"
LIST_API_VERSION = "v1"
LIST_KIND = "List"
DEFAULT_NAMESPACE = "default"

_R = TypeVar("_R", bound="BaseResource")


def _check_mapping(doc: dict[str, Any], key: str, value: Any) -> None:
    if value is not None and not isinstance(value, dict):
        raise InputException(f"Invalid object, expected mapping for '{key}': {doc}")


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a serving resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass
class BaseResource(DataClassDictMixin):
    """Base class for all serving resource objects."""

    KIND: ClassVar[str] = ""
    """The canonical kind stamped on objects of this type."""

    API_VERSION: ClassVar[str] = SERVING_API_VERSION
    """The canonical apiVersion stamped on objects of this type."""

    api_version: str = field(metadata=field_options(alias="apiVersion"), default="")
    """The apiVersion of the object."""

    kind: str = ""
    """The kind of the object."""

    metadata: dict[str, Any] = field(default_factory=dict)
    """Object metadata, preserved as written."""

    spec: dict[str, Any] = field(default_factory=dict)
    """The desired state of the object, preserved as written."""

    status: dict[str, Any] | None = None
    """The observed state of the object, if any was recorded."""

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True

    @classmethod
    def parse_doc(cls: type[_R], doc: Any) -> _R:
        """Parse a resource from a raw kubernetes object."""
        if not isinstance(doc, dict):
            raise InputException(
                f"Invalid {cls.KIND} object, expected a mapping: {doc!r}"
            )
        metadata = doc.get("metadata")
        spec = doc.get("spec")
        status = doc.get("status")
        _check_mapping(doc, "metadata", metadata)
        _check_mapping(doc, "spec", spec)
        _check_mapping(doc, "status", status)
        return cls(
            api_version=doc.get("apiVersion", ""),
            kind=doc.get("kind", ""),
            metadata=metadata or {},
            spec=spec or {},
            status=status,
        )

    @property
    def resource_id(self) -> NamedResource:
        """Return the identifier of this object."""
        return NamedResource(self.KIND, self.namespace, self.name)

    @property
    def name(self) -> str:
        return str(self.metadata.get("name", ""))

    @property
    def namespace(self) -> str | None:
        return self.metadata.get("namespace")

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.get("labels") or {}

    @property
    def annotations(self) -> dict[str, str]:
        return self.metadata.get("annotations") or {}

    @property
    def deletion_timestamp(self) -> str | None:
        return self.metadata.get("deletionTimestamp")

    def stamp_identity(self) -> None:
        """Force the type identity fields to the canonical values for this type."""
        self.api_version = self.API_VERSION
        self.kind = self.KIND


@dataclass
class Service(BaseResource):
    """A Knative Service."""

    KIND: ClassVar[str] = SERVICE_KIND

    @property
    def containers(self) -> list[dict[str, Any]]:
        """Containers of the revision template."""
        template_spec = self.spec.get("template", {}).get("spec", {})
        return template_spec.get("containers") or []

    def _container(self) -> dict[str, Any]:
        template = self.spec.setdefault("template", {})
        template_spec = template.setdefault("spec", {})
        containers = template_spec.setdefault("containers", [])
        if not containers:
            containers.append({})
        return containers[0]

    @property
    def image(self) -> str | None:
        """Image of the first container."""
        if not (containers := self.containers):
            return None
        return containers[0].get("image")

    @image.setter
    def image(self, image: str) -> None:
        self._container()["image"] = image

    @property
    def port(self) -> int | None:
        """Container port of the first container."""
        if not (containers := self.containers):
            return None
        for item in containers[0].get("ports") or []:
            if "containerPort" in item:
                return int(item["containerPort"])
        return None

    @port.setter
    def port(self, port: int) -> None:
        self._container()["ports"] = [{"containerPort": port}]

    @property
    def env(self) -> dict[str, str]:
        """Literal environment variables of the first container."""
        if not (containers := self.containers):
            return {}
        return {
            item["name"]: item.get("value", "")
            for item in containers[0].get("env") or []
            if "name" in item
        }

    def update_env(self, env: dict[str, str]) -> None:
        """Set environment variables, replacing existing ones with the same name."""
        env_list = self._container().setdefault("env", [])
        remaining = dict(env)
        for item in env_list:
            if (name := item.get("name")) in remaining:
                item["value"] = remaining.pop(name)
        env_list.extend({"name": k, "value": v} for k, v in remaining.items())

    def update_metadata(
        self,
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
    ) -> None:
        """Merge labels and annotations into the service metadata."""
        if labels:
            self.metadata.setdefault("labels", {}).update(labels)
        if annotations:
            self.metadata.setdefault("annotations", {}).update(annotations)


@dataclass
class Revision(BaseResource):
    """A Knative Revision."""

    KIND: ClassVar[str] = REVISION_KIND


@dataclass
class Route(BaseResource):
    """A Knative Route."""

    KIND: ClassVar[str] = ROUTE_KIND


@dataclass
class Configuration(BaseResource):
    """A Knative Configuration."""

    KIND: ClassVar[str] = CONFIGURATION_KIND


@dataclass
class ServiceList(DataClassDictMixin):
    """A list of Services returned by a list call."""

    api_version: str = field(
        metadata=field_options(alias="apiVersion"), default=LIST_API_VERSION
    )

    kind: str = LIST_KIND

    items: list[Service] = field(default_factory=list)

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass
class RevisionList(DataClassDictMixin):
    """A list of Revisions returned by a list call."""

    api_version: str = field(
        metadata=field_options(alias="apiVersion"), default=LIST_API_VERSION
    )

    kind: str = LIST_KIND

    items: list[Revision] = field(default_factory=list)

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass
class RouteList(DataClassDictMixin):
    """A list of Routes returned by a list call."""

    api_version: str = field(
        metadata=field_options(alias="apiVersion"), default=LIST_API_VERSION
    )

    kind: str = LIST_KIND

    items: list[Route] = field(default_factory=list)

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


def new_service(
    name: str,
    namespace: str,
    image: str,
    env: dict[str, str] | None = None,
    port: int | None = None,
    labels: dict[str, str] | None = None,
    annotations: dict[str, str] | None = None,
) -> Service:
    """Build a Service running a single container image."""
    service = Service(metadata={"name": name, "namespace": namespace})
    service.stamp_identity()
    service.image = image
    if env:
        service.update_env(env)
    if port is not None:
        service.port = port
    service.update_metadata(labels=labels, annotations=annotations)
    _LOGGER.debug("Built service %s", service.resource_id)
    return service
