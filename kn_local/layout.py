"""On-disk layout of a local resource directory.

Each resource is stored in its own file:

    <root>[/<namespace>]/<kind segment>/<name>.yaml

The namespace directory is omitted when the namespace is empty. Names are used
as-is, they are expected to already be valid kubernetes object names.
"""

from pathlib import Path

from .exceptions import InputException, UnsupportedOperationError
from .resource import NamedResource, SERVICE_KIND

__all__ = [
    "KIND_SEGMENTS",
    "FILE_EXTENSION",
    "kind_segment",
    "scan_root",
    "kind_dir",
    "resource_path",
    "parse_resource_path",
]

KIND_SEGMENTS: dict[str, str] = {
    SERVICE_KIND: "ksvc",
}

FILE_EXTENSION = ".yaml"

_SEGMENT_KINDS = {segment: kind for kind, segment in KIND_SEGMENTS.items()}


def kind_segment(kind: str) -> str:
    """Return the directory name used for objects of the specified kind."""
    if (segment := KIND_SEGMENTS.get(kind)) is None:
        raise UnsupportedOperationError(f"{kind} storage")
    return segment


def scan_root(root: Path, namespace: str | None) -> Path:
    """Return the directory holding all objects of the namespace."""
    if not namespace:
        return root
    return root / namespace


def kind_dir(root: Path, namespace: str | None, kind: str) -> Path:
    """Return the directory holding objects of a kind within a namespace."""
    return scan_root(root, namespace) / kind_segment(kind)


def resource_path(root: Path, namespace: str | None, kind: str, name: str) -> Path:
    """Return the file path of a single object."""
    return kind_dir(root, namespace, kind) / f"{name}{FILE_EXTENSION}"


def parse_resource_path(root: Path, path: Path) -> NamedResource:
    """Return the identity of the object stored at a path within the root."""
    try:
        parts = path.relative_to(root).parts
    except ValueError as err:
        raise InputException(f"Path {path} is not within {root}") from err
    if not parts or not parts[-1].endswith(FILE_EXTENSION):
        raise InputException(f"Path {path} is not a {FILE_EXTENSION} file")
    namespace: str | None = None
    if len(parts) == 3:
        namespace = parts[0]
    elif len(parts) != 2:
        raise InputException(f"Path {path} does not match the resource layout")
    if (kind := _SEGMENT_KINDS.get(parts[-2])) is None:
        raise InputException(f"Path {path} is not in a known kind directory")
    return NamedResource(kind, namespace, parts[-1][: -len(FILE_EXTENSION)])
