"""Library for reading and writing serving resources as YAML.

Files may contain either YAML or JSON. Objects are always written back as
YAML. Every object read or written has its `apiVersion` and `kind` forced to
the canonical values of its type, so stored identity never drifts from what
the library expects.
"""

import contextlib
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, TextIO, TypeVar

import yaml

from .exceptions import InputException
from .resource import BaseResource

__all__ = [
    "YamlLoader",
    "YamlDumper",
    "loads",
    "dumps",
    "decode",
    "decode_file",
    "encode",
    "write_file",
]

_LOGGER = logging.getLogger(__name__)

_R = TypeVar("_R", bound=BaseResource)

_FILE_MODE = 0o644

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


def _without_timestamps(
    resolvers: dict[Any, list[tuple[str, Any]]]
) -> dict[Any, list[tuple[str, Any]]]:
    return {
        key: [(tag, regexp) for tag, regexp in values if tag != _TIMESTAMP_TAG]
        for key, values in resolvers.items()
    }


class YamlLoader(yaml.SafeLoader):
    """Loader that keeps unquoted timestamps as strings."""


# Resource fields are JSON values, a timestamp is only ever a string.
YamlLoader.yaml_implicit_resolvers = _without_timestamps(
    yaml.SafeLoader.yaml_implicit_resolvers
)


class YamlDumper(yaml.SafeDumper):
    """Dumper that emits multi-line strings as literal blocks."""


YamlDumper.yaml_implicit_resolvers = _without_timestamps(
    yaml.SafeDumper.yaml_implicit_resolvers
)


def _str_presenter(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    """Represent multi-line yaml strings as you'd expect.

    See https://github.com/yaml/pyyaml/issues/240
    """
    return dumper.represent_scalar(
        "tag:yaml.org,2002:str", data, style="|" if data.count("\n") > 0 else None
    )


YamlDumper.add_representer(str, _str_presenter)


def loads(content: str) -> Any:
    """Parse YAML or JSON content into a raw document."""
    try:
        if content.lstrip().startswith("{"):
            return json.loads(content)
        return yaml.load(content, Loader=YamlLoader)
    except (json.JSONDecodeError, yaml.YAMLError) as err:
        raise InputException(f"Unable to parse resource: {err}") from err


def dumps(obj: BaseResource) -> str:
    """Return the canonical YAML representation of the object."""
    obj.stamp_identity()
    return yaml.dump(obj.to_dict(), Dumper=YamlDumper, sort_keys=False)


def decode(stream: TextIO, cls: type[_R]) -> _R:
    """Read a single resource of the specified type from the stream."""
    obj = cls.parse_doc(loads(stream.read()))
    obj.stamp_identity()
    return obj


def decode_file(path: Path, cls: type[_R]) -> _R:
    """Read a single resource from a file.

    A missing file raises `FileNotFoundError` so callers can tell it apart from
    a file that exists but does not contain a valid resource.
    """
    with path.open(encoding="utf-8") as stream:
        try:
            return decode(stream, cls)
        except (InputException, UnicodeDecodeError) as err:
            raise InputException(f"Invalid resource file {path}: {err}") from err


def encode(obj: BaseResource, stream: TextIO) -> None:
    """Write the canonical YAML representation of the object to the stream."""
    stream.write(dumps(obj))


def write_file(path: Path, obj: BaseResource) -> None:
    """Replace the file contents with the object.

    The content is written to a temporary file in the same directory and then
    renamed into place, so readers never observe a partially written file.
    """
    content = dumps(obj)
    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
            tmp_file.write(content)
        os.chmod(tmp_name, _FILE_MODE)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise
    _LOGGER.debug("Wrote %s to %s", obj.resource_id, path)
