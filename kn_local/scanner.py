"""Library for reconstructing list results from a directory tree.

A scan walks a directory depth first and asks a visitor what to do with every
entry. The resource visitor only selects YAML files that live below a kind
directory (e.g. `ksvc`). A YAML file found anywhere else marks its directory
as unrelated content and the rest of that directory, subdirectories included,
is pruned. This lets other trees (docs, kustomize overlays, ...) live next to
the resources without being read as resources.
"""

from collections.abc import Callable, Iterator
from enum import Enum
import logging
import os
from pathlib import Path
from typing import TypeVar

from .codec import decode_file
from .layout import FILE_EXTENSION, kind_segment
from .resource import BaseResource

__all__ = [
    "Decision",
    "walk",
    "resource_decision",
    "scan",
]

_LOGGER = logging.getLogger(__name__)

_R = TypeVar("_R", bound=BaseResource)


class Decision(str, Enum):
    """What to do with a single entry during a walk."""

    DESCEND = "descend"
    """Descend into a directory, or select a file."""

    SKIP_ENTRY = "skip_entry"
    """Ignore this entry only."""

    SKIP_SUBTREE = "skip_subtree"
    """Ignore this entry and everything remaining in its containing directory."""


Visitor = Callable[[Path, bool], Decision]


def walk(root: Path, visit: Visitor) -> Iterator[Path]:
    """Yield the files selected by the visitor below the root.

    Entries of a directory are visited in name order with files before
    subdirectories, so the result is stable for a given directory state. A
    root that does not exist yields nothing.
    """
    if not root.is_dir():
        _LOGGER.debug("Scan root %s does not exist", root)
        return
    yield from _walk_dir(root, visit)


def _walk_dir(directory: Path, visit: Visitor) -> Iterator[Path]:
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda entry: entry.name)
    files = [e for e in entries if not e.is_dir(follow_symlinks=False)]
    dirs = [e for e in entries if e.is_dir(follow_symlinks=False)]

    for entry in files:
        path = Path(entry.path)
        match visit(path, False):
            case Decision.SKIP_SUBTREE:
                _LOGGER.debug("Pruning %s at %s", directory, entry.name)
                return
            case Decision.SKIP_ENTRY:
                continue
            case Decision.DESCEND:
                yield path

    for entry in dirs:
        path = Path(entry.path)
        match visit(path, True):
            case Decision.SKIP_SUBTREE:
                _LOGGER.debug("Pruning %s at %s", directory, entry.name)
                return
            case Decision.SKIP_ENTRY:
                continue
            case Decision.DESCEND:
                yield from _walk_dir(path, visit)


def resource_decision(root: Path, kind: str, protected_depth: int = 1) -> Visitor:
    """Return a visitor selecting the files of a kind below the scan root.

    Stray YAML files in the first `protected_depth` levels (the scan root and,
    when scanning a whole store, the namespace directories) are skipped without
    pruning, so they never hide the resources stored next to them.
    """
    segment = kind_segment(kind)

    def visit(path: Path, is_dir: bool) -> Decision:
        if is_dir:
            return Decision.DESCEND
        if path.suffix != FILE_EXTENSION:
            return Decision.SKIP_ENTRY
        parts = path.relative_to(root).parts
        if segment in parts[:-1]:
            return Decision.DESCEND
        if len(parts) <= protected_depth:
            return Decision.SKIP_ENTRY
        return Decision.SKIP_SUBTREE

    return visit


def scan(
    root: Path, kind: str, cls: type[_R], protected_depth: int = 1
) -> Iterator[_R]:
    """Yield every resource of the kind stored below the root.

    Decode errors are raised from the generator, so a caller that consumes the
    whole scan either gets every object or an error.
    """
    for path in walk(root, resource_decision(root, kind, protected_depth)):
        _LOGGER.debug("Reading %s from %s", kind, path)
        yield decode_file(path, cls)
