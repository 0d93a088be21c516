"""Configuration objects for kn-local."""

from dataclasses import dataclass, field
import os
from pathlib import Path

from .client.client import DEFAULT_MAX_UPDATE_ATTEMPTS
from .resource import DEFAULT_NAMESPACE

TARGET_ENV = "KN_LOCAL_TARGET"


def default_target() -> Path | None:
    """Return the target directory configured in the environment, if any."""
    if target := os.environ.get(TARGET_ENV):
        return Path(target)
    return None


@dataclass
class ClientConfig:
    """Configuration for constructing a serving client."""

    namespace: str = DEFAULT_NAMESPACE
    """Namespace of the request, empty for all namespaces."""

    target: Path | None = field(default_factory=default_target)
    """Local directory to manage instead of a cluster."""

    max_update_attempts: int = DEFAULT_MAX_UPDATE_ATTEMPTS
    """Number of fetch and update cycles before an update gives up."""
