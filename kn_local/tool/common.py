"""Library for flags and helpers shared by the command actions."""

from argparse import (
    Action,
    ArgumentError,
    ArgumentParser,
    BooleanOptionalAction,
    Namespace,
)
from collections.abc import Callable
import logging
import pathlib
import sys
from typing import Any, TextIO

from kn_local.client import ServingClient, new_serving_client
from kn_local.config import TARGET_ENV, ClientConfig
from kn_local.exceptions import KnException
from kn_local.resource import DEFAULT_NAMESPACE

_LOGGER = logging.getLogger(__name__)

WAIT_DEFAULT_TIMEOUT = 600
OUTPUT_FORMATS = ["yaml", "json"]


class KeyValueAppendAction(Action):
    """Append a key=value pair to the argument dict."""

    def split(self, values: str) -> list[str]:
        return [values]

    def __call__(
        self,
        parser: ArgumentParser,
        namespace: Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        result = dict(getattr(namespace, self.dest) or {})
        for value in self.split(values):
            if not value:
                continue
            if "=" not in value:
                raise ArgumentError(
                    self, f"Expected key=value format but got '{value}'"
                )
            k, v = value.split("=", 1)
            result[k] = v
        setattr(namespace, self.dest, result)


class SelectorAppendAction(KeyValueAppendAction):
    """Append comma separated key=value pairs to the argument dict."""

    def split(self, values: str) -> list[str]:
        return values.split(",")


def add_client_flags(args: ArgumentParser, all_namespaces: bool = False) -> None:
    """Add flags selecting the backend and namespace of a request."""
    args.add_argument(
        "--target",
        type=pathlib.Path,
        default=None,
        help="Local directory holding the resources instead of a cluster "
        f"(defaults to ${TARGET_ENV})",
    )
    args.add_argument(
        "--namespace",
        "-n",
        type=str,
        default=DEFAULT_NAMESPACE,
        help="The namespace scope for this request",
    )
    if all_namespaces:
        args.add_argument(
            "--all-namespaces",
            "-A",
            default=False,
            action=BooleanOptionalAction,
            help="List the requested objects across all namespaces.",
        )


def add_wait_flags(
    args: ArgumentParser, operation: str, kind: str, default: bool
) -> None:
    """Add flags controlling whether to wait for an operation to complete."""
    args.add_argument(
        "--wait",
        default=default,
        action=BooleanOptionalAction,
        help=f"Wait for '{operation}' operation to be completed.",
    )
    args.add_argument(
        "--wait-timeout",
        type=int,
        default=WAIT_DEFAULT_TIMEOUT,
        help=f"Seconds to wait for the {kind} before giving up.",
    )


def add_output_flag(args: ArgumentParser) -> None:
    """Add the structured output flag."""
    args.add_argument(
        "--output",
        "-o",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format of the command",
    )


def add_metadata_flags(args: ArgumentParser) -> None:
    """Add flags setting labels and annotations."""
    args.add_argument(
        "--label",
        "-l",
        action=KeyValueAppendAction,
        help="Label to set as key=value, may be repeated",
    )
    args.add_argument(
        "--annotation",
        "-a",
        action=KeyValueAppendAction,
        help="Annotation to set as key=value, may be repeated",
    )


def client_config(  # type: ignore[no-untyped-def]
    namespace: str, target: pathlib.Path | None, **kwargs
) -> ClientConfig:
    """Create a ClientConfig object based on flags."""
    config = ClientConfig(namespace=namespace)
    if kwargs.get("all_namespaces"):
        config.namespace = ""
    if target is not None:
        config.target = target
    return config


def new_client(config: ClientConfig) -> ServingClient:
    """Return the serving client for the configuration."""
    return new_serving_client(config.namespace, config.target)


def wait_timeout(wait: bool, wait_timeout: int) -> float:
    """Return the timeout to pass to delete calls, zero when not waiting."""
    return float(wait_timeout) if wait else 0.0


def log_progress(elapsed: float, message: str) -> None:
    """Progress callback for waits."""
    _LOGGER.info("[%0.1fs] %s", elapsed, message)


def delete_all(
    kind: str,
    names: list[str],
    delete: Callable[[str], None],
    namespace: str,
    file: TextIO | None = None,
) -> None:
    """Delete every named object, reporting all failures together."""
    errors: list[str] = []
    for name in names:
        try:
            delete(name)
        except (KnException, OSError) as err:
            _LOGGER.debug("Failed to delete %s %s: %s", kind, name, err)
            errors.append(str(err))
            continue
        print(
            f"{kind} '{name}' deleted in namespace '{namespace}'.",
            file=file or sys.stdout,
        )
    if errors:
        raise KnException("Error: " + "\nError: ".join(errors))


def not_found(kind: str, namespace: str) -> str:
    """Return a message for an empty list result."""
    if namespace:
        return f"No {kind} found in namespace '{namespace}'."
    return f"No {kind} found."
