"""Library for formatting command output."""

from abc import ABC, abstractmethod
from collections.abc import Generator
import json
import sys
from typing import Any, TextIO

import yaml

from kn_local.codec import YamlDumper

PADDING = 3


def format_columns(
    headers: list[str], rows: list[list[str]]
) -> Generator[str, None, None]:
    """Yield the header and rows aligned in columns."""
    if not headers:
        return
    table = [headers] + rows
    widths = [max(len(str(row[i])) for row in table) for i in range(len(headers))]
    for row in table:
        cells = [f"{str(value):{width}}" for value, width in zip(row, widths)]
        yield (" " * PADDING).join(cells).rstrip()


class PrintFormatter:
    """A formatter that prints human readable tables."""

    def __init__(self, keys: list[str]):
        """Initialize the PrintFormatter with the keys to print as columns."""
        self._keys = keys

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the data objects."""
        if not data:
            return
        rows = [[str(row.get(key, "")) for key in self._keys] for row in data]
        yield from format_columns([key.upper() for key in self._keys], rows)

    def print(
        self, data: list[dict[str, Any]], file: TextIO | None = None
    ) -> None:
        """Output the data objects."""
        for line in self.format(data):
            print(line, file=file or sys.stdout)


class StructFormatter(ABC):
    """A formatter that prints a structured document."""

    @abstractmethod
    def format(self, data: Any) -> str:
        """Format the document."""

    def print(self, data: Any, file: TextIO | None = None) -> None:
        """Print the document."""
        print(self.format(data), end="", file=file or sys.stdout)


class YamlFormatter(StructFormatter):
    """A formatter that prints yaml output."""

    def format(self, data: Any) -> str:
        return yaml.dump(data, Dumper=YamlDumper, sort_keys=False)


class JsonFormatter(StructFormatter):
    """A formatter that prints json output."""

    def format(self, data: Any) -> str:
        return json.dumps(data, indent=2, sort_keys=False) + "\n"


FORMATTERS: dict[str, type[StructFormatter]] = {
    "yaml": YamlFormatter,
    "json": JsonFormatter,
}


def struct_formatter(output: str) -> StructFormatter:
    """Return the formatter for an --output value."""
    return FORMATTERS[output]()
