"""Command line tool for managing serving resources in a local directory."""

import argparse
import logging
import sys
import traceback

from kn_local.exceptions import KnException
from . import revision, route, service

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for managing Knative Serving resources "
        "stored in a local directory.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    service.ServiceAction.register(subparsers)
    revision.RevisionAction.register(subparsers)
    route.RouteAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """kn-local command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        action.run(**vars(args))
    except (KnException, OSError) as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("kn-local error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
