"""kn-local revision actions.

Revisions are created by a cluster from service updates. A local directory
holds no revisions, so the gitops client reports these commands as not
supported.
"""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

from . import common
from .format import PrintFormatter, struct_formatter

_LOGGER = logging.getLogger(__name__)

SERVICE_LABEL = "serving.knative.dev/service"


class RevisionListAction:
    """List revisions."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "list",
                aliases=["ls"],
                help="List revisions",
                description="Print a table of revisions",
            ),
        )
        common.add_output_flag(args)
        common.add_client_flags(args, all_namespaces=True)
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        output: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        client = common.new_client(common.client_config(**kwargs))
        revisions = client.list_revisions()
        if output:
            struct_formatter(output).print(revisions.to_dict())
            return
        if not revisions.items:
            print(common.not_found("revisions", client.namespace))
            return
        cols = ["name", "service"]
        if not client.namespace:
            cols.insert(0, "namespace")
        PrintFormatter(cols).print(
            [
                {
                    "namespace": revision.namespace or "",
                    "name": revision.name,
                    "service": revision.labels.get(SERVICE_LABEL, ""),
                }
                for revision in revisions.items
            ]
        )


class RevisionDescribeAction:
    """Show details of a revision."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "describe",
                help="Show details of a revision",
                description="Print a single revision",
            ),
        )
        args.add_argument("name", help="The name of the revision")
        common.add_output_flag(args)
        common.add_client_flags(args)
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        name: str,
        output: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        client = common.new_client(common.client_config(**kwargs))
        revision = client.get_revision(name)
        struct_formatter(output or "yaml").print(revision.to_dict())


class RevisionDeleteAction:
    """Delete revisions."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "delete",
                help="Delete revisions",
                description="Delete one or more revisions",
            ),
        )
        args.add_argument("names", nargs="+", help="Names of the revisions")
        common.add_client_flags(args)
        common.add_wait_flags(args, "delete", "revision", default=False)
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        names: list[str],
        wait: bool,
        wait_timeout: int,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        client = common.new_client(common.client_config(**kwargs))
        timeout = common.wait_timeout(wait, wait_timeout)
        common.delete_all(
            "Revision",
            names,
            lambda name: client.delete_revision(name, timeout),
            client.namespace,
        )


class RevisionAction:
    """kn-local revision action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "revision",
                aliases=["revisions"],
                help="Manage revisions",
                description="List, describe and delete revisions",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        RevisionListAction.register(subcmds)
        RevisionDescribeAction.register(subcmds)
        RevisionDeleteAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        # No-op given subcommands are always the dispatch target
