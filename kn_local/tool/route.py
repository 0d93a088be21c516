"""kn-local route actions.

Routes are only reported by a cluster, the gitops client does not store them.
"""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import cast

from . import common
from .format import PrintFormatter, struct_formatter


class RouteListAction:
    """List routes."""

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
                help="List routes",
                description="Print a table of routes",
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
        routes = client.list_routes()
        if output:
            struct_formatter(output).print(routes.to_dict())
            return
        if not routes.items:
            print(common.not_found("routes", client.namespace))
            return
        PrintFormatter(["name", "url"]).print(
            [
                {"name": route.name, "url": (route.status or {}).get("url", "")}
                for route in routes.items
            ]
        )


class RouteAction:
    """kn-local route action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "route",
                aliases=["routes"],
                help="Inspect routes",
                description="List routes",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        RouteListAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        # No-op given subcommands are always the dispatch target
