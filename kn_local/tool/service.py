"""kn-local service actions."""

import logging
from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

from kn_local.client import ListConfig
from kn_local.exceptions import KnException, NotFoundError
from kn_local.resource import Service, new_service

from . import common
from .format import PrintFormatter, struct_formatter

_LOGGER = logging.getLogger(__name__)


def _add_template_flags(args: ArgumentParser) -> None:
    args.add_argument(
        "--env",
        "-e",
        action=common.KeyValueAppendAction,
        help="Environment variable to set as NAME=value, may be repeated",
    )
    args.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="The port the container listens on",
    )
    common.add_metadata_flags(args)


class ServiceCreateAction:
    """Create a service."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "create",
                help="Create a service",
                description="Create a service running a container image",
            ),
        )
        args.add_argument("name", help="The name of the service")
        args.add_argument(
            "--image", required=True, help="Image to run, e.g. ghcr.io/org/app:v1"
        )
        _add_template_flags(args)
        args.add_argument(
            "--force",
            action="store_true",
            help="Replace the service if it already exists",
        )
        common.add_client_flags(args)
        common.add_wait_flags(args, "create", "service", default=True)
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        name: str,
        image: str,
        env: dict[str, str] | None,
        port: int | None,
        label: dict[str, str] | None,
        annotation: dict[str, str] | None,
        force: bool,
        wait: bool,
        wait_timeout: int,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        client = common.new_client(common.client_config(**kwargs))
        namespace = client.namespace
        service = new_service(
            name,
            namespace,
            image,
            env=env,
            port=port,
            labels=label,
            annotations=annotation,
        )
        try:
            client.get_service(name)
        except NotFoundError:
            client.create_service(service)
            verb = "created"
        else:
            if not force:
                raise KnException(
                    f"cannot create service '{name}' in namespace '{namespace}' "
                    "because the service already exists and no --force option was given"
                )
            client.update_service(service)
            verb = "replaced"
        if wait:
            elapsed = client.wait_for_service(
                name, float(wait_timeout), common.log_progress
            )
            _LOGGER.info("Service %s ready after %0.1fs", name, elapsed)
        print(f"Service '{name}' {verb} in namespace '{namespace}'.")


class ServiceUpdateAction:
    """Update a service."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "update",
                help="Update a service",
                description="Update the image, environment or metadata of a service",
            ),
        )
        args.add_argument("name", help="The name of the service")
        args.add_argument("--image", default=None, help="Image to run")
        _add_template_flags(args)
        common.add_client_flags(args)
        common.add_wait_flags(args, "update", "service", default=True)
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        name: str,
        image: str | None,
        env: dict[str, str] | None,
        port: int | None,
        label: dict[str, str] | None,
        annotation: dict[str, str] | None,
        wait: bool,
        wait_timeout: int,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        config = common.client_config(**kwargs)
        client = common.new_client(config)

        def update(service: Service) -> Service:
            if image:
                service.image = image
            if env:
                service.update_env(env)
            if port is not None:
                service.port = port
            service.update_metadata(labels=label, annotations=annotation)
            return service

        result = client.update_service_with_retry(
            name, update, config.max_update_attempts
        )
        result.raise_for_error()
        if wait:
            client.wait_for_service(name, float(wait_timeout), common.log_progress)
        print(f"Service '{name}' updated in namespace '{client.namespace}'.")


class ServiceDescribeAction:
    """Show details of a service."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "describe",
                help="Show details of a service",
                description="Print the details of a single service",
            ),
        )
        args.add_argument("name", help="The name of the service")
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
        service = client.get_service(name)
        if output:
            struct_formatter(output).print(service.to_dict())
            return
        details: list[tuple[str, Any]] = [
            ("Name", service.name),
            ("Namespace", service.namespace or client.namespace),
            ("Image", service.image or ""),
        ]
        if service.port is not None:
            details.append(("Port", service.port))
        details.extend(("Env", f"{k}={v}") for k, v in service.env.items())
        details.extend(("Label", f"{k}={v}") for k, v in service.labels.items())
        details.extend(
            ("Annotation", f"{k}={v}") for k, v in service.annotations.items()
        )
        width = max(len(key) for key, _ in details) + 2
        for key, value in details:
            print(f"{key + ':':{width}}{value}")


class ServiceListAction:
    """List services."""

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
                help="List services",
                description="Print a table of services",
            ),
        )
        args.add_argument(
            "--label-selector",
            "-l",
            action=common.SelectorAppendAction,
            help="Filter objects by label selector by name=value",
        )
        common.add_output_flag(args)
        common.add_client_flags(args, all_namespaces=True)
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        label_selector: dict[str, str] | None,
        output: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        client = common.new_client(common.client_config(**kwargs))
        config: list[ListConfig] = []
        if label_selector:
            config.append(ListConfig(label_selector=label_selector))
        services = client.list_services(*config)
        if output:
            struct_formatter(output).print(services.to_dict())
            return
        if not services.items:
            print(common.not_found("services", client.namespace))
            return
        cols = ["name", "image"]
        if not client.namespace:
            cols.insert(0, "namespace")
        results = [
            {
                "namespace": service.namespace or "",
                "name": service.name,
                "image": service.image or "",
            }
            for service in services.items
        ]
        PrintFormatter(cols).print(results)


class ServiceDeleteAction:
    """Delete services."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "delete",
                help="Delete services",
                description="Delete one or more services",
            ),
        )
        args.add_argument("names", nargs="+", help="Names of the services")
        common.add_client_flags(args)
        common.add_wait_flags(args, "delete", "service", default=False)
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
            "Service",
            names,
            lambda name: client.delete_service(name, timeout),
            client.namespace,
        )


class ServiceAction:
    """kn-local service action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "service",
                aliases=["ksvc", "services"],
                help="Manage services",
                description="Create, update, list and delete services",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        ServiceCreateAction.register(subcmds)
        ServiceUpdateAction.register(subcmds)
        ServiceDescribeAction.register(subcmds)
        ServiceListAction.register(subcmds)
        ServiceDeleteAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        # No-op given subcommands are always the dispatch target
