import argparse
import json
import logging
import sys
from typing import Any

from .constants import MANIFEST_FILE
from .exceptions import (
    BaseError,
    BlockedByFailedDependencyError,
    CyclicDependencyError,
)


def order(path: str, manifest: str) -> list[str]:
    """
    Creation order
    """
    from ._loader import Loader

    return Loader(path=path, manifest=manifest).load().order()


def resolve(path: str, manifest: str, service: str | None) -> Any:
    """
    Resolved service environment
    """
    from ._loader import Loader

    stack = Loader(path=path, manifest=manifest).load()
    if service is None:
        return {
            id: config.variables
            for id, config in stack.resolve_all().items()
        }
    return stack.resolve(service).variables


def plan(path: str, manifest: str, health: list[str]) -> Any:
    """
    Provisioning plan
    """
    from ._loader import Loader

    stack = Loader(path=path, manifest=manifest).load()
    for item in health:
        check, sep, status = item.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(
                f"Invalid health status {item}, expected CHECK=STATUS"
            )
        stack.report(check, status.lower())
    return stack.plan().to_dict()


def error_details(error: BaseError) -> dict[str, Any]:
    details: dict[str, Any] = {
        "error": type(error).__name__,
        "status_code": error.status_code,
        "message": str(error),
    }
    if isinstance(error, CyclicDependencyError):
        details["cycle"] = error.cycle
    if isinstance(error, BlockedByFailedDependencyError):
        details["failed"] = error.failed
        details["blocked"] = error.blocked
    return details


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="stackplan", description="stackplan CLI"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    order_parser = subparsers.add_parser(
        "order", help="Print the creation order"
    )
    resolve_parser = subparsers.add_parser(
        "resolve", help="Print resolved service environments"
    )
    plan_parser = subparsers.add_parser(
        "plan", help="Print the provisioning plan"
    )
    common_arguments = [
        ("--path", str, ".", "Project directory", None),
        ("--manifest", str, MANIFEST_FILE, "Manifest filename", None),
        ("--indent", int, 2, "JSON indentation", None),
        ("--log-level", str, "WARNING", "Logging level", None),
    ]
    for arg in common_arguments:
        for subparser in (order_parser, resolve_parser, plan_parser):
            subparser.add_argument(
                arg[0], type=arg[1], default=arg[2], help=arg[3], nargs=arg[4]
            )
    resolve_parser.add_argument(
        "service",
        type=str,
        default=None,
        help="Service identifier (optional positional argument)",
        nargs="?",
    )
    plan_parser.add_argument(
        "--health",
        type=str,
        default=None,
        action="append",
        help="Health check status as CHECK=STATUS, repeatable",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())
    try:
        if args.command == "order":
            response: Any = order(path=args.path, manifest=args.manifest)
        elif args.command == "resolve":
            response = resolve(
                path=args.path,
                manifest=args.manifest,
                service=args.service,
            )
        elif args.command == "plan":
            response = plan(
                path=args.path,
                manifest=args.manifest,
                health=args.health or [],
            )
        else:
            parser.print_help()
            return 2
    except BaseError as e:
        print(
            json.dumps(error_details(e), indent=args.indent),
            file=sys.stderr,
        )
        return 1
    except (argparse.ArgumentTypeError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 2
    print(json.dumps(response, indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
