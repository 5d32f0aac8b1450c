"""Main CLI entry point for fivem-utility."""

import argparse
import logging
import sys
from pathlib import Path

from fivem_utility import __version__
from fivem_utility.cli import docker_cmd, server_cmd

NO_COMMAND = "You must specify a subcommand. See --help for more information."


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="fivem-utility",
        description="Provides various useful utilities for FiveM servers",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("server.cfg"),
        help="Set the main config file, often called `server.cfg'",
    )
    ap.add_argument(
        "-r",
        "--resources-dir",
        type=Path,
        default=Path("resources"),
        help="Set the resources directory",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = ap.add_subparsers(dest="command")
    sub.add_parser("print", help="Print details about the config file.")
    sub.add_parser("verify", help="Checks the integrity of the config file.")
    sub.add_parser(
        "resource-usage",
        help="Finds resources specified in server.cfg, and lists resources that are never used.",
    )
    vs = sub.add_parser(
        "version-server",
        help="Gives information about the versions available from the FiveM version server",
    )
    vs.add_argument(
        "-w",
        "--use-windows-server",
        action="store_true",
        help="Use the Windows artifact server (defaults to the Linux artifact server)",
    )
    sub.add_parser(
        "docker",
        add_help=False,
        help=f"Container packaging: {docker_cmd.SUBCOMMANDS}",
    )
    return ap


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    ap = build_parser()
    args, extra = ap.parse_known_args(sys.argv[1:] if argv is None else argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "docker":
        docker_cmd.run_docker_argv(extra)
        return
    if extra:
        ap.error(f"unrecognized arguments: {' '.join(extra)}")

    if args.command == "print":
        rc = server_cmd.run_print(args.config)
    elif args.command == "verify":
        rc = server_cmd.run_verify(args.config)
    elif args.command == "resource-usage":
        rc = server_cmd.run_resource_usage(args.config, args.resources_dir)
    elif args.command == "version-server":
        rc = server_cmd.run_version_server(args.use_windows_server)
    else:
        print(NO_COMMAND, file=sys.stderr)
        rc = 1
    sys.exit(rc)


if __name__ == "__main__":
    main()
