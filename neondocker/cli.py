"""neondocker command-line interface

A wee command to simplify running KDE neon Docker images.

To run a full Plasma session of the default edition:
    neondocker

To run a full Plasma session of Neon User Edition:
    neondocker --edition user

To run a single application on the host display:
    neondocker okular
"""

import argparse
import sys
from typing import NoReturn, Optional, Sequence

from neondocker import __version__
from neondocker.common.config import Config
from neondocker.common.errors import ConfigurationError, NeonDockerError
from neondocker.common.settings import settings
from neondocker.common.types import Edition, Options


def arguments_parse(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments

    Args:
        argv: Arguments without the program name, sys.argv[1:] by default.

    Returns:
        Parsed CLI arguments.
    """
    parser = argparse.ArgumentParser(
        prog="neondocker",
        usage="neondocker [options] [standalone-application ...]",
        description="Run KDE neon Docker images in Xephyr or on the host display",
        epilog=(
            "standalone-application: Run a standalone application rather than "
            "full Plasma shell. Assumes -n to always start a new container."
        ),
    )

    parser.add_argument("--version", action="version", version=f"neondocker {__version__}")

    parser.add_argument(
        "-p", "--pull", action="store_true", help="Always pull latest version"
    )

    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="Use Neon All images (larger, contains all apps)",
    )

    # Validated after parsing so an unknown edition exits 1, not argparse's 2
    parser.add_argument(
        "-e",
        "--edition",
        type=str,
        default=None,
        metavar="EDITION",
        help=f"[{','.join(settings.EDITIONS)}] (default: from config, else dev-unstable)",
    )

    parser.add_argument(
        "-k", "--keep-alive", action="store_true", help="keep-alive container on exit"
    )

    parser.add_argument(
        "-r",
        "--reattach",
        action="store_true",
        help="reuse an existing container [assumes -k]",
    )

    parser.add_argument(
        "-n",
        "--new",
        action="store_true",
        dest="always_new",
        help="Always start a new container even if one is already running "
        "from the requested image",
    )

    parser.add_argument("-w", "--wayland", action="store_true", help="Run a Wayland session")

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: search standard locations)",
    )

    parser.add_argument(
        "--skip-dependencies",
        action="store_true",
        help="Do not check for or install host packages and docker group access",
    )

    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging (overrides config)"
    )

    parser.add_argument(
        "--info", action="store_true", help="Enable info logging (overrides config)"
    )

    parser.add_argument(
        "--warning", action="store_true", help="Enable warning logging (overrides config)"
    )

    parser.add_argument(
        "--error", action="store_true", help="Enable error logging (overrides config)"
    )

    parser.add_argument(
        "--critical", action="store_true", help="Enable critical logging (overrides config)"
    )

    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        metavar="standalone-application",
        help=argparse.SUPPRESS,
    )

    return parser.parse_args(argv)


def edition_parse(name: str) -> Edition:
    """
    Validate an edition name.

    Args:
        name: Edition string from the CLI or config.

    Returns:
        Matching Edition.

    Raises:
        ConfigurationError: If name is not a known edition
    """
    try:
        return Edition(name)
    except ValueError:
        raise ConfigurationError(
            f"Unknown edition '{name}'. Valid editions are: {', '.join(settings.EDITIONS)}"
        ) from None


def options_build(args: argparse.Namespace, config: Config) -> Options:
    """
    Turn parsed arguments into validated Options.

    Args:
        args: Parsed CLI args.
        config: Loaded config supplying the default edition.

    Returns:
        Immutable options for the run.
    """
    edition = edition_parse(args.edition or config.image.default_edition)
    command = tuple(args.command or ())
    return Options(
        edition=edition,
        pull=args.pull,
        all=args.all,
        # reattach assumes keep-alive
        keep_alive=args.keep_alive or args.reattach,
        reattach=args.reattach,
        # standalone applications always get a new container
        always_new=args.always_new or bool(command),
        wayland=args.wayland,
        command=command,
    )


def logLevelOverride_get(args: argparse.Namespace) -> str | None:
    """
    Resolve explicit log level override flags.

    Args:
        args: Parsed CLI args.

    Returns:
        Selected log level or None.
    """
    if args.critical:
        return "CRITICAL"
    if args.error:
        return "ERROR"
    if args.warning:
        return "WARNING"
    if args.info:
        return "INFO"
    if args.debug:
        return "DEBUG"
    return None


def main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main entry point for the neondocker command

    Args:
        argv: Arguments without the program name, sys.argv[1:] by default.
    """
    args = arguments_parse(argv)
    setattr(args, "log_level", logLevelOverride_get(args))

    try:
        from neondocker.app import app_run

        app_run(args, options_build)
        sys.exit(0)

    except KeyboardInterrupt:
        print("\nShutting down...")
        sys.exit(0)
    except NeonDockerError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
