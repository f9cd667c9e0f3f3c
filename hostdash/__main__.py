"""Entry point — python -m hostdash."""

from __future__ import annotations

import argparse
import asyncio
import sys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostdash",
        description="Live CPU, memory and disk usage of remote hosts over SSH",
    )
    parser.add_argument(
        "--host",
        dest="hosts",
        action="extend",
        nargs="+",
        default=[],
        metavar="HOST",
        help="Host to monitor, as [user@]address[:port]; repeatable",
    )
    parser.add_argument(
        "--poll-rate",
        type=float,
        default=None,
        help="Seconds between probes of each host (default: 5)",
    )
    parser.add_argument(
        "--history",
        type=int,
        default=None,
        help="Number of samples kept per history (default: 120)",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to configuration YAML file",
        default=None,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    from hostdash.config.settings import load_config

    try:
        settings = load_config(args.config)
        settings.merge_hosts(args.hosts)
        if args.poll_rate is not None:
            if args.poll_rate <= 0:
                raise ValueError("--poll-rate must be positive")
            settings.poll.interval = args.poll_rate
        if args.history is not None:
            if args.history < 1:
                raise ValueError("--history must be at least 1")
            settings.poll.history_size = args.history
        if args.verbose:
            settings.log_level = "DEBUG"
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    if not settings.hosts:
        parser.error("at least one --host is required (or list hosts in the config file)")

    from hostdash.app import Application

    app = Application(settings=settings)
    try:
        asyncio.run(app.start())
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
