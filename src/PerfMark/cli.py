# ============================================================================
# PerfMark - Command Line Interface
#
# Purpose: Time an importable callable from the shell
# Inputs: Command-line arguments
# Outputs: Net timing summary (text or JSON)
# Dependencies: argparse, asyncio, importlib, config, instrumentation
# Usage: perfmark time mypkg.jobs:rebuild --setup mypkg.jobs:connect --repeat 5
#
# Changelog:
#   2026-03-11: Initial CLI with 'time' command
#   2026-03-12: --json / --json-pretty output
#   2026-03-14: Reject names carrying #filter / #results markers
# ============================================================================

import argparse
import asyncio
import importlib
import inspect
import sys
from typing import Any, Callable

from PerfMark import __version__
from PerfMark.config import Config
from PerfMark.errors import ConfigurationError, PerfMarkError
from PerfMark.instrumentation.measurements import OVERHEAD_MARKER, TERMINAL_MARKER, Tag, classify
from PerfMark.instrumentation.performance import PerfContext
from PerfMark.logging_utils import get_logger, setup_logging
from PerfMark.utils.serialization import serialize_summary_to_json

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="perfmark",
        description="Time operations and report net durations with overhead subtracted",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    time_parser = subparsers.add_parser(
        "time",
        help="Time an importable callable (module:function)",
    )
    time_parser.add_argument(
        "target",
        type=str,
        help="Callable to time, as module:function (sync or async, no arguments)",
    )
    time_parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="Operation name (default: the target string)",
    )
    time_parser.add_argument(
        "--setup",
        type=str,
        default=None,
        metavar="TARGET",
        help="Callable run before the target in every repeat; its time is subtracted as overhead",
    )
    time_parser.add_argument(
        "--repeat",
        type=int,
        default=1,
        help="Number of batches to run (default: 1)",
    )
    time_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to custom config YAML file",
    )
    time_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Also log every informational measurement",
    )
    time_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the summary as JSON instead of text",
    )
    time_parser.add_argument(
        "--json-pretty",
        action="store_true",
        help="With --json, use indented format",
    )
    time_parser.add_argument(
        "--log_level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config, INFO)",
    )

    return parser


def load_target(spec: str) -> Callable[[], Any]:
    """
    Resolve "package.module:attr.path" to a callable.

    Raises:
        ConfigurationError: If the spec is malformed or cannot be imported
    """
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Target must look like module:function, got '{spec}'")
    try:
        obj: Any = importlib.import_module(module_name)
        for attr in attr_path.split("."):
            obj = getattr(obj, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot load target '{spec}'", details=str(e)) from e
    if not callable(obj):
        raise ConfigurationError(f"Target '{spec}' is not callable")
    return obj


def _check_plain_name(label: str, value: str) -> None:
    """The CLI adds the markers itself; a marker in a user-supplied name would reclassify it."""
    if classify(value) is not Tag.INFORMATIONAL:
        raise ConfigurationError(
            f"{label} must not contain '{OVERHEAD_MARKER}' or '{TERMINAL_MARKER}', got '{value}'"
        )


def _run(context: PerfContext, name: str, func: Callable[[], Any]) -> Any:
    """Run one wrapped call, driving an event loop when the target is async."""
    if inspect.iscoroutinefunction(func):

        async def _main() -> Any:
            return await context.wrap(name, func)

        return asyncio.run(_main())

    value = context.wrap(name, func)
    if inspect.isawaitable(value):
        return asyncio.run(value)
    return value


def time_command(args: argparse.Namespace) -> int:
    """
    Execute the 'time' command.

    Each repeat is one batch: a start mark, the optional setup (overhead),
    the target (informational), then a terminal measurement from the start
    mark, so the reported net is the batch time minus the setup time.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    try:
        config = Config.from_yaml(args.config) if args.config else Config.from_default()
        if args.verbose:
            config.perf.enabled = True
        if args.repeat < 1:
            raise ConfigurationError(f"--repeat must be at least 1, got {args.repeat}")

        setup_logging(config.logging, level=args.log_level)

        name = args.name or args.target
        _check_plain_name("--name" if args.name else "target", name)
        if args.setup:
            _check_plain_name("--setup", args.setup)

        target = load_target(args.target)
        setup = load_target(args.setup) if args.setup else None

        context = PerfContext.create(config)
        logger.info(f"Timing {name} ({args.repeat} batch(es))")

        for _ in range(args.repeat):
            start_id = context.ids.generate()
            context.mark(start_id)
            if setup is not None:
                _run(context, f"{args.setup} #filter", setup)
            _run(context, name, target)
            context.measure(f"{name} total #results", start_id)
            context.flush()

        summary = context.aggregator.build_summary_dict()

        if args.json:
            print(serialize_summary_to_json(summary, indent=2 if args.json_pretty else None))
            return 0

        precision = config.reporting.precision
        print("\n" + "=" * 60)
        print("✓ Timing Complete")
        print("=" * 60)
        print(f"Operation:       {name}")
        print(f"Batches:         {len(summary['batches'])}")
        for batch in context.aggregator.results:
            print(
                f"  net {batch.net_ms:.{precision}f} ms"
                f"  (total {batch.terminal_ms:.{precision}f}, overhead {batch.overhead_ms:.{precision}f})"
            )
        if "net_ms" in summary:
            stats = summary["net_ms"]
            print(f"Net min/avg/max: {stats['min_ms']} / {stats['avg_ms']} / {stats['max_ms']} ms")
        print("=" * 60 + "\n")

        return 0

    except (PerfMarkError, FileNotFoundError) as e:
        logger.error(f"Timing error: {e}")
        print(f"\n✗ Error: {e}\n", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Unexpected error during timing")
        print(f"\n✗ Unexpected error: {e}\n", file=sys.stderr)
        return 2


def main() -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "time":
        return time_command(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
