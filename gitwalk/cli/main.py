"""Main CLI entry point for git-walk."""

import argparse
import os
import signal
import sys
from typing import Optional

from ..config import DEFAULT_CONCURRENCY, LOG_LEVELS
from .commands import run_walk


HELP = """
Run `command` in every git repo found. The command defaults to:

    git status --short -b

By default, the commands are run in parallel, and their stderr and stdout are
printed when the command completes, to avoid having the parallel command
output intermingled unintelligibly. Some commands only colorize when writing to
a terminal, in which case --serial may be useful, which runs the command with
output directly to the console at the price of being slower.

Examples:

    git-walk -p -q -- git describe
    git-walk -- git fetch --prune --all
    git-walk -- git co master
"""


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the git-walk CLI."""
    parser = argparse.ArgumentParser(
        prog='git-walk',
        usage='%(prog)s [options] [-- command...]',
        description='Run a command in every git repository below a directory',
        epilog=HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        'command',
        nargs='*',
        help='Command to run in each repository (default: git status --short -b)'
    )
    parser.add_argument(
        '-d', '--debug',
        action='store_true',
        default=None,
        help='Print debug trace'
    )
    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        default=None,
        help='Do not print commands that are being run'
    )
    parser.add_argument(
        '-w', '--where',
        type=str,
        metavar='W',
        help='Look for git repos in W and below (default: current directory)'
    )
    parser.add_argument(
        '-1', '--serial',
        action='store_true',
        help='Run serially, with output going directly to the console'
    )
    parser.add_argument(
        '-p', '--parallel',
        action='store_true',
        help='Run commands in parallel (the default)'
    )
    parser.add_argument(
        '-n',
        type=int,
        dest='concurrency',
        metavar='CONCURRENCY',
        help=f'Run this many commands in parallel (default: {DEFAULT_CONCURRENCY})'
    )
    parser.add_argument(
        '--config',
        type=str,
        metavar='FILE',
        help='YAML file with default settings'
    )
    parser.add_argument(
        '--log-level',
        choices=list(LOG_LEVELS),
        help='Set log level (default: warn)'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.concurrency is not None and parsed_args.concurrency < 1:
        parser.error(f"-n must be at least 1, got {parsed_args.concurrency}")

    # argparse keeps a leading '--' in some Python versions
    if parsed_args.command and parsed_args.command[0] == '--':
        parsed_args.command = parsed_args.command[1:]

    return run_walk(parsed_args)


def cli() -> None:
    """Console script entry point."""
    try:
        code = main()
    except KeyboardInterrupt:
        # Die from SIGINT itself, as the interrupted child did, without a traceback.
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        os.kill(os.getpid(), signal.SIGINT)
        code = 130
    sys.exit(code)


if __name__ == '__main__':
    cli()
