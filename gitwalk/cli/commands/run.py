"""Run command implementation: build the configuration and walk."""

import logging
from argparse import Namespace
from pathlib import Path

from gitwalk.config import ConfigLoader, WalkConfig
from gitwalk.exceptions import ConfigValidationError
from gitwalk.walk import WalkRunner


logger = logging.getLogger(__name__)


def build_config(args: Namespace) -> WalkConfig:
    """
    Merge defaults, the optional config file and command-line flags.

    Flags win over the file, the file wins over defaults. --serial forces a
    single worker whatever -n or the file says.
    """
    config = WalkConfig()

    if getattr(args, 'config', None):
        file_values = ConfigLoader().load(Path(args.config))
        config = config.with_overrides(**file_values)

    config = config.with_overrides(
        concurrency=args.concurrency,
        quiet=args.quiet,
        where=args.where,
        command=args.command or None,
        debug=args.debug,
        log_level=args.log_level,
    )
    if args.serial:
        config = config.with_overrides(concurrency=1)

    config.validate()
    return config


def setup_logging(config: WalkConfig) -> None:
    level_name = 'warning' if config.log_level == 'warn' else config.log_level
    log_level = getattr(logging, level_name.upper())
    if config.debug:
        log_level = logging.DEBUG

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def run_walk(args: Namespace) -> int:
    """
    Run the command in every repository found.

    Returns 0 when every invocation succeeded, 1 when any failed, 2 on
    configuration errors. A relayed signal terminates the process instead.
    """
    try:
        config = build_config(args)
    except ConfigValidationError as e:
        logging.basicConfig(format='%(levelname)s - %(message)s')
        for error in e.errors:
            logger.error(f"Config error{f' at {error.path}' if error.path else ''}: {error.message}")
        return e.exit_code
    except FileNotFoundError as e:
        logging.basicConfig(format='%(levelname)s - %(message)s')
        logger.error(f"File not found: {e}")
        return 1

    setup_logging(config)
    logger.debug(f"parallel {getattr(args, 'parallel', False)}")

    try:
        summary = WalkRunner(config).run()
        return 0 if summary.ok else 1

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 2
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1
