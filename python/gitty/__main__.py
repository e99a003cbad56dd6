"""
Main entry point for command-line execution of gitty.
"""

import sys
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from .cli import load_config, render, setup_parser
from .exceptions import GitException


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Configure loguru logger."""
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
            rotation="10 MB",
            retention="1 week",
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse command-line arguments, run the selected operation and print its
    result.

    Returns:
        int: Process exit status.
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    try:
        args.config = load_config(args)
    except GitException as e:
        configure_logging("WARNING")
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging("DEBUG" if args.verbose else args.config.log_level)
    logger.debug(f"Command-line arguments: {args}")

    try:
        result = args.func(args)
    except GitException as e:
        logger.debug(f"{e.error_code}: {e}")
        if args.json:
            print(render(e.to_dict(), as_json=True))
        else:
            print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output = render(result, as_json=args.json)
    if output:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
