"""CLI entry point for rester."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import termios

from rester import __version__
from rester.config import LOG_LEVELS, Config, load_config
from rester.runtime import run_app

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rester",
        description="Interactive terminal HTTP client",
    )
    parser.add_argument("--config", help="Settings file (default: ~/.rester/settings.json)")
    parser.add_argument("--presets", help="Saved requests file (default: requests.json)")
    parser.add_argument("--log-file", help="Log file (default: rester.log)")
    parser.add_argument("--log-level", choices=list(LOG_LEVELS), help="Log level (default: info)")
    parser.add_argument("--tick-ms", type=int, help="UI tick interval in milliseconds (default: 16)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds, 0 for none (default: 30)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def setup_logging(config: Config) -> None:
    logging.basicConfig(
        filename=config.log_path,
        level=getattr(logging, config.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    config = load_config(
        settings_path=args.config,
        overrides={
            "presets_path": args.presets,
            "log_path": args.log_file,
            "log_level": args.log_level,
            "tick_ms": args.tick_ms,
            "request_timeout": args.timeout,
        },
    )
    setup_logging(config)

    try:
        asyncio.run(run_app(config))
    except KeyboardInterrupt:
        pass
    except (termios.error, OSError) as e:
        logger.error("Terminal error: %s", e)
        print(f"rester: terminal error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected error")
        print(f"rester: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
