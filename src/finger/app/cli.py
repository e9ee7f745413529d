import argparse
import asyncio
import json
import logging
import os
import sys
from logging.config import dictConfig
from typing import List, Optional

import aiohttp
from pydantic import ValidationError

from finger.app.config import Settings
from finger.resolve.errors import BuildError
from finger.resolve.reader import FingerReader

logger = logging.getLogger("finger")

HEALTHCHECK_TIMEOUT = 5.0


def configure_logging(debug: bool = False):
    logging_config_file = os.getenv("LOGGING_CONFIG_FILE", "")

    if len(logging_config_file) > 0:
        with open(logging_config_file) as fl:
            dictConfig(json.load(fl))
        return

    logging.basicConfig(format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(logging.DEBUG if debug else logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    flags = argparse.ArgumentParser(add_help=False)
    flags.add_argument(
        "-d", "--debug", action="store_true", default=None, help="Enable debug logging"
    )
    flags.add_argument("--host", help="Host to listen on")
    flags.add_argument("-p", "--port", type=int, help="Port to listen on")
    flags.add_argument("-u", "--urn-file", help="Path to the URNs file")
    flags.add_argument("-f", "--finger-file", help="Path to the fingers file")

    parser = argparse.ArgumentParser(prog="finger", description="A webfinger server")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("serve", parents=[flags], help="Start the webfinger server")
    subparsers.add_parser(
        "healthcheck", parents=[flags], help="Check if the server is running"
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Build Settings from the environment, overridden by the flags that were given."""
    overrides = {
        "debug": args.debug,
        "host": args.host,
        "port": args.port,
        "urn_file": args.urn_file,
        "finger_file": args.finger_file,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def serve_command(settings: Settings) -> int:
    from finger.app.server import InterruptTrap, serve

    try:
        reader = FingerReader(settings.urn_file, settings.finger_file)
        webfingers = reader.read_finger_file(strict=settings.strict_subjects)
    except BuildError as e:
        logger.error("Error loading webfingers: %s", e)
        return 1

    logger.info("Loaded %d webfingers", len(webfingers))

    async def run() -> None:
        stop = asyncio.Event()
        InterruptTrap(stop).install(asyncio.get_running_loop())
        await serve(settings, webfingers, stop, logger)

    try:
        asyncio.run(run())
    except OSError as e:
        logger.error("Server exited with error: %s", e)
        return 1
    return 0


async def check_health(address: str, timeout: float = HEALTHCHECK_TIMEOUT) -> bool:
    """Return True if the server at `address` answers its liveness endpoint with 200."""
    url = f"http://{address}/healthz"
    try:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout)
        ) as session:
            async with session.get(url) as resp:
                if resp.status != 200:
                    logger.error("Server returned status %d", resp.status)
                    return False
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error("Error sending request to %s: %s", url, e)
        return False
    return True


def healthcheck_command(settings: Settings) -> int:
    return 0 if asyncio.run(check_health(settings.address)) else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help(sys.stderr)
        return 0

    try:
        settings = load_settings(args)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.debug)

    if args.command == "serve":
        return serve_command(settings)
    return healthcheck_command(settings)


def invoke():
    sys.exit(main())


if __name__ == "__main__":
    invoke()
