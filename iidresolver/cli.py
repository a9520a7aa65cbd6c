from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import get_settings
from .context import RequestContext
from .errors import ConfigError, IIDError
from .plugins import IIDResolverPlugin

log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="AWS instance identity node resolver")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="resolve agent IDs to selectors")
    resolve.add_argument("agent_ids", nargs="+", help="agent SPIFFE IDs")
    resolve.add_argument("--config", "-c", type=Path, help="JSON configuration file")
    resolve.add_argument("--access-key-id", help="AWS access key ID (default: $AWS_ACCESS_KEY_ID)")
    resolve.add_argument("--secret-access-key", help="AWS secret access key (default: $AWS_SECRET_ACCESS_KEY)")
    resolve.add_argument("--timeout", type=float, help="overall deadline in seconds")

    subparsers.add_parser("info", help="show plugin info")
    return parser.parse_args(argv)


def build_payload(args: argparse.Namespace) -> dict:
    """Merge the config file with credentials given on the command line."""
    payload: dict = {}
    if args.config:
        with args.config.open("r", encoding="utf-8") as f:
            payload = json.load(f)
        if not isinstance(payload, dict):
            raise ConfigError(f"unable to decode configuration: {args.config}: expected an object")
    if args.access_key_id:
        payload["access_key_id"] = args.access_key_id
    if args.secret_access_key:
        payload["secret_access_key"] = args.secret_access_key
    return payload


def run_resolve(args: argparse.Namespace, plugin: IIDResolverPlugin) -> None:
    plugin.configure(build_payload(args))
    timeout = args.timeout if args.timeout is not None else plugin.settings.request_timeout
    selectors = plugin.resolve(args.agent_ids, RequestContext(timeout=timeout))
    print(json.dumps({"map": selectors}, indent=2))


def run_info(plugin: IIDResolverPlugin) -> None:
    print(json.dumps(plugin.get_plugin_info().to_dict(), indent=2))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    plugin = IIDResolverPlugin(settings=settings)
    try:
        if args.command == "resolve":
            run_resolve(args, plugin)
        elif args.command == "info":
            run_info(plugin)
    except IIDError as exc:
        log.error(str(exc))
        print(json.dumps(exc.to_dict(), indent=2))
        return 1
    except (OSError, json.JSONDecodeError) as exc:
        log.error(f"Unable to read configuration: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
