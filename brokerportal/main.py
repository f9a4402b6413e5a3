from __future__ import annotations

import argparse
import logging
import math
import os
import sys
from typing import Sequence

from dotenv import load_dotenv

from .api.auth_api import AuthAPI
from .utils.http_client import DEFAULT_BASE_URL, HttpClient, RequestError

COMMANDS = ("login", "renew-token", "logout", "api-token")


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value


def _positive_float(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number of seconds, got {value!r}")
    return seconds


def _env_float(name: str) -> float | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return _positive_float(value)
    except argparse.ArgumentTypeError:
        return None


def _env_bool(name: str) -> bool:
    value = _env_str(name)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="brokerportal", description="Call the Broker Portal auth API.")
    parser.add_argument("command", choices=COMMANDS, help="Auth operation to perform")
    parser.add_argument(
        "--base-url",
        default=_env_str("BROKERPORTAL_BASE_URL") or DEFAULT_BASE_URL,
        help="API root, e.g. https://brokerportal.leverate.com/api/",
    )
    parser.add_argument("--username", default=_env_str("BROKERPORTAL_USERNAME"), help="Login user name")
    parser.add_argument("--password", default=_env_str("BROKERPORTAL_PASSWORD"), help="Login password")
    parser.add_argument(
        "--token",
        default=_env_str("BROKERPORTAL_TOKEN"),
        help="Bearer token for renew-token, logout and api-token",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=_env_float("BROKERPORTAL_TIMEOUT"),
        help="Request timeout in seconds (transport default when omitted)",
    )
    parser.add_argument("--verbose", action="store_true", default=_env_bool("BROKERPORTAL_VERBOSE"), help="Enable debug logging")
    args = parser.parse_args(argv)

    if args.command == "login" and not (args.username and args.password):
        parser.error("login requires --username and --password (or BROKERPORTAL_USERNAME/BROKERPORTAL_PASSWORD)")
    return args


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def run_command(args: argparse.Namespace, auth_api: AuthAPI) -> str | None:
    """Execute the selected command and return the token to print, if any."""

    if args.command == "login":
        return auth_api.login(username=args.username, password=args.password).token
    if args.command == "renew-token":
        return auth_api.renew_token().token
    if args.command == "api-token":
        return auth_api.generate_api_token().api_token
    auth_api.logout()
    return None


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    configure_logging(args.verbose)

    if args.command != "login" and not args.token:
        logging.warning("No --token given; %s will be sent unauthenticated.", args.command)

    with HttpClient(base_url=args.base_url, access_token=args.token, timeout=args.timeout) as http_client:
        try:
            token = run_command(args, AuthAPI(http_client))
        except RequestError as exc:
            logging.error("%s failed: %s", args.command, exc)
            return 1

    if token is not None:
        sys.stdout.write(f"{token}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
