"""CLI for obtaining a TickTick Open API access token.

Usage:
    ticktick-open-auth                          # Use TICKTICK_* settings
    ticktick-open-auth --client-id ID --client-secret SECRET
    ticktick-open-auth --manual                 # Paste code and state by hand
    ticktick-open-auth --no-browser --timeout 120

On success the token is printed as JSON; store its ``access_token`` value
as TICKTICK_ACCESS_TOKEN.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import webbrowser

from ticktick_open.auth import Authorization, AwaitingAuthCode
from ticktick_open.exceptions import TickTickConfigurationError, TickTickError
from ticktick_open.models import AccessToken
from ticktick_open.settings import TickTickSettings, get_settings

logger = logging.getLogger(__name__)


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ticktick-open-auth",
        description="Authorize against the TickTick Open API and print an access token.",
    )
    parser.add_argument("--client-id", help="OAuth client ID (default: TICKTICK_CLIENT_ID)")
    parser.add_argument("--client-secret", help="OAuth client secret (default: TICKTICK_CLIENT_SECRET)")
    parser.add_argument("--redirect-uri", help="Registered redirect URI (default: TICKTICK_REDIRECT_URI)")
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        help="Seconds to wait for the redirect (default: TICKTICK_REDIRECT_TIMEOUT)",
    )
    parser.add_argument("--no-browser", action="store_true", help="Do not open a browser")
    parser.add_argument(
        "--manual",
        action="store_true",
        help="Prompt for the code and state instead of listening for the redirect",
    )
    return parser


async def run_authorization(
    args: argparse.Namespace,
    settings: TickTickSettings,
) -> AccessToken:
    client_id = args.client_id or settings.client_id
    client_secret = args.client_secret or (
        settings.client_secret.get_secret_value() if settings.client_secret else None
    )
    if not client_id or not client_secret:
        raise TickTickConfigurationError(
            "Client ID and secret are required (--client-id/--client-secret or TICKTICK_* settings)"
        )
    redirect_uri = args.redirect_uri or settings.redirect_uri
    timeout = args.timeout if args.timeout is not None else settings.redirect_timeout

    awaiting: AwaitingAuthCode = Authorization.begin_auth(
        client_id, redirect_uri, timeout=settings.timeout
    )
    print("Visit this URL to authorize access:")
    print()
    print(f"  {awaiting.get_url()}")
    print()
    if not args.no_browser:
        webbrowser.open(awaiting.get_url())

    if args.manual:
        code = input("Authorization code: ").strip()
        state = input("State: ").strip()
        return await awaiting.finish_auth(client_secret, code, state)

    print(f"Waiting up to {timeout:g}s for the redirect to {redirect_uri} ...")
    return await awaiting.finish_auth_with_redirect(client_secret, timeout=timeout)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for ``ticktick-open-auth``."""
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except TickTickError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        token = asyncio.run(run_authorization(args, settings))
    except TickTickError as e:
        logger.error("Authorization failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(token.model_dump(by_alias=True), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
