from __future__ import annotations

import argparse

from rich.text import Text

from djemini.auth import AuthHealthStatus, check, get_provider
from djemini.cli.common import finish, out, output_flags
from djemini.logger import get_logger
from djemini.pipeline.run_state import RunResult


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_auth_parser(subparsers: argparse._SubParsersAction) -> None:
    auth = subparsers.add_parser(
        "auth",
        parents=[output_flags()],
        help="Sign in to YouTube, or check the stored credential",
    )
    auth.add_argument(
        "--check",
        action="store_true",
        help="Only verify the stored credential (no browser flow)",
    )
    auth.add_argument(
        "--logout",
        action="store_true",
        help="Delete the stored OAuth token",
    )
    auth.add_argument(
        "--provider",
        default="youtube",
        help="Auth provider (default: youtube)",
    )


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


_STATUS_RESULT = {
    AuthHealthStatus.OK: RunResult.OK,
    AuthHealthStatus.OK_API_QUOTA: RunResult.OK,
    AuthHealthStatus.AUTH_INVALID: RunResult.AUTH_INVALID,
    AuthHealthStatus.FAILED: RunResult.FAILED,
}


def handle_auth(args: argparse.Namespace) -> int:
    log = get_logger("djemini.auth")
    provider = get_provider(args.provider)

    if args.logout:
        removed = provider.logout()
        out("Token removed" if removed else "No stored token")
        return finish(log, RunResult.OK)

    if not args.check and not provider.load_credential():
        log.info("Starting browser sign-in")
        provider.login()

    result = check(args.provider)

    if result.status == AuthHealthStatus.OK:
        out(Text(result.message, style="green"))
    elif result.status == AuthHealthStatus.OK_API_QUOTA:
        msg = Text("OAuth OK", style="green")
        msg.append(" (API quota exhausted)", style="yellow")
        out(msg)
    else:
        out(Text(result.message, style="red"))

    return finish(log, _STATUS_RESULT[result.status])
