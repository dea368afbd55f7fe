"""CLI commands for codestats."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler
from rich.markup import escape

from codestats.badge import generate_badge_svg
from codestats.client import Client
from codestats.config import (
    client_from_config,
    get_api_token,
    get_base_url,
    get_username,
    set_api_token,
    set_base_url,
    set_username,
)
from codestats.display import (
    console,
    err_console,
    print_badge_result,
    print_config,
    print_error,
    print_level,
    print_profile,
    print_pulse_result,
)
from codestats.errors import CodeStatsError
from codestats.levels import get_level, get_level_percentage, get_xp_for_next_level
from codestats.models import Pulse, parse_language_xp


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="codestats",
        description="Code::Stats profiles, pulses and level math",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log HTTP traffic")
    subparsers = parser.add_subparsers(dest="command")

    profile_p = subparsers.add_parser("profile", help="Show a user's public profile")
    profile_p.add_argument("username", nargs="?", default=None, help="Defaults to the configured username")
    profile_p.add_argument("--top", type=int, default=10, help="Number of languages to list")

    level_p = subparsers.add_parser("level", help="Compute level and progress for an XP amount")
    level_p.add_argument("xp", type=int)

    pulse_p = subparsers.add_parser("pulse", help="Send XP gains for this machine")
    pulse_p.add_argument("entries", nargs="+", metavar="LANG=XP")
    pulse_p.add_argument("--coded-at", default=None, help="ISO 8601 timestamp (default: now)")

    badge_p = subparsers.add_parser("badge", help="Generate SVG level badge for README")
    badge_p.add_argument("username", nargs="?", default=None)
    badge_p.add_argument("--output", "-o", default="codestats-badge.svg", help="Output file path")

    config_p = subparsers.add_parser("config", help="Show or change saved settings")
    config_p.add_argument("--token", default=None, help="API token for pulse submission")
    config_p.add_argument("--base-url", default=None, help="Alternate Code::Stats instance")
    config_p.add_argument("--username", default=None, help="Default username for profile/badge")
    return parser


def configure_logging(verbose: bool) -> None:
    """Route library logs through Rich on stderr."""
    handler = RichHandler(console=err_console, show_path=False)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
    )
    if not verbose:
        # httpx logs every request at INFO.
        logging.getLogger("httpx").setLevel(logging.WARNING)


def _resolve_username(username: str | None) -> str:
    return username or get_username() or ""


def do_profile(client: Client, username: str | None = None, top: int = 10) -> dict:
    """Fetch and print a profile. Raises CodeStatsError on failure."""
    profile = client.get_user_profile(_resolve_username(username))
    print_profile(profile, top=top)
    return {"ok": True, "user": profile.user, "total_xp": profile.total_xp, "level": profile.level}


def do_level(xp: int) -> dict:
    """Offline level math for an XP amount."""
    print_level(xp)
    return {
        "xp": xp,
        "level": get_level(xp),
        "percentage": get_level_percentage(xp),
        "next_level_xp": get_xp_for_next_level(xp),
    }


def do_pulse(client: Client, entries: list[str], coded_at: str | None = None) -> dict:
    """Parse LANG=XP entries and submit them as one pulse."""
    try:
        xps = [parse_language_xp(entry) for entry in entries]
        when = datetime.fromisoformat(coded_at) if coded_at else None
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/]")
        return {"ok": False, "reason": "invalid_input"}

    pulse = Pulse(coded_at=when, xps=xps) if when else Pulse.now(xps)
    client.send_pulse(pulse)
    print_pulse_result(pulse)
    return {"ok": True, "total_xp": sum(entry.xp for entry in xps), "languages": len(xps)}


def do_badge(client: Client, username: str | None = None, output: str = "codestats-badge.svg") -> dict:
    """Write an SVG badge for a user's current level."""
    profile = client.get_user_profile(_resolve_username(username))
    svg = generate_badge_svg(
        username=profile.user,
        level=profile.level,
        total_xp=profile.total_xp,
        percentage=profile.level_percentage,
    )
    output_path = Path(output)
    output_path.write_text(svg, encoding="utf-8")
    print_badge_result(str(output_path), profile.user, profile.level)
    return {"ok": True, "output": str(output_path.resolve()), "level": profile.level}


def do_config(
    token: str | None = None,
    base_url: str | None = None,
    username: str | None = None,
    config_path: Path | None = None,
) -> dict:
    """Persist the given settings, then print the resolved configuration."""
    if token is not None:
        set_api_token(token, config_path)
    if base_url is not None:
        set_base_url(base_url, config_path)
    if username is not None:
        set_username(username, config_path)
    settings = {
        "api_token": get_api_token(config_path),
        "base_url": get_base_url(config_path),
        "username": get_username(config_path) or "",
    }
    print_config(settings)
    return settings


def main() -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()
    configure_logging(args.verbose)
    command = args.command

    if command is None:
        parser.print_help()
        return
    if command == "level":
        do_level(args.xp)
        return
    if command == "config":
        do_config(token=args.token, base_url=args.base_url, username=args.username)
        return

    client = client_from_config()
    try:
        if command == "profile":
            do_profile(client, args.username, top=args.top)
        elif command == "pulse":
            result = do_pulse(client, args.entries, coded_at=args.coded_at)
            if not result["ok"]:
                sys.exit(2)
        elif command == "badge":
            do_badge(client, args.username, output=args.output)
    except CodeStatsError as exc:
        print_error(exc)
        sys.exit(1)
    finally:
        client.close()
