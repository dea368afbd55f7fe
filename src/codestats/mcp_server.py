"""MCP server for codestats.

Exposes Code::Stats lookups and level math as MCP tools.
Run via: python3 -m codestats.mcp_server
"""
from __future__ import annotations

from dataclasses import asdict
from typing import Any

from mcp.server.fastmcp import FastMCP

from codestats import levels
from codestats.errors import CodeStatsError, is_temporary

mcp = FastMCP(name="codestats")


def _get_client():
    from codestats.config import client_from_config
    return client_from_config()


def _error(exc: CodeStatsError) -> dict[str, Any]:
    return {"error": str(exc), "temporary": is_temporary(exc)}


@mcp.tool()
def get_level(xp: int) -> dict[str, Any]:
    """Get level, progress within the level and the next threshold for an XP amount."""
    return {
        "xp": xp,
        "level": levels.get_level(xp),
        "percentage": round(levels.get_level_percentage(xp), 4),
        "next_level_xp": levels.get_xp_for_next_level(xp),
    }


@mcp.tool()
def get_profile(username: str = "") -> dict[str, Any]:
    """Get a user's public Code::Stats profile with level info.

    username: Code::Stats username. If empty, uses the configured username.
    """
    from codestats.config import get_username

    client = _get_client()
    try:
        profile = client.get_user_profile(username or get_username() or "")
    except CodeStatsError as exc:
        return _error(exc)
    finally:
        client.close()
    result = asdict(profile)
    result["level"] = profile.level
    result["level_percentage"] = round(profile.level_percentage, 4)
    result["top_languages"] = [
        {"language": name, "xps": info.xps, "level": levels.get_level(info.xps)}
        for name, info in profile.top_languages(5)
    ]
    return result


@mcp.tool()
def send_pulse(xps: dict[str, int]) -> dict[str, Any]:
    """Send XP gains per language for the configured machine token, stamped now.

    xps: mapping of language name to XP gained, e.g. {"Python": 12}.
    """
    from codestats.models import LanguageXP, Pulse

    pulse = Pulse.now([LanguageXP(language, xp) for language, xp in xps.items()])
    client = _get_client()
    try:
        client.send_pulse(pulse)
    except CodeStatsError as exc:
        return _error(exc)
    finally:
        client.close()
    return {"ok": True, "total_xp": sum(xps.values()), "languages": len(xps)}


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
