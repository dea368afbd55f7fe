"""Rich terminal display for codestats."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from codestats.errors import CodeStatsError, is_temporary
from codestats.levels import get_level, get_level_percentage, get_xp_for_next_level, xp_progress_in_level
from codestats.models import Pulse, UserProfile

console = Console()
err_console = Console(stderr=True)

# (minimum level, Rich color), highest first
_LEVEL_COLORS: list[tuple[int, str]] = [
    (40, "orange_red1"),
    (30, "dark_violet"),
    (20, "cyan"),
    (10, "gold1"),
    (5, "grey70"),
    (0, "dark_orange3"),
]


def level_color(level: int) -> str:
    """Map a level to a Rich color name."""
    for min_level, color in _LEVEL_COLORS:
        if level >= min_level:
            return color
    return _LEVEL_COLORS[-1][1]


def format_number(n: int) -> str:
    """Format large numbers: 421543 -> '421.5K', 1200 -> '1,200', 1234567 -> '1.2M'."""
    if n >= 1_000_000:
        value = n / 1_000_000
        if value >= 100:
            return f"{value:.0f}M"
        return f"{value:.1f}M"
    if n >= 10_000:
        return f"{n / 1_000:.1f}K"
    return f"{n:,}"


def _xp_bar(ratio: float, width: int = 20) -> str:
    """Render a progress bar as text: [████████░░░░░░░░░░░░]."""
    ratio = min(max(ratio, 0.0), 1.0)
    filled = int(ratio * width)
    return "[" + "█" * filled + "░" * (width - filled) + "]"


def print_profile(profile: UserProfile, top: int = 10) -> None:
    """Print a user's level, progress and per-language/machine breakdown."""
    level = profile.level
    color = level_color(level)
    xp_in_level, xp_span = xp_progress_in_level(profile.total_xp)
    pct = profile.level_percentage

    lines: list[str] = [
        "",
        f"  [bold {color}]{escape(profile.user)} - Level {level}[/]",
        f"  {_xp_bar(pct)} {format_number(xp_in_level)}/{format_number(xp_span)} XP ({pct:.0%})",
        f"  Total: [bold]{format_number(profile.total_xp)}[/] XP"
        + (f"  [green]+{format_number(profile.new_xp)}[/] new" if profile.new_xp else ""),
        "",
    ]
    console.print(Panel("\n".join(lines), title="[bold]CODE::STATS[/]", box=box.ROUNDED, border_style=color, width=60))

    if profile.languages:
        table = Table(title="Languages", box=box.ROUNDED, border_style=color, header_style="bold")
        table.add_column("Language", style="bold")
        table.add_column("Level", justify="right")
        table.add_column("XP", justify="right")
        table.add_column("New", justify="right")
        for name, info in profile.top_languages(top):
            table.add_row(escape(name), str(get_level(info.xps)), format_number(info.xps), format_number(info.new_xps))
        console.print(table)

    if profile.machines:
        table = Table(title="Machines", box=box.ROUNDED, border_style=color, header_style="bold")
        table.add_column("Machine", style="bold")
        table.add_column("XP", justify="right")
        table.add_column("New", justify="right")
        for name, info in sorted(profile.machines.items(), key=lambda item: -item[1].xps):
            table.add_row(escape(name), format_number(info.xps), format_number(info.new_xps))
        console.print(table)


def print_level(xp: int) -> None:
    """Print the level breakdown for a raw XP amount."""
    level = get_level(xp)
    pct = get_level_percentage(xp)
    next_threshold = get_xp_for_next_level(xp)
    color = level_color(level)
    console.print(f"[bold {color}]Level {level}[/] {_xp_bar(pct)} {pct:.1%}")
    console.print(f"  {format_number(max(0, next_threshold - xp))} XP to level {level + 1} ({format_number(next_threshold)} total)")


def print_pulse_result(pulse: Pulse) -> None:
    total = sum(entry.xp for entry in pulse.xps)
    console.print(f"[green]✓[/] Pulse sent: {format_number(total)} XP across {len(pulse.xps)} language(s)")
    for entry in pulse.xps:
        console.print(f"  {escape(entry.language)}: +{entry.xp}")


def print_badge_result(output: str, username: str, level: int) -> None:
    console.print(f"[green]✓[/] Badge for {escape(username)} (level {level}) written to [bold]{escape(output)}[/]")
    console.print(f"  Markdown: !\\[Code::Stats]({escape(output)})")


def print_config(settings: dict) -> None:
    """Print resolved settings. The token is masked."""
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for key, value in settings.items():
        if key == "api_token" and value:
            value = value[:4] + "…" if len(value) > 4 else "…"
        table.add_row(key, escape(value) if value else "[dim](not set)[/]")
    console.print(table)


def print_error(err: CodeStatsError) -> None:
    err_console.print(f"[bold red]Error:[/] {escape(str(err))}")
    if is_temporary(err):
        err_console.print("[dim]This looks temporary; try again in a moment.[/]")
