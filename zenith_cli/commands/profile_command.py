import json

from rich.console import Console
from rich.markup import escape

from ..utils.data_loading import open_service
from ..utils.format_utils import progress_bar
from ..zenith_api.levels import level_progress

console = Console()


def handle_init(args):
    """Create the gamification profile for the configured user."""
    service = open_service()
    service.create_profile(username=args.username, email=args.email)
    name = args.username or service.user_id
    console.print(f"[green]Profile created for {escape(name)}.[/green] Level 1, 0 points.")


def handle_profile(args):
    """Show level, progress towards the next level and the current streak."""
    service = open_service()
    profile = service.get_profile()
    stats = level_progress(profile.points, profile.streak)

    if args.json:
        print(json.dumps({
            "user": service.user_id,
            "username": profile.username,
            "level": stats.level,
            "points": stats.points,
            "points_in_current_level": stats.points_in_current_level,
            "points_for_next_level": stats.points_for_next_level,
            "progress": stats.progress,
            "streak": stats.streak,
            "last_completion_date": profile.last_completion_date.isoformat() if profile.last_completion_date else None,
        }, indent=2))
        return

    console.print(f"[bold]{escape(profile.username or service.user_id)}[/bold]")
    console.print(f"Level {stats.level}  ({stats.points} points)")
    console.print(f"{progress_bar(stats.progress)} {stats.points_in_current_level}/100")
    console.print(f"Streak: {stats.streak} day(s)")
