#!/usr/bin/env python3
import logging
import sys
from enum import Enum
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .utils.config import load_env_vars
from .utils.logger import set_level
from .zenith_api.errors import ZenithError

# Load environment variables
load_env_vars()

err_console = Console(stderr=True)


class PriorityChoice(str, Enum):
    Low = "Low"
    Medium = "Medium"
    High = "High"


class RepeatChoice(str, Enum):
    none = "none"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class FilterChoice(str, Enum):
    all = "all"
    today = "today"
    upcoming = "upcoming"
    completed = "completed"


class ProviderChoice(str, Enum):
    openai = "openai"
    anthropic = "anthropic"


# Create app instance
app = typer.Typer(
    name="zenith",
    help="Zenith List - tasks, projects, streaks and levels from the command line.",
    no_args_is_help=True,
)

from .commands.add_command import handle_add, handle_edit
from .commands.calendar_command import handle_calendar, handle_export_ics
from .commands.complete_command import handle_complete, handle_reopen, handle_toggle
from .commands.delete_command import handle_delete_project, handle_delete_task
from .commands.focus_command import handle_focus
from .commands.generate_command import handle_generate
from .commands.list_command import handle_list, handle_search
from .commands.profile_command import handle_init, handle_profile
from .commands.project_command import handle_create_project, handle_edit_project, handle_list_projects
from .commands.subtask_command import handle_add_subtask, handle_delete_subtask, handle_toggle_subtask


def _run(handler, args) -> None:
    """Run a command handler, turning domain errors into a clean exit code."""
    try:
        handler(args)
    except ZenithError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(code=1)


def _version_callback(value: bool):
    if value:
        typer.echo(f"zenith {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log retries, spawned tasks and provider calls."),
):
    """Zenith List - tasks, projects, streaks and levels from the command line."""
    if verbose:
        set_level(logging.INFO)


@app.command("init")
def init(
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Display name for the profile."),
    email: Optional[str] = typer.Option(None, "--email", help="Email shown on the profile."),
):
    """Create your profile (points 0, level 1, no streak)."""
    args = type('Args', (), {
        'username': username,
        'email': email,
    })
    _run(handle_init, args)


@app.command("profile")
def profile(
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format."),
):
    """Show level, points, progress to the next level and streak."""
    args = type('Args', (), {'json': json_output})
    _run(handle_profile, args)


@app.command("add")
def add(
    title: str = typer.Option(..., "--title", "-t", help="Title of the new task."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Optional description."),
    priority: PriorityChoice = typer.Option(PriorityChoice.Medium, "--priority", "-p", help="Low, Medium or High."),
    due: Optional[str] = typer.Option(None, "--due", help="Due date (natural language or YYYY-MM-DD)."),
    repeat: Optional[RepeatChoice] = typer.Option(None, "--repeat", "-r", help="Recurrence: daily, weekly or monthly."),
    every: Optional[int] = typer.Option(None, "--every", help="Recurrence interval, e.g. --repeat weekly --every 2."),
    tags: Optional[List[str]] = typer.Option(None, "--tag", help="Tag to attach; repeat for several."),
    project: Optional[str] = typer.Option(None, "--project", help="Project ID to place the task in."),
):
    """Add a new task."""
    args = type('Args', (), {
        'title': title,
        'description': description,
        'priority': priority,
        'due': due,
        'recurrence': repeat,
        'interval': every,
        'tags': tags,
        'project': project,
    })
    _run(handle_add, args)


@app.command("edit")
def edit(
    task_id: str = typer.Argument(..., help="Task ID (or unique prefix)."),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description; empty string clears it."),
    priority: Optional[PriorityChoice] = typer.Option(None, "--priority", "-p", help="Low, Medium or High."),
    due: Optional[str] = typer.Option(None, "--due", help="New due date."),
    clear_due: bool = typer.Option(False, "--clear-due", help="Remove the due date."),
    repeat: Optional[RepeatChoice] = typer.Option(None, "--repeat", "-r", help="Recurrence; 'none' stops repeating."),
    every: Optional[int] = typer.Option(None, "--every", help="Recurrence interval."),
    tags: Optional[List[str]] = typer.Option(None, "--tag", help="Replace tags; repeat for several."),
    project: Optional[str] = typer.Option(None, "--project", help="Move to project ID."),
    clear_project: bool = typer.Option(False, "--no-project", help="Remove the task from its project."),
):
    """Edit an existing task."""
    args = type('Args', (), {
        'task_id': task_id,
        'title': title,
        'description': description,
        'priority': priority,
        'due': due,
        'clear_due': clear_due,
        'recurrence': repeat,
        'interval': every,
        'tags': tags,
        'project': project,
        'clear_project': clear_project,
    })
    _run(handle_edit, args)


@app.command("list")
def list_tasks(
    filter: FilterChoice = typer.Option(FilterChoice.all, "--filter", "-f", help="all, today, upcoming or completed."),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Only tasks in this project ID."),
    tag: Optional[str] = typer.Option(None, "--tag", help="Only tasks with this tag."),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format."),
):
    """List tasks, newest first."""
    args = type('Args', (), {
        'filter': filter,
        'project': project,
        'tag': tag,
        'json': json_output,
    })
    _run(handle_list, args)


@app.command("search")
def search(
    query: str = typer.Argument(..., help="Text to look for in titles and descriptions."),
    threshold: int = typer.Option(70, "--threshold", help="Minimum fuzzy match score (0-100)."),
    include_completed: bool = typer.Option(False, "--all", "-a", help="Include completed tasks."),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format."),
):
    """Fuzzy search for tasks."""
    args = type('Args', (), {
        'query': query,
        'threshold': threshold,
        'include_completed': include_completed,
        'json': json_output,
    })
    _run(handle_search, args)


@app.command("complete")
def complete(
    task_ids: List[str] = typer.Argument(..., help="One or more task IDs to complete."),
):
    """Mark tasks as complete, earning points and extending your streak."""
    args = type('Args', (), {'task_id': task_ids})
    _run(handle_complete, args)


@app.command("reopen")
def reopen(
    task_id: str = typer.Argument(..., help="Task ID to mark as open again."),
):
    """Reopen a completed task."""
    args = type('Args', (), {'task_id': task_id})
    _run(handle_reopen, args)


@app.command("toggle")
def toggle(
    task_id: str = typer.Argument(..., help="Task ID to toggle."),
):
    """Complete an open task, or reopen a completed one."""
    args = type('Args', (), {'task_id': task_id})
    _run(handle_toggle, args)


@app.command("delete")
def delete_task_command(
    task_id: str = typer.Argument(..., help="Task ID to delete."),
):
    """Delete a task."""
    args = type('Args', (), {'task_id': task_id})
    _run(handle_delete_task, args)


@app.command("add-subtask")
def add_subtask(
    task_id: str = typer.Argument(..., help="Parent task ID."),
    title: str = typer.Option(..., "--title", "-t", help="Subtask title."),
):
    """Add a subtask to a task."""
    args = type('Args', (), {'task_id': task_id, 'title': title})
    _run(handle_add_subtask, args)


@app.command("toggle-subtask")
def toggle_subtask(
    task_id: str = typer.Argument(..., help="Parent task ID."),
    subtask_id: str = typer.Argument(..., help="Subtask ID."),
):
    """Check or uncheck a subtask."""
    args = type('Args', (), {'task_id': task_id, 'subtask_id': subtask_id})
    _run(handle_toggle_subtask, args)


@app.command("delete-subtask")
def delete_subtask(
    task_id: str = typer.Argument(..., help="Parent task ID."),
    subtask_id: str = typer.Argument(..., help="Subtask ID."),
):
    """Remove a subtask."""
    args = type('Args', (), {'task_id': task_id, 'subtask_id': subtask_id})
    _run(handle_delete_subtask, args)


@app.command("create-project")
def create_project_command(
    name: str = typer.Option(..., "--name", "-n", help="Project name."),
    icon: Optional[str] = typer.Option(None, "--icon", help="briefcase, home, cart, book-open-variant, dumbbell, heart, star or flag."),
    color: Optional[str] = typer.Option(None, "--color", help="Hex color, e.g. #FF6347."),
):
    """Create a new project."""
    args = type('Args', (), {'name': name, 'icon': icon, 'color': color})
    _run(handle_create_project, args)


@app.command("edit-project")
def edit_project_command(
    project_id: str = typer.Argument(..., help="Project ID."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New name."),
    icon: Optional[str] = typer.Option(None, "--icon", help="New icon."),
    color: Optional[str] = typer.Option(None, "--color", help="New hex color."),
):
    """Rename or restyle a project."""
    args = type('Args', (), {'project_id': project_id, 'name': name, 'icon': icon, 'color': color})
    _run(handle_edit_project, args)


@app.command("list-projects")
def list_projects(
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format."),
):
    """List projects with task counts."""
    args = type('Args', (), {'json': json_output})
    _run(handle_list_projects, args)


@app.command("delete-project")
def delete_project_command(
    project_id: str = typer.Argument(..., help="Project ID to delete."),
    cascade: bool = typer.Option(True, "--cascade/--keep-tasks", help="Delete the project's tasks too (default), or keep them."),
):
    """Delete a project and, by default, all of its tasks."""
    args = type('Args', (), {'project_id': project_id, 'cascade': cascade})
    _run(handle_delete_project, args)


@app.command("calendar")
def calendar(
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Day to show (defaults to today)."),
):
    """Show days with tasks due this month and the agenda for one day."""
    args = type('Args', (), {'date': date})
    _run(handle_calendar, args)


@app.command("export-ics")
def export_ics_command(
    output: str = typer.Option("zenith.ics", "--output", "-o", help="File to write."),
    include_completed: bool = typer.Option(False, "--all", "-a", help="Include completed tasks."),
):
    """Export tasks with due dates to an iCalendar file."""
    args = type('Args', (), {'output': output, 'include_completed': include_completed})
    _run(handle_export_ics, args)


@app.command("focus")
def focus(
    task_id: str = typer.Argument(..., help="Task to focus on."),
    minutes: Optional[int] = typer.Option(None, "--minutes", "-m", min=0, help="Session length (default 25)."),
    complete: bool = typer.Option(False, "--complete", help="Complete the task when the session ends."),
):
    """Run a focus timer for a task."""
    args = type('Args', (), {'task_id': task_id, 'minutes': minutes, 'complete': complete})
    _run(handle_focus, args)


@app.command("generate")
def generate(
    goal: str = typer.Option(..., "--goal", "-g", help="What you want to get done."),
    count: int = typer.Option(5, "--count", "-c", min=1, max=20, help="How many tasks to ask for."),
    provider: Optional[ProviderChoice] = typer.Option(None, "--provider", help="openai or anthropic."),
    add: bool = typer.Option(False, "--add", help="Save the suggested tasks."),
    project: Optional[str] = typer.Option(None, "--project", help="Project ID for added tasks."),
):
    """Use AI to break a goal into tasks."""
    args = type('Args', (), {
        'goal': goal,
        'count': count,
        'provider': provider.value if provider else None,
        'add': add,
        'project': project,
    })
    _run(handle_generate, args)


if __name__ == "__main__":
    sys.exit(app())
