from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape

from ..utils.data_loading import open_service
from ..utils.format_utils import format_due, parse_date_string
from ..zenith_api.data_models import Frequency, Priority, Recurrence
from ..zenith_api.errors import InvalidTaskError
from ..zenith_api.recurrence import describe
from . import resolve_task_id

console = Console()


def build_recurrence(frequency: Optional[str], interval: Optional[int]) -> Optional[Recurrence]:
    if frequency is None:
        return None
    frequency = Frequency(getattr(frequency, "value", frequency))
    if frequency is Frequency.NONE:
        return None
    if interval is not None and interval < 1:
        raise InvalidTaskError("--every must be at least 1.")
    return Recurrence(frequency=frequency, interval=interval or 1)


def _parse_due(due: Optional[str]):
    if not due:
        return None
    parsed = parse_date_string(due)
    if parsed is None:
        raise InvalidTaskError(f"Could not understand due date '{due}'.")
    return parsed


def handle_add(args):
    """
    Creates a new task with the provided arguments.
    """
    service = open_service()
    recurrence = build_recurrence(args.recurrence, args.interval)
    due_date = _parse_due(args.due)
    if recurrence is not None and due_date is None:
        console.print("[yellow]Recurring task has no due date; the next occurrence will be dated from completion.[/yellow]")

    task = service.add_task(
        title=args.title,
        description=args.description,
        priority=Priority(getattr(args.priority, "value", args.priority)),
        due_date=due_date,
        recurrence=recurrence,
        tags=args.tags or (),
        project_id=args.project,
    )
    console.print(f"[green]Created task {task.id}[/green]: {escape(task.title)}")
    if task.due_date:
        console.print(f"  due {format_due(task.due_date)}")
    if task.recurrence:
        console.print(f"  repeats {describe(task.recurrence)}")


def handle_edit(args):
    """Edit the fields given on the command line; everything else is left alone."""
    service = open_service()
    task_id = resolve_task_id(service, args.task_id)
    fields: Dict[str, Any] = {}
    if args.title is not None:
        fields["title"] = args.title
    if args.description is not None:
        fields["description"] = args.description or None
    if args.priority is not None:
        fields["priority"] = Priority(getattr(args.priority, "value", args.priority))
    if args.clear_due:
        fields["due_date"] = None
    elif args.due is not None:
        fields["due_date"] = _parse_due(args.due)
    if args.recurrence is not None:
        fields["recurrence"] = build_recurrence(args.recurrence, args.interval)
    elif args.interval is not None:
        current = service.get_task(task_id).recurrence
        if current is None or not current.is_active:
            raise InvalidTaskError("--every needs --repeat on a task that does not repeat.")
        fields["recurrence"] = build_recurrence(current.frequency, args.interval)
    if args.tags:
        fields["tags"] = args.tags
    if args.clear_project:
        fields["project_id"] = None
    elif args.project is not None:
        fields["project_id"] = args.project

    if not fields:
        console.print("Nothing to change.")
        return
    task = service.edit_task(task_id, **fields)
    console.print(f"[green]Updated task {task.id}[/green]: {escape(task.title)}")
