import json
from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..utils.data_loading import open_service
from ..utils.format_utils import format_due
from ..zenith_api.data_models import Task
from ..zenith_api.filters import TaskFilter, filter_tasks, search_tasks
from ..zenith_api.recurrence import describe

console = Console()

_PRIORITY_STYLE = {"High": "red", "Medium": "yellow", "Low": "blue"}


def render_task_table(tasks: List[Task], project_names: Optional[Dict[str, str]] = None, title: Optional[str] = None) -> Table:
    project_names = project_names or {}
    table = Table(show_header=True, header_style="bold", title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Task", style="green")
    table.add_column("Priority")
    table.add_column("Due Date", style="yellow")
    table.add_column("Project", style="magenta")
    table.add_column("Status")

    for task in tasks:
        priority = task.priority.value if task.priority else "-"
        style = _PRIORITY_STYLE.get(priority, "")
        name = escape(task.title)
        if task.subtasks:
            done = sum(1 for s in task.subtasks if s.is_completed)
            name += f" ({done}/{len(task.subtasks)})"
        if task.recurrence and task.recurrence.is_active:
            name += f" [dim]↻ {describe(task.recurrence)}[/dim]"
        table.add_row(
            task.id or "",
            name,
            f"[{style}]{priority}[/{style}]" if style else priority,
            format_due(task.due_date),
            escape(project_names.get(task.project_id, "")) if task.project_id else "",
            "✓" if task.is_completed else " ",
        )
    return table


def handle_list(args):
    """
    Lists tasks for the active filter, optionally limited to a project or tag.
    """
    service = open_service()
    tasks = service.list_tasks(project_id=args.project)
    if args.tag:
        tasks = [t for t in tasks if args.tag in t.tags]
    task_filter = TaskFilter(getattr(args.filter, "value", args.filter))
    tasks = filter_tasks(tasks, task_filter, service.clock())

    if args.json:
        print(json.dumps([t.to_dict() for t in tasks], indent=2))
        return

    if not tasks:
        console.print(f"No {task_filter.value} tasks.")
        return
    names = {p.id: p.name for p in service.list_projects()}
    console.print(render_task_table(tasks, names, title=f"{task_filter.value.title()} tasks"))
    console.print(f"\n{len(tasks)} task(s)")


def handle_search(args):
    """
    Fuzzy search over task titles and descriptions.
    """
    service = open_service()
    tasks = service.list_tasks()
    if not args.include_completed:
        tasks = [t for t in tasks if not t.is_completed]
    matches = search_tasks(tasks, args.query, threshold=args.threshold)

    if args.json:
        print(json.dumps([dict(t.to_dict(), score=score) for t, score in matches], indent=2))
        return

    if not matches:
        console.print("No matching tasks found.")
        return
    names = {p.id: p.name for p in service.list_projects()}
    console.print(render_task_table([t for t, _ in matches], names))
    console.print(f"\nFound {len(matches)} matching tasks")
