import calendar as month_calendar
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..utils.data_loading import open_service
from ..utils.format_utils import parse_day
from ..zenith_api.errors import ZenithError
from ..zenith_api.filters import export_ics, marked_dates, tasks_for_day
from .list_command import render_task_table

console = Console()

_DOT = {"High": "[red]●[/red]", "Medium": "[yellow]●[/yellow]", "Low": "[blue]●[/blue]"}


def handle_calendar(args):
    """
    Show which days of the month have tasks due, then the agenda for one day.
    """
    service = open_service()
    if args.date:
        selected = parse_day(args.date)
        if selected is None:
            raise ZenithError(f"Could not understand date '{args.date}'.")
    else:
        selected = service.clock().astimezone().date()

    tasks = service.list_tasks()
    marks = marked_dates(tasks)

    console.print(f"[bold]{month_calendar.month_name[selected.month]} {selected.year}[/bold]")
    _, days_in_month = month_calendar.monthrange(selected.year, selected.month)
    for day in range(1, days_in_month + 1):
        current = date(selected.year, selected.month, day)
        priorities = marks.get(current)
        if not priorities and current != selected:
            continue
        dots = "".join(_DOT.get(p.value if p else "", "●") for p in priorities or [])
        marker = "➜" if current == selected else " "
        console.print(f"{marker} {current.isoformat()} {dots}")

    agenda = tasks_for_day(tasks, selected)
    console.print()
    if not agenda:
        console.print(f"No tasks due on {selected.isoformat()}.")
        return
    names = {p.id: p.name for p in service.list_projects()}
    console.print(render_task_table(agenda, names, title=f"Agenda for {selected.isoformat()}"))


def handle_export_ics(args):
    """Write tasks with due dates to an iCalendar file as to-dos."""
    service = open_service()
    tasks = service.list_tasks()
    if not args.include_completed:
        tasks = [t for t in tasks if not t.is_completed]
    output = Path(args.output).expanduser()
    count = export_ics(tasks, output)
    console.print(f"Exported {count} task(s) to {escape(str(output))}")
