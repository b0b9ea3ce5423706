from rich.console import Console
from rich.markup import escape

from ..utils.data_loading import open_service
from . import resolve_task_id

console = Console()


def handle_add_subtask(args):
    service = open_service()
    task_id = resolve_task_id(service, args.task_id)
    subtask = service.add_subtask(task_id, args.title)
    console.print(f"Added subtask {subtask.id}: {escape(subtask.title)}")


def handle_toggle_subtask(args):
    service = open_service()
    task_id = resolve_task_id(service, args.task_id)
    subtask = service.toggle_subtask(task_id, args.subtask_id)
    mark = "☑" if subtask.is_completed else "☐"
    console.print(f"{mark} {escape(subtask.title)}")


def handle_delete_subtask(args):
    service = open_service()
    task_id = resolve_task_id(service, args.task_id)
    service.delete_subtask(task_id, args.subtask_id)
    console.print(f"Deleted subtask {args.subtask_id}")
