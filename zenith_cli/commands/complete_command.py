from rich.console import Console
from rich.markup import escape

from ..utils.data_loading import open_service
from ..utils.format_utils import format_due
from ..zenith_api.completion import CompletionResult, points_for
from . import resolve_task_id

console = Console()


def _report_completion(service, task_id: str, result) -> None:
    task = service.get_task(task_id)
    console.print(f"✔ Completed {escape(task.title)} (+{points_for(task.priority)} points)")
    console.print(f"  Level {result.profile.level}, {result.profile.points} points, streak {result.profile.streak}")
    if result.spawned_task is not None:
        console.print(f"  Next occurrence {result.spawned_task.id} due {format_due(result.spawned_task.due_date)}")


def handle_complete(args):
    """Mark one or more tasks complete, awarding points and advancing the streak."""
    service = open_service()
    task_ids = args.task_id if isinstance(args.task_id, (list, tuple)) else [args.task_id]
    for ref in task_ids:
        task_id = resolve_task_id(service, ref)
        result = service.complete_task(task_id)
        _report_completion(service, task_id, result)


def handle_reopen(args):
    """Mark a completed task as open again. Points already earned are kept."""
    service = open_service()
    task = service.reopen_task(resolve_task_id(service, args.task_id))
    console.print(f"↺ Reopened {escape(task.title)}")


def handle_toggle(args):
    service = open_service()
    task_id = resolve_task_id(service, args.task_id)
    result = service.toggle_task(task_id)
    if isinstance(result, CompletionResult):
        _report_completion(service, task_id, result)
    else:
        console.print(f"↺ Reopened {escape(result.title)}")
