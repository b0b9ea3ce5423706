"""
Handles the logic for the 'delete' and 'delete-project' commands.
"""
from rich.console import Console
from rich.markup import escape

from ..utils.data_loading import open_service
from . import resolve_task_id

console = Console()


def handle_delete_task(args):
    """Handles deletion of a task."""
    service = open_service()
    task_id = resolve_task_id(service, args.task_id)
    task = service.get_task(task_id)
    service.delete_task(task_id)
    console.print(f"Deleted task {task_id}: {escape(task.title)}")


def handle_delete_project(args):
    """Handles deletion of a project, deleting or detaching its tasks."""
    service = open_service()
    project = service.store.get_project(service.user_id, args.project_id)
    affected = service.delete_project(project.id, cascade=args.cascade)
    verb = "deleted" if args.cascade else "kept without a project"
    console.print(f"Deleted project {escape(project.name)}; {affected} task(s) {verb}.")
