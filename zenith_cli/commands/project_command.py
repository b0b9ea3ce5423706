import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..utils.data_loading import open_service

console = Console()


def handle_create_project(args):
    """Handles creation of a new project."""
    service = open_service()
    project = service.add_project(args.name, icon=args.icon, color=args.color)
    console.print(f"[green]Created project {project.id}[/green]: {escape(project.name)}")


def handle_edit_project(args):
    service = open_service()
    project = service.edit_project(args.project_id, name=args.name, icon=args.icon, color=args.color)
    console.print(f"Updated project {project.id}: {escape(project.name)}")


def handle_list_projects(args):
    """List projects with their open and total task counts."""
    service = open_service()
    projects = service.list_projects()
    tasks = service.list_tasks()

    rows = []
    for project in projects:
        mine = [t for t in tasks if t.project_id == project.id]
        rows.append((project, sum(1 for t in mine if not t.is_completed), len(mine)))

    if args.json:
        print(json.dumps([dict(p.to_dict(), open=o, total=n) for p, o, n in rows], indent=2))
        return

    if not rows:
        console.print("No projects yet. Create one with 'zenith create-project'.")
        return
    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Project")
    table.add_column("Icon")
    table.add_column("Open", justify="right")
    table.add_column("Total", justify="right")
    for project, open_count, total in rows:
        table.add_row(
            project.id,
            f"[{project.color}]{escape(project.name)}[/]",
            project.icon,
            str(open_count),
            str(total),
        )
    console.print(table)
