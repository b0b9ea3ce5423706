import time

from rich.console import Console
from rich.markup import escape

from ..utils.config import get_int_config
from ..utils.data_loading import open_service
from ..zenith_api.focus import FOCUS_TIME_MINUTES, FocusSession
from . import resolve_task_id

console = Console()


def run_session(session: FocusSession, sleep=time.sleep) -> bool:
    """Tick the session once a second until it ends. Returns True if it ran to completion."""
    try:
        with console.status(f"Focusing on {escape(session.task_title)}: {session.display()}") as status:
            while not session.is_finished():
                sleep(1)
                status.update(f"Focusing on {escape(session.task_title)}: {session.display()}")
    except KeyboardInterrupt:
        session.stop()
        return False
    return True


def handle_focus(args):
    """Run a focus session for one task, optionally completing it afterwards."""
    service = open_service()
    task_id = resolve_task_id(service, args.task_id)
    task = service.get_task(task_id)
    minutes = args.minutes if args.minutes is not None else get_int_config("ZENITH_FOCUS_MINUTES", FOCUS_TIME_MINUTES)

    session = FocusSession(task.title, minutes=minutes)
    console.print(f"Focusing on: [bold]{escape(task.title)}[/bold] for {minutes} minute(s). Ctrl-C stops the session.")
    if not run_session(session):
        console.print(f"Session stopped with {session.display()} left.")
        return

    console.print("Focus session complete! Time to take a break.")
    if args.complete and not task.is_completed:
        result = service.complete_task(task_id)
        console.print(f"✔ Completed {escape(task.title)}; {result.profile.points} points, streak {result.profile.streak}")
