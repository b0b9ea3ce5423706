from rich.console import Console

from ..ai_integration.ai_utils import generate_tasks
from ..ai_integration.utils.consent import check_ai_consent
from ..utils.config import get_config
from ..utils.data_loading import open_service

console = Console()


def handle_generate(args):
    """
    Ask an AI provider to break a goal into tasks; with --add they are stored.
    """
    if not check_ai_consent():
        console.print("AI features are disabled. Nothing was sent.")
        return

    provider = args.provider or get_config("ZENITH_AI_PROVIDER", "openai")
    suggestions = generate_tasks(args.goal, count=args.count, provider=provider)
    if not suggestions:
        console.print("The AI did not suggest any tasks.")
        return

    for i, item in enumerate(suggestions, start=1):
        console.print(f"{i}. [{item.priority.value}] {item.title}", markup=False)
        if item.description:
            console.print(f"   {item.description}", markup=False)

    if not args.add:
        console.print("\nRe-run with --add to save these tasks.")
        return

    service = open_service()
    for item in suggestions:
        service.add_task(
            title=item.title,
            description=item.description,
            priority=item.priority,
            project_id=args.project,
        )
    console.print(f"\n[green]Added {len(suggestions)} task(s).[/green]")
