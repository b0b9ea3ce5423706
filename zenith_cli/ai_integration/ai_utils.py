import json
import re
from dataclasses import dataclass
from typing import List, Optional

from ..utils.logger import get_logger
from ..zenith_api.data_models import Priority, parse_priority
from ..zenith_api.errors import AIProviderError
from .anthropic_client import anthropic_completion
from .openai_client import openai_completion

log = get_logger(__name__)

PROVIDERS = ("openai", "anthropic")

GENERATE_PROMPT = """Task Generation Request

Break the following goal into {count} concrete, actionable to-do list tasks.

Goal: {goal}

Reply with ONLY a JSON array. Each element must be an object with:
  "title": short imperative task title (required)
  "description": one sentence of detail (optional)
  "priority": one of "Low", "Medium", "High"
"""

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


@dataclass
class GeneratedTask:
    title: str
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM


def create_generation_prompt(goal: str, count: int) -> str:
    return GENERATE_PROMPT.format(goal=goal.strip(), count=count)


def _extract_json(text: str) -> str:
    fenced = _FENCE.search(text)
    if fenced:
        return fenced.group(1).strip()
    start, end = text.find("["), text.rfind("]")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text.strip()


def parse_generated_tasks(text: str) -> List[GeneratedTask]:
    """Parse the model's reply into tasks, dropping entries without a title."""
    try:
        items = json.loads(_extract_json(text))
    except json.JSONDecodeError as e:
        raise AIProviderError(f"Could not parse the AI response as JSON: {e}") from e
    if isinstance(items, dict):
        items = items.get("tasks", [])
    if not isinstance(items, list):
        raise AIProviderError("The AI response was not a list of tasks")

    tasks = []
    for item in items:
        if isinstance(item, str):
            item = {"title": item}
        if not isinstance(item, dict):
            continue
        title = str(item.get("title") or "").strip()
        if not title:
            continue
        description = str(item.get("description") or "").strip() or None
        tasks.append(GeneratedTask(
            title=title,
            description=description,
            priority=parse_priority(item.get("priority")) or Priority.MEDIUM,
        ))
    return tasks


def generate_tasks(goal: str, count: int = 5, provider: str = "openai") -> List[GeneratedTask]:
    """Ask the configured AI provider to break ``goal`` into tasks."""
    if not goal or not goal.strip():
        raise AIProviderError("A goal is required to generate tasks.")
    if provider == "openai":
        completion = openai_completion
    elif provider == "anthropic":
        completion = anthropic_completion
    else:
        raise AIProviderError(f"Unknown AI provider '{provider}'. Choose one of: {', '.join(PROVIDERS)}")

    reply = completion(create_generation_prompt(goal, count))
    tasks = parse_generated_tasks(reply)
    log.info("Provider %s suggested %d task(s)", provider, len(tasks))
    return tasks[:count]
