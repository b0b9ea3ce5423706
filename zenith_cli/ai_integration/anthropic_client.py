import requests

from ..utils.config import get_config
from ..utils.logger import get_logger
from ..zenith_api.errors import AIProviderError

log = get_logger(__name__)

API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-3-haiku-20240307"


def anthropic_completion(prompt: str, model: str = None, max_tokens: int = 1000) -> str:
    """
    Calls Anthropic's Messages API with the given prompt.
    Returns the model's response text.
    """
    api_key = get_config("ANTHROPIC_API_KEY")
    if not api_key:
        raise AIProviderError("ANTHROPIC_API_KEY is not set. Add it to your .zenith.env file or environment.")

    headers = {
        "x-api-key": api_key,
        "anthropic-version": "2023-06-01",
        "Content-Type": "application/json",
    }
    json_data = {
        "model": model or get_config("ZENITH_AI_MODEL") or DEFAULT_MODEL,
        "max_tokens": max_tokens,
        "temperature": 0.7,
        "messages": [{"role": "user", "content": prompt}],
    }

    log.info("Calling Anthropic Messages API (%s)", json_data["model"])
    try:
        resp = requests.post(API_URL, headers=headers, json=json_data, timeout=30)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        raise AIProviderError(f"Error from Anthropic API: {e}") from e

    text = (data.get("content") or [{}])[0].get("text", "").strip()
    if not text:
        raise AIProviderError("Anthropic returned an empty response")
    return text
