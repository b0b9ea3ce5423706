from openai import OpenAI, OpenAIError

from ..utils.config import get_config
from ..utils.logger import get_logger
from ..zenith_api.errors import AIProviderError

log = get_logger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
SYSTEM_PROMPT = "You are a helpful assistant that breaks goals into concrete to-do list tasks."


def openai_completion(prompt: str, model: str = None, max_tokens: int = 1000) -> str:
    """
    Calls OpenAI's Chat Completions API with the given prompt.
    Returns the model's response text.
    """
    api_key = get_config("OPENAI_API_KEY")
    if not api_key:
        raise AIProviderError("OPENAI_API_KEY is not set. Add it to your .zenith.env file or environment.")

    model = model or get_config("ZENITH_AI_MODEL") or DEFAULT_MODEL
    try:
        client = OpenAI(api_key=api_key)
        log.info("Calling OpenAI chat completions (%s)", model)
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
        )
    except OpenAIError as e:
        raise AIProviderError(f"Error calling OpenAI API: {e}") from e

    content = response.choices[0].message.content
    if not content:
        raise AIProviderError("OpenAI returned an empty response")
    return content
