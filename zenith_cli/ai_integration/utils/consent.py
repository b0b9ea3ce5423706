import typer

from ...utils.config import get_settings, save_settings

CONSENT_KEY = "ALLOW_EXTERNAL_AI_PROVIDERS"


def check_ai_consent(interactive: bool = True) -> bool:
    """
    Checks if the user has consented to using external AI providers.
    If consent has not been given or denied, it prompts the user once and
    remembers the answer in the settings file.
    Returns True if consent is given, False otherwise.
    """
    consent_given = get_settings().get(CONSENT_KEY)

    if consent_given is True:
        return True

    if consent_given is False or not interactive:
        return False

    typer.echo("\n--- AI Feature Consent ---")
    typer.echo("Task generation uses a third-party AI provider (OpenAI or Anthropic).")
    typer.echo("Your goal text will be sent to the provider's API.")

    allowed = typer.confirm("Do you consent to sending it to an external AI provider?", default=False)
    save_settings({CONSENT_KEY: allowed})
    if allowed:
        typer.echo("Consent given. AI features will be enabled.")
    else:
        typer.echo("Consent denied. AI features will remain disabled.")
    return allowed
