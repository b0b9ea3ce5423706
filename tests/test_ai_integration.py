import unittest
from unittest.mock import MagicMock, patch

import requests

from zenith_cli.ai_integration.ai_utils import generate_tasks, parse_generated_tasks
from zenith_cli.ai_integration.anthropic_client import anthropic_completion
from zenith_cli.ai_integration.openai_client import openai_completion
from zenith_cli.ai_integration.utils.consent import CONSENT_KEY, check_ai_consent
from zenith_cli.zenith_api.data_models import Priority
from zenith_cli.zenith_api.errors import AIProviderError

REPLY = """Here you go:
```json
[
  {"title": "Book venue", "description": "Call three places", "priority": "High"},
  {"title": "Send invites", "priority": "urgent"},
  {"description": "no title here"}
]
```"""


class TestParsing(unittest.TestCase):
    def test_parse_fenced_reply(self):
        tasks = parse_generated_tasks(REPLY)
        self.assertEqual([t.title for t in tasks], ["Book venue", "Send invites"])
        self.assertEqual(tasks[0].priority, Priority.HIGH)
        self.assertEqual(tasks[0].description, "Call three places")
        # unknown priorities fall back to Medium
        self.assertEqual(tasks[1].priority, Priority.MEDIUM)

    def test_parse_bare_list_of_strings(self):
        tasks = parse_generated_tasks('Sure! ["Stretch", "Hydrate"]')
        self.assertEqual([t.title for t in tasks], ["Stretch", "Hydrate"])

    def test_parse_tasks_object(self):
        tasks = parse_generated_tasks('{"tasks": [{"title": "One"}]}')
        self.assertEqual(len(tasks), 1)

    def test_parse_garbage(self):
        with self.assertRaises(AIProviderError):
            parse_generated_tasks("I cannot help with that")


class TestGenerateTasks(unittest.TestCase):
    @patch("zenith_cli.ai_integration.ai_utils.openai_completion")
    def test_generate_with_openai(self, mock_completion):
        mock_completion.return_value = '[{"title": "A"}, {"title": "B"}, {"title": "C"}]'
        tasks = generate_tasks("Plan a party", count=2)
        self.assertEqual([t.title for t in tasks], ["A", "B"])
        self.assertIn("Plan a party", mock_completion.call_args[0][0])

    @patch("zenith_cli.ai_integration.ai_utils.anthropic_completion")
    def test_generate_with_anthropic(self, mock_completion):
        mock_completion.return_value = '[{"title": "A"}]'
        self.assertEqual(len(generate_tasks("Learn Rust", provider="anthropic")), 1)

    def test_unknown_provider(self):
        with self.assertRaises(AIProviderError):
            generate_tasks("Anything", provider="gemini")

    def test_empty_goal(self):
        with self.assertRaises(AIProviderError):
            generate_tasks("  ")


class TestClients(unittest.TestCase):
    @patch.dict("os.environ", {}, clear=True)
    def test_openai_requires_key(self):
        with self.assertRaises(AIProviderError):
            openai_completion("hi")

    @patch("zenith_cli.ai_integration.openai_client.OpenAI")
    @patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test"}, clear=True)
    def test_openai_returns_content(self, mock_openai):
        response = MagicMock()
        response.choices[0].message.content = "[]"
        mock_openai.return_value.chat.completions.create.return_value = response
        self.assertEqual(openai_completion("hi"), "[]")

    @patch.dict("os.environ", {}, clear=True)
    def test_anthropic_requires_key(self):
        with self.assertRaises(AIProviderError):
            anthropic_completion("hi")

    @patch("zenith_cli.ai_integration.anthropic_client.requests.post")
    @patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test"}, clear=True)
    def test_anthropic_returns_text(self, mock_post):
        mock_post.return_value.json.return_value = {"content": [{"type": "text", "text": " [] "}]}
        self.assertEqual(anthropic_completion("hi"), "[]")
        self.assertEqual(mock_post.call_args.kwargs["headers"]["x-api-key"], "test")

    @patch("zenith_cli.ai_integration.anthropic_client.requests.post")
    @patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test"}, clear=True)
    def test_anthropic_http_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("down")
        with self.assertRaises(AIProviderError):
            anthropic_completion("hi")


class TestConsent(unittest.TestCase):
    @patch("zenith_cli.ai_integration.utils.consent.get_settings")
    def test_remembered_consent(self, mock_settings):
        mock_settings.return_value = {CONSENT_KEY: True}
        self.assertTrue(check_ai_consent())

    @patch("zenith_cli.ai_integration.utils.consent.get_settings")
    def test_non_interactive_without_answer(self, mock_settings):
        mock_settings.return_value = {}
        self.assertFalse(check_ai_consent(interactive=False))

    @patch("zenith_cli.ai_integration.utils.consent.save_settings")
    @patch("zenith_cli.ai_integration.utils.consent.typer.confirm", return_value=True)
    @patch("zenith_cli.ai_integration.utils.consent.get_settings", return_value={})
    def test_prompt_saves_answer(self, mock_settings, mock_confirm, mock_save):
        self.assertTrue(check_ai_consent())
        mock_save.assert_called_once_with({CONSENT_KEY: True})


if __name__ == "__main__":
    unittest.main()
