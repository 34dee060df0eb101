import sys
import unittest
from unittest.mock import AsyncMock, MagicMock

from copilot_bridge.config import Settings
from copilot_bridge.copilot.errors import HelpUnavailable
from copilot_bridge.copilot.models import FALLBACK_MODELS, ModelCatalog, parse_model_tokens
from copilot_bridge.copilot.health import check_installed, help_output


HELP_TEXT = """
Usage: copilot [options] [command]

Options:
  --model <model>   Set the AI model to use (choices: "claude-sonnet-4.5",
                    "claude-haiku-4.5", "gpt-5", "GPT-5", "gemini-3-pro-preview")
  --allow-all-tools Allow all tools to run automatically
  -h, --help        display help for command
"""


class TestParseModelTokens(unittest.TestCase):
    """Tests for the help-text heuristic."""

    def test_bare_vendor_names_are_dropped(self):
        self.assertEqual(parse_model_tokens("Use gpt-5.1 or Claude models"), ["gpt-5.1"])

    def test_help_text(self):
        self.assertEqual(
            parse_model_tokens(HELP_TEXT),
            ["claude-sonnet-4.5", "claude-haiku-4.5", "gpt-5", "gemini-3-pro-preview"],
        )

    def test_lower_cased_and_deduplicated_in_first_seen_order(self):
        self.assertEqual(
            parse_model_tokens("GPT-4.1, o3, gpt-4.1, O3-mini, Claude-Opus-4.5"),
            ["gpt-4.1", "o3", "o3-mini", "claude-opus-4.5"],
        )

    def test_matches_need_a_word_boundary(self):
        self.assertEqual(parse_model_tokens("chatgpt-4 foo3 gpt4"), ["gpt4"])

    def test_nothing_found(self):
        self.assertEqual(parse_model_tokens("no models here"), [])
        self.assertEqual(parse_model_tokens(""), [])


class TestModelCatalog(unittest.IsolatedAsyncioTestCase):
    """Tests for ModelCatalog.discover."""

    def setUp(self):
        self.settings = Settings()
        self.logger = MagicMock()

    async def test_models_from_help(self):
        fetch_help = AsyncMock(return_value="Use gpt-5.1 or Claude models")
        catalog = ModelCatalog(self.settings, self.logger, fetch_help=fetch_help)

        result = await catalog.discover()

        fetch_help.assert_awaited_once_with(self.settings)
        self.assertEqual(result.models, ["gpt-5.1"])
        self.assertEqual(result.source, "help")

    async def test_fallback_when_help_fails(self):
        fetch_help = AsyncMock(side_effect=HelpUnavailable("Copilot CLI help command timed out"))
        catalog = ModelCatalog(self.settings, self.logger, fetch_help=fetch_help)

        result = await catalog.discover()

        self.assertEqual(result.models, list(FALLBACK_MODELS))
        self.assertEqual(result.source, "fallback")
        self.logger.warn.assert_called_once()

    async def test_fallback_when_nothing_parsed(self):
        fetch_help = AsyncMock(return_value="Usage: copilot [options]")
        catalog = ModelCatalog(self.settings, self.logger, fetch_help=fetch_help)

        result = await catalog.discover()

        self.assertEqual(result.source, "fallback")
        self.assertEqual(result.models[0], "claude-sonnet-4.5")

    async def test_parser_is_replaceable(self):
        fetch_help = AsyncMock(return_value="anything")
        parser = MagicMock(return_value=["custom-1"])
        catalog = ModelCatalog(self.settings, self.logger, parser=parser, fetch_help=fetch_help)

        result = await catalog.discover()

        parser.assert_called_once_with("anything")
        self.assertEqual(result.models, ["custom-1"])

    async def test_fallback_list_is_not_shared(self):
        catalog = ModelCatalog(
            self.settings, self.logger, fetch_help=AsyncMock(side_effect=HelpUnavailable("x"))
        )

        result = await catalog.discover()
        result.models.append("mutated")

        self.assertNotIn("mutated", FALLBACK_MODELS)


def python_command(code: str, **overrides) -> Settings:
    return Settings(command=(sys.executable, "-c", code), **overrides)


class TestHealthCheck(unittest.IsolatedAsyncioTestCase):
    """Tests for the short `--version` and `--help` invocations."""

    async def test_help_output_prefers_stdout(self):
        code = "import sys\nprint('  gpt-5 help  ')\nsys.stderr.write('noise')\n"
        self.assertEqual(await help_output(python_command(code)), "gpt-5 help")

    async def test_help_output_falls_back_to_stderr(self):
        code = "import sys\nsys.stderr.write(' usage on stderr ')\n"
        self.assertEqual(await help_output(python_command(code)), "usage on stderr")

    async def test_help_output_empty(self):
        with self.assertRaises(HelpUnavailable) as cm:
            await help_output(python_command("pass"))
        self.assertIn("No output", str(cm.exception))

    async def test_help_output_timeout(self):
        code = "import time\ntime.sleep(30)\n"
        with self.assertRaises(HelpUnavailable) as cm:
            await help_output(python_command(code, help_timeout_ms=300))
        self.assertIn("timed out", str(cm.exception))

    async def test_help_output_spawn_failure(self):
        with self.assertRaises(HelpUnavailable):
            await help_output(Settings(command=("/nonexistent/path/to/copilot",)))

    async def test_help_flag_is_passed(self):
        code = "import sys\nprint(' '.join(sys.argv[1:]))\n"
        self.assertEqual(await help_output(python_command(code)), "--help")

    async def test_help_output_returns_when_the_cli_exits(self):
        """A background child still holding the pipes does not turn the help call into a timeout."""
        code = (
            "import subprocess, sys\n"
            "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(5)'])\n"
            "print('use gpt-5.1')\n"
        )
        self.assertEqual(
            await help_output(python_command(code, help_timeout_ms=3000)), "use gpt-5.1"
        )

    async def test_installed_with_background_child(self):
        code = (
            "import subprocess, sys\n"
            "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(5)'])\n"
        )
        self.assertTrue(await check_installed(python_command(code, version_timeout_ms=3000)))

    async def test_installed(self):
        code = "import sys\nsys.exit(0 if sys.argv[1:] == ['--version'] else 3)\n"
        self.assertTrue(await check_installed(python_command(code)))

    async def test_not_installed_on_non_zero_exit(self):
        self.assertFalse(await check_installed(python_command("import sys\nsys.exit(3)\n")))

    async def test_not_installed_when_missing(self):
        self.assertFalse(await check_installed(Settings(command=("/nonexistent/path/to/copilot",))))

    async def test_not_installed_on_timeout(self):
        code = "import time\ntime.sleep(30)\n"
        self.assertFalse(await check_installed(python_command(code, version_timeout_ms=300)))


if __name__ == "__main__":
    unittest.main()
