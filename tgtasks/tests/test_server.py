import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from tgtasks import server
from tgtasks.config import Settings, get_settings


class SettingsTests(unittest.TestCase):
    def test_reads_environment_with_defaults(self):
        env = {"DATABASE_URL": "sqlite:///tasks.db", "BOT_TOKEN": "1:abc"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.database_url, "sqlite:///tasks.db")
        self.assertEqual(settings.bot_token, "1:abc")
        self.assertEqual(settings.port, 3000)
        self.assertEqual(settings.host, "0.0.0.0")

    def test_port_from_environment(self):
        env = {"DATABASE_URL": "sqlite://", "BOT_TOKEN": "1:abc", "PORT": "8080"}
        with patch.dict(os.environ, env, clear=True):
            self.assertEqual(Settings(_env_file=None).port, 8080)

    def test_missing_required_values(self):
        for env in ({"DATABASE_URL": "sqlite://"}, {"BOT_TOKEN": "1:abc"}, {}):
            with self.subTest(env=env):
                with patch.dict(os.environ, env, clear=True):
                    with self.assertRaises(ValidationError):
                        Settings(_env_file=None)

    def test_empty_values_are_rejected(self):
        with patch.dict(os.environ, {"DATABASE_URL": "", "BOT_TOKEN": ""}, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)


class ServerMainTests(unittest.TestCase):
    def setUp(self):
        get_settings.cache_clear()

    def tearDown(self):
        get_settings.cache_clear()

    @patch("tgtasks.server.uvicorn.run")
    @patch("tgtasks.server.get_settings")
    def test_exits_when_configuration_missing(self, mock_get_settings, mock_run):
        with patch.dict(os.environ, {}, clear=True):
            mock_get_settings.side_effect = lambda: Settings(_env_file=None)
            with self.assertRaises(SystemExit) as ctx:
                server.main([])
        self.assertEqual(ctx.exception.code, 1)
        mock_run.assert_not_called()

    @patch("tgtasks.server.uvicorn.run")
    @patch("tgtasks.server.get_settings")
    def test_runs_app_factory_on_configured_port(self, mock_get_settings, mock_run):
        mock_get_settings.return_value = Settings(
            database_url="sqlite://", bot_token="1:abc", _env_file=None
        )
        self.assertEqual(server.main([]), 0)
        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        self.assertEqual(args[0], "tgtasks.app:create_app")
        self.assertTrue(kwargs["factory"])
        self.assertEqual(kwargs["port"], 3000)

    @patch("tgtasks.server.uvicorn.run")
    @patch("tgtasks.server.get_settings")
    def test_cli_overrides_port(self, mock_get_settings, mock_run):
        mock_get_settings.return_value = Settings(
            database_url="sqlite://", bot_token="1:abc", _env_file=None
        )
        with self.assertLogs("tgtasks.server", level="INFO") as logs:
            server.main(["--port", "9000", "--host", "127.0.0.1"])
        kwargs = mock_run.call_args.kwargs
        self.assertEqual(kwargs["port"], 9000)
        self.assertEqual(kwargs["host"], "127.0.0.1")
        self.assertTrue(any("127.0.0.1:9000" in line for line in logs.output))
        self.assertFalse(any(":3000" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
