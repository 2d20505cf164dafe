from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from config import (
    BotConfig,
    ConfigError,
    TelegramPostConfig,
    apply_properties_to_env,
    load_properties_config,
    parse_channel_names,
)


class TestParseChannelNames(unittest.TestCase):
    def test_splits_and_strips(self) -> None:
        self.assertEqual(parse_channel_names(" memes, @cats ,,dogs "), ["memes", "cats", "dogs"])

    def test_empty(self) -> None:
        self.assertEqual(parse_channel_names(""), [])


class TestTelegramPostConfig(unittest.TestCase):
    def test_from_env(self) -> None:
        env = {
            "TELEGRAM_CHANNEL_NAMES": "memes,cats",
            "TELEGRAM_MAX_GET_POST_RETRIES": "7",
            "TELEGRAM_SCAN_POST_COUNT": "0",
            "TELEGRAM_HOST": "example.org",
            "TELEGRAM_HTTP_TIMEOUT": "2.5",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            cfg = TelegramPostConfig.from_env()

        self.assertEqual(cfg.channel_names, ["memes", "cats"])
        self.assertEqual(cfg.max_retries, 7)
        self.assertEqual(cfg.scan_count, 0)
        self.assertEqual(cfg.host, "example.org")
        self.assertEqual(cfg.http_timeout, 2.5)

    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {"TELEGRAM_CHANNEL_NAMES": "memes"}, clear=True):
            cfg = TelegramPostConfig.from_env()

        self.assertEqual(cfg.max_retries, 5)
        self.assertEqual(cfg.scan_count, 100)
        self.assertEqual(cfg.host, "t.me")

    def test_requires_channels(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigError):
                TelegramPostConfig.from_env()

    def test_rejects_bad_numbers(self) -> None:
        with self.assertRaises(ConfigError):
            TelegramPostConfig(channel_names=["memes"], max_retries=0)
        with self.assertRaises(ConfigError):
            TelegramPostConfig(channel_names=["memes"], scan_count=-1)

        env = {"TELEGRAM_CHANNEL_NAMES": "memes", "TELEGRAM_SCAN_POST_COUNT": "lots"}
        with mock.patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ConfigError):
                TelegramPostConfig.from_env()


class TestBotConfig(unittest.TestCase):
    def test_falls_back_to_discord_token(self) -> None:
        env = {"DISCORD_TOKEN": "abc", "GUILD_ID": "42", "DEBUG_MODE": "true"}
        with mock.patch.dict(os.environ, env, clear=True):
            cfg = BotConfig.from_env()

        self.assertEqual(cfg.token, "abc")
        self.assertEqual(cfg.guild_id, 42)
        self.assertEqual(cfg.prefix, "!")
        self.assertTrue(cfg.debug)


class TestPropertiesFile(unittest.TestCase):
    def test_load_and_apply(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bot.properties"
            path.write_text(
                "# comment\n\nTELEGRAM_CHANNEL_NAMES = memes,cats\nBOT_PREFIX=?\nnot a pair\n",
                encoding="utf-8",
            )

            self.assertEqual(
                load_properties_config(str(path)),
                {"TELEGRAM_CHANNEL_NAMES": "memes,cats", "BOT_PREFIX": "?"},
            )
            with mock.patch.dict(os.environ, {}, clear=True):
                apply_properties_to_env(str(path))
                self.assertEqual(os.environ["BOT_PREFIX"], "?")
                self.assertEqual(TelegramPostConfig.from_env().channel_names, ["memes", "cats"])

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_properties_config("/nonexistent/bot.properties")


if __name__ == "__main__":
    unittest.main()
