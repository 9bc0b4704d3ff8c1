import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from filerelay.core.enums import BatchRestartPolicy
from filerelay.core.setting import Settings

BASE_ENV = {
    "BOT_TOKEN": "123:abc",
    "API_ID": "1",
    "API_HASH": "hash",
    "BOT_USERNAME": "@relaybot",
    "ARCHIVE_CHANNEL_ID": "-100999",
}


def load(**overrides) -> Settings:
    env = {**BASE_ENV, **overrides}
    with patch.dict(os.environ, env, clear=True):
        return Settings(_env_file=None)  # type: ignore[call-arg]


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        settings = load()

        self.assertEqual(settings.bot_username, "relaybot")
        self.assertEqual(settings.archive_channel_id, -100999)
        self.assertIsNone(settings.required_channel_id)
        self.assertIsNone(settings.join_url)
        self.assertEqual(settings.port, 3000)
        self.assertEqual(settings.database_url, "sqlite:///filerelay.db")
        self.assertEqual(settings.batch_restart_policy, BatchRestartPolicy.DISCARD)

    def test_empty_required_channel_disables_gate(self):
        self.assertIsNone(load(REQUIRED_CHANNEL_ID="").required_channel_id)

    def test_join_url_derived_from_username(self):
        settings = load(REQUIRED_CHANNEL_ID="mi_canal")

        self.assertEqual(settings.required_channel_id, "@mi_canal")
        self.assertEqual(settings.join_url, "https://t.me/mi_canal")

    def test_explicit_join_url_wins(self):
        settings = load(
            REQUIRED_CHANNEL_ID="-1002174393042",
            REQUIRED_CHANNEL_URL="https://t.me/+invite",
        )

        self.assertEqual(settings.required_channel_id, -1002174393042)
        self.assertEqual(settings.join_url, "https://t.me/+invite")

    def test_numeric_channel_requires_join_url(self):
        with self.assertRaises(ValidationError) as ctx:
            load(REQUIRED_CHANNEL_ID="-1002174393042")

        self.assertIn("REQUIRED_CHANNEL_URL", str(ctx.exception))

        with self.assertRaises(ValidationError):
            load(REQUIRED_CHANNEL_ID="-1002174393042", REQUIRED_CHANNEL_URL="")

    def test_reject_policy_from_env(self):
        self.assertEqual(
            load(BATCH_RESTART_POLICY="reject").batch_restart_policy,
            BatchRestartPolicy.REJECT,
        )

    def test_get_info_marks_sensitive_fields(self):
        info = Settings.get_info("bot_token")
        assert info is not None
        self.assertTrue(info.is_sensitive)
        self.assertEqual(info.default_value, "Required")

        port = Settings.get_info("port")
        assert port is not None
        self.assertFalse(port.is_sensitive)
        self.assertEqual(port.default_value, 3000)


if __name__ == "__main__":
    unittest.main()
