import unittest

from app_config_schema import UIServerSettings
from server.config import ServerConfigurationError, UIServerConfig


class UIServerConfigTests(unittest.TestCase):
    def test_from_settings_strips_host(self) -> None:
        config = UIServerConfig.from_settings(
            UIServerSettings(enabled=True, host="  0.0.0.0 ", port=9000)
        )

        self.assertTrue(config.enabled)
        self.assertEqual("0.0.0.0", config.host)
        self.assertEqual(9000, config.port)
        self.assertEqual("/ws", config.websocket_path)
        self.assertEqual("/healthz", config.healthz_path)

    def test_defaults_are_disabled_loopback(self) -> None:
        config = UIServerConfig()
        self.assertFalse(config.enabled)
        self.assertEqual("127.0.0.1", config.host)

    def test_rejects_empty_host(self) -> None:
        with self.assertRaisesRegex(ServerConfigurationError, "ui_server.host"):
            UIServerConfig(host="  ")

    def test_rejects_out_of_range_port(self) -> None:
        for port in (0, 65536):
            with self.subTest(port=port):
                with self.assertRaisesRegex(ServerConfigurationError, "ui_server.port"):
                    UIServerConfig(port=port)


if __name__ == "__main__":
    unittest.main()
