import unittest
from unittest.mock import patch

from pulse.meta import (
    get_auth_header,
    get_meta_http_headers,
    get_sdk_info,
    get_user_agent,
)


class TestMeta(unittest.TestCase):
    """Test cases for the meta module."""

    def test_get_user_agent_format(self):
        user_agent = get_user_agent()

        self.assertTrue(user_agent.startswith("pulse-python/"))
        self.assertIn("(", user_agent)
        self.assertIn("Python/", user_agent)

    @patch("pulse.meta.platform.system")
    @patch("pulse.meta.platform.machine")
    @patch("pulse.meta.platform.python_version")
    @patch("pulse.meta.get_version")
    def test_get_user_agent_values(
        self, mock_get_version, mock_python_version, mock_machine, mock_system
    ):
        mock_get_version.return_value = "0.2.0"
        mock_system.return_value = "Linux"
        mock_machine.return_value = "x86_64"
        mock_python_version.return_value = "3.12.1"

        self.assertEqual(
            get_user_agent(), "pulse-python/0.2.0 (Linux x86_64; Python/3.12.1)"
        )

        mock_system.return_value = "Darwin"
        mock_machine.return_value = "arm64"
        self.assertEqual(
            get_user_agent(), "pulse-python/0.2.0 (Darwin arm_64; Python/3.12.1)"
        )

        # Package metadata missing, e.g. running from a source checkout
        mock_get_version.return_value = None
        self.assertEqual(
            get_user_agent(), "pulse-python/unknown (Darwin arm_64; Python/3.12.1)"
        )

    @patch("pulse.meta.platform.machine")
    def test_get_user_agent_architecture_normalization(self, mock_machine):
        test_cases = [
            ("AMD64", "x86_64"),
            ("aarch64", "arm_64"),
            ("i386", "x86"),
            ("riscv64", "riscv64"),
            ("", "unknown"),
        ]

        for machine_value, expected_arch in test_cases:
            mock_machine.return_value = machine_value
            arch = get_user_agent().split(" ")[2].rstrip(";")
            self.assertEqual(
                arch, expected_arch, f"Expected {expected_arch} for machine={machine_value}"
            )

    @patch("pulse.meta.get_version")
    def test_get_auth_header(self, mock_get_version):
        mock_get_version.return_value = "0.2.0"

        self.assertEqual(
            get_auth_header("abc123"),
            "Sentry sentry_version=7, sentry_client=pulse-python/0.2.0, sentry_key=abc123",
        )

    @patch("pulse.meta.get_version")
    def test_get_meta_http_headers(self, mock_get_version):
        mock_get_version.return_value = "0.2.0"

        headers = get_meta_http_headers()

        self.assertEqual(headers["Pulse-Client-Version"], "0.2.0")
        self.assertTrue(headers["User-Agent"].startswith("pulse-python/0.2.0 "))

    @patch("pulse.meta.get_version")
    def test_get_sdk_info(self, mock_get_version):
        mock_get_version.return_value = None

        self.assertEqual(get_sdk_info(), {"name": "pulse.python", "version": "unknown"})
