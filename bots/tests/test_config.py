"""Tests for configuration loading."""

import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from ci_bot.config import CIConfig, load_config


class TestLoadConfig(unittest.TestCase):
    """Defaults, YAML file and environment overrides."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.missing = os.path.join(self.temp_dir, "missing.yml")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, content):
        path = os.path.join(self.temp_dir, "ci.yml")
        with open(path, "w") as f:
            f.write(content)
        return path

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = load_config(self.missing)

        self.assertEqual(config, CIConfig())
        self.assertEqual(config.endpoint, "https://circleci.com/api/v1")

    @patch.dict(
        os.environ,
        {"CIRCLECI_HOST": "ci.example.com", "CIRCLECI_TOKEN": "t0k", "CIRCLECI_ORG": "acme"},
        clear=True,
    )
    def test_environment(self):
        config = load_config(self.missing)

        self.assertEqual(config.host, "ci.example.com")
        self.assertEqual(config.token, "t0k")
        self.assertEqual(config.default_org, "acme")
        self.assertEqual(config.endpoint, "https://ci.example.com/api/v1")

    @patch.dict(os.environ, {"CIRCLECI_ORG": "from-env"}, clear=True)
    def test_yaml_file_with_env_override(self):
        path = self._write(
            "default_org: from-file\ncommand_prefix: circle\nfanout_workers: 8\nbogus: 1\n"
        )

        config = load_config(path)

        self.assertEqual(config.default_org, "from-env")
        self.assertEqual(config.command_prefix, "circle")
        self.assertEqual(config.fanout_workers, 8)

    @patch.dict(os.environ, {"CI_CONFIG_FILE": "placeholder"}, clear=True)
    def test_config_file_from_environment(self):
        path = self._write("host: file.example.com\n")
        os.environ["CI_CONFIG_FILE"] = path

        self.assertEqual(load_config().host, "file.example.com")

    @patch.dict(os.environ, {}, clear=True)
    def test_invalid_yaml_is_ignored(self):
        path = self._write("host: [unclosed\n")

        self.assertEqual(load_config(path), CIConfig())

    @patch.dict(os.environ, {"CI_REQUEST_TIMEOUT": "abc", "CI_FANOUT_WORKERS": "0"}, clear=True)
    def test_bad_integers(self):
        config = load_config(self.missing)

        self.assertEqual(config.request_timeout, 30)
        self.assertEqual(config.fanout_workers, 1)


if __name__ == "__main__":
    unittest.main()
