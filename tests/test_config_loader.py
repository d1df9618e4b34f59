"""
Unit tests for loading configurations from the environment and YAML files.
"""

import os
import shutil
import tempfile
import unittest

from Configuration import ConfigLoader, validate_config
from Utils.errors import ValidationError


class TestConfigLoaderFromEnv(unittest.TestCase):
    """Test cases for ConfigLoader.from_env."""

    def test_local_environment(self):
        config = ConfigLoader.from_env({
            "FILESYSTEM_TYPE": "local",
            "FILESYSTEM_LOCAL_BASE_PATH": "/srv/data",
            "FILESYSTEM_LOCAL_CREATE_MISSING_DIRS": "TRUE",
            "FILESYSTEM_TIMEOUT": "1500",
            "FILESYSTEM_MAX_RETRIES": "2",
            "FILESYSTEM_DEBUG": "false",
        })
        self.assertEqual(config, {
            "type": "local",
            "local": {"base_path": "/srv/data", "create_missing_dirs": True},
            "common": {"timeout": 1500, "max_retries": 2, "debug": False},
        })
        self.assertTrue(validate_config(config).is_valid)

    def test_s3_environment(self):
        config = ConfigLoader.from_env({
            "FILESYSTEM_TYPE": "s3",
            "FILESYSTEM_S3_BUCKET": "assets",
            "FILESYSTEM_S3_REGION": "eu-west-1",
            "AWS_ACCESS_KEY_ID": "AKIA",
            "AWS_SECRET_ACCESS_KEY": "secret",
            "FILESYSTEM_S3_ENDPOINT": "http://localhost:9000",
            "FILESYSTEM_S3_FORCE_PATH_STYLE": "true",
            "FILESYSTEM_S3_PREFIX": "uploads",
        })
        self.assertEqual(config["s3"], {
            "bucket": "assets",
            "region": "eu-west-1",
            "access_key_id": "AKIA",
            "secret_access_key": "secret",
            "endpoint": "http://localhost:9000",
            "prefix": "uploads",
            "force_path_style": True,
        })
        result = validate_config(config)
        self.assertTrue(result.is_valid, result.errors)
        self.assertTrue(result.config.s3.force_path_style)

    def test_missing_type(self):
        with self.assertRaises(ValidationError):
            ConfigLoader.from_env({})

    def test_invalid_type(self):
        with self.assertRaises(ValidationError) as ctx:
            ConfigLoader.from_env({"FILESYSTEM_TYPE": "ftp"})
        self.assertIn("ftp", str(ctx.exception))

    def test_unparsable_numbers_are_reported_by_validation(self):
        config = ConfigLoader.from_env({
            "FILESYSTEM_TYPE": "local",
            "FILESYSTEM_TIMEOUT": "soon",
        })
        self.assertEqual(config["common"]["timeout"], "soon")
        result = validate_config(config)
        self.assertFalse(result.is_valid)
        self.assertTrue(result.errors[0].startswith("common.timeout"))

    def test_missing_bucket_is_reported_by_validation(self):
        result = validate_config(ConfigLoader.from_env({"FILESYSTEM_TYPE": "s3", "FILESYSTEM_S3_REGION": "r"}))
        self.assertFalse(result.is_valid)
        self.assertTrue(any("bucket" in error for error in result.errors))


class TestConfigLoaderFromYaml(unittest.TestCase):
    """Test cases for ConfigLoader.from_yaml."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Tear down test fixtures."""
        shutil.rmtree(self.temp_dir)

    def _write(self, name, content):
        path = os.path.join(self.temp_dir, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_root_document(self):
        path = self._write("fs.yaml", "type: local\nlocal:\n  base_path: /srv\n  create_missing_dirs: true\n")
        self.assertEqual(
            ConfigLoader.from_yaml(path),
            {"type": "local", "local": {"base_path": "/srv", "create_missing_dirs": True}},
        )

    def test_nested_document(self):
        path = self._write("app.yaml", "filesystem:\n  type: s3\n  s3:\n    bucket: b\n    region: r\n")
        self.assertEqual(ConfigLoader.from_yaml(path)["s3"], {"bucket": "b", "region": "r"})

    def test_missing_file(self):
        with self.assertRaises(ValidationError):
            ConfigLoader.from_yaml(os.path.join(self.temp_dir, "missing.yaml"))

    def test_invalid_yaml(self):
        path = self._write("broken.yaml", "type: [local\n")
        with self.assertRaises(ValidationError):
            ConfigLoader.from_yaml(path)

    def test_non_mapping_root(self):
        path = self._write("list.yaml", "- a\n- b\n")
        with self.assertRaises(ValidationError):
            ConfigLoader.from_yaml(path)


if __name__ == "__main__":
    unittest.main()
