"""
Unit tests for the filesystem registry and factory functions.
"""

import os
import shutil
import tempfile
import unittest

from FileSystem import (
    FileSystem,
    LocalFileSystem,
    S3FileSystem,
    create_filesystem,
    create_filesystem_from_env,
    create_filesystem_from_file,
    get_filesystem,
    register_filesystem,
)
from FileSystem.registry import _FILESYSTEM_REGISTRY
from Utils.errors import ValidationError
from s3_stub import InMemoryS3Client


class TestRegistry(unittest.TestCase):
    """Test cases for the filesystem registry."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self._saved_registry = dict(_FILESYSTEM_REGISTRY)

    def tearDown(self):
        """Tear down test fixtures."""
        _FILESYSTEM_REGISTRY.clear()
        _FILESYSTEM_REGISTRY.update(self._saved_registry)
        shutil.rmtree(self.temp_dir)

    def test_builtin_backends_are_registered(self):
        self.assertIs(_FILESYSTEM_REGISTRY["local"], LocalFileSystem)
        self.assertIs(_FILESYSTEM_REGISTRY["s3"], S3FileSystem)

    def test_get_unregistered_filesystem(self):
        with self.assertRaises(ValidationError):
            get_filesystem("ftp")

    def test_register_filesystem_replaces_backend(self):
        class RecordingFileSystem(LocalFileSystem):
            pass

        register_filesystem("local", RecordingFileSystem)
        fs = create_filesystem({"type": "local", "local": {"base_path": self.temp_dir}})
        self.assertIsInstance(fs, RecordingFileSystem)


class TestCreateFilesystem(unittest.IsolatedAsyncioTestCase):
    """Test cases for create_filesystem and friends."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Tear down test fixtures."""
        shutil.rmtree(self.temp_dir)

    async def test_create_local_filesystem(self):
        fs = create_filesystem({"type": "local", "local": {"base_path": self.temp_dir}})
        self.assertIsInstance(fs, FileSystem)
        self.assertIsInstance(fs, LocalFileSystem)
        await fs.write_file("/a.txt", "hi")
        self.assertTrue(os.path.exists(os.path.join(self.temp_dir, "a.txt")))

    def test_create_s3_filesystem_with_injected_client(self):
        client = InMemoryS3Client()
        fs = create_filesystem({"type": "s3", "s3": {"bucket": "test-bucket", "region": "us-east-1"}}, client=client)
        self.assertIsInstance(fs, S3FileSystem)
        self.assertIs(fs.client, client)

    def test_invalid_configuration_lists_every_error(self):
        with self.assertRaises(ValidationError) as ctx:
            create_filesystem({"type": "s3", "s3": {"bucket": "", "region": ""}})
        message = str(ctx.exception)
        self.assertTrue(message.startswith("Validation error: Invalid filesystem configuration: "))
        self.assertIn("s3.bucket", message)
        self.assertIn("s3.region", message)

    def test_unknown_type(self):
        with self.assertRaises(ValidationError) as ctx:
            create_filesystem({"type": "ftp"})
        self.assertIn('Invalid type: "ftp"', str(ctx.exception))

    def test_adapter_construction_failures_are_validation_errors(self):
        with self.assertRaises(ValidationError):
            create_filesystem({"type": "local", "local": {"base_path": self.temp_dir}}, unexpected=True)

    def test_create_from_env(self):
        fs = create_filesystem_from_env({"FILESYSTEM_TYPE": "local", "FILESYSTEM_LOCAL_BASE_PATH": self.temp_dir})
        self.assertIsInstance(fs, LocalFileSystem)
        self.assertEqual(fs.base_path, os.path.abspath(self.temp_dir))

        with self.assertRaises(ValidationError):
            create_filesystem_from_env({})

    def test_create_from_file(self):
        config_path = os.path.join(self.temp_dir, "filesystem.yaml")
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(f"type: local\nlocal:\n  base_path: '{self.temp_dir}'\ncommon:\n  max_retries: 1\n")
        fs = create_filesystem_from_file(config_path)
        self.assertIsInstance(fs, LocalFileSystem)
        self.assertEqual(fs.max_retries, 1)


if __name__ == "__main__":
    unittest.main()
