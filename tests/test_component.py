"""
Unit tests for the dependency-injection component.
"""

import shutil
import tempfile
import unittest

from Configuration import BindingKeys
from FileSystem import FilesystemComponent, LocalFileSystem, S3FileSystem
from Utils.errors import ValidationError
from s3_stub import InMemoryS3Client


class DictContainer:
    """Minimal container with the get/bind surface of a host application."""

    def __init__(self, bindings=None):
        self.bindings = dict(bindings or {})

    def get(self, key):
        return self.bindings.get(key)

    def bind(self, key, value):
        self.bindings[key] = value


class TestFilesystemComponent(unittest.IsolatedAsyncioTestCase):
    """Test cases for FilesystemComponent."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Tear down test fixtures."""
        shutil.rmtree(self.temp_dir)

    async def test_binds_local_filesystem(self):
        container = DictContainer({
            BindingKeys.FILESYSTEM_CONFIG: {"type": "local", "local": {"base_path": self.temp_dir}},
        })
        component = FilesystemComponent(container)

        fs = component.get_filesystem()
        self.assertIsInstance(fs, LocalFileSystem)
        self.assertIs(container.get(BindingKeys.FILESYSTEM_INSTANCE), fs)

        await fs.write_file("/bound.txt", "ok")
        self.assertEqual(await fs.read_file("/bound.txt", encoding="utf-8"), "ok")

    def test_passes_adapter_arguments(self):
        client = InMemoryS3Client()
        container = DictContainer({
            BindingKeys.FILESYSTEM_CONFIG: {"type": "s3", "s3": {"bucket": "test-bucket", "region": "us-east-1"}},
        })
        fs = FilesystemComponent(container, client=client).get_filesystem()
        self.assertIsInstance(fs, S3FileSystem)
        self.assertIs(fs.client, client)

    def test_missing_configuration(self):
        container = DictContainer()
        with self.assertRaises(ValidationError):
            FilesystemComponent(container)
        self.assertNotIn(BindingKeys.FILESYSTEM_INSTANCE, container.bindings)

    def test_invalid_configuration(self):
        container = DictContainer({BindingKeys.FILESYSTEM_CONFIG: {"type": "s3", "s3": {"region": "r"}}})
        with self.assertRaises(ValidationError) as ctx:
            FilesystemComponent(container)
        self.assertIn("s3.bucket", str(ctx.exception))
        self.assertNotIn(BindingKeys.FILESYSTEM_INSTANCE, container.bindings)


if __name__ == "__main__":
    unittest.main()
