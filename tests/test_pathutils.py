"""
Unit tests for path utilities.
"""

import unittest

from Utils.errors import ValidationError
from Utils.pathutils import (
    basename,
    dirname,
    extname,
    has_escaping_segments,
    is_absolute,
    join_path,
    normalize_path,
    relative_path,
    resolve_path,
    validate_path,
)


class TestNormalizePath(unittest.TestCase):
    """Test cases for normalize_path."""

    def test_separators(self):
        """Backslashes and repeated separators collapse to single slashes."""
        self.assertEqual(normalize_path("a\\b\\c"), "a/b/c")
        self.assertEqual(normalize_path("a//b///c"), "a/b/c")
        self.assertEqual(normalize_path("/a/b/"), "/a/b")

    def test_dot_segments(self):
        """Dot segments are resolved lexically."""
        self.assertEqual(normalize_path("a/./b/../c"), "a/c")
        self.assertEqual(normalize_path("/a/b/../../c"), "/c")
        self.assertEqual(normalize_path("a/.."), ".")
        self.assertEqual(normalize_path("./"), ".")

    def test_empty_and_root(self):
        self.assertEqual(normalize_path(""), ".")
        self.assertEqual(normalize_path("/"), "/")
        self.assertEqual(normalize_path("C:\\Users\\me\\..\\x"), "C:/Users/x")

    def test_escaping_segments_are_kept(self):
        """A '..' with nothing left to consume stays in the path."""
        self.assertEqual(normalize_path("../../x"), "../../x")
        self.assertEqual(normalize_path("/../x"), "/../x")
        self.assertEqual(normalize_path("a/../../x"), "../x")

    def test_idempotent(self):
        for path in ["a/b/../c", "/x//y/", "../z", "C:/a/./b", ""]:
            once = normalize_path(path)
            self.assertEqual(normalize_path(once), once)

    def test_non_string(self):
        with self.assertRaises(ValidationError):
            normalize_path(None)
        with self.assertRaises(ValidationError):
            normalize_path(42)


class TestPathHelpers(unittest.TestCase):
    """Test cases for the remaining path helpers."""

    def test_join_path(self):
        self.assertEqual(join_path("a", "b", "c.txt"), "a/b/c.txt")
        self.assertEqual(join_path("/a/", "/b"), "/a/b")
        self.assertEqual(join_path("a", "..", "b"), "b")
        self.assertEqual(join_path(), ".")

    def test_dirname(self):
        self.assertEqual(dirname("/a/b/c.txt"), "/a/b")
        self.assertEqual(dirname("/a"), "/")
        self.assertEqual(dirname("a"), ".")
        self.assertEqual(dirname("/"), "/")

    def test_basename(self):
        self.assertEqual(basename("/a/b/c.txt"), "c.txt")
        self.assertEqual(basename("/a/b/c.txt", ".txt"), "c")
        self.assertEqual(basename("/a/b/"), "b")
        self.assertEqual(basename("/"), "")

    def test_extname(self):
        self.assertEqual(extname("archive.tar.gz"), ".gz")
        self.assertEqual(extname("/a/b/readme"), "")
        self.assertEqual(extname(".bashrc"), "")

    def test_is_absolute(self):
        self.assertTrue(is_absolute("/a"))
        self.assertTrue(is_absolute("C:\\a"))
        self.assertFalse(is_absolute("a/b"))
        self.assertFalse(is_absolute(None))

    def test_resolve_path(self):
        self.assertEqual(resolve_path("/base", "a/b"), "/base/a/b")
        self.assertEqual(resolve_path("/base", "/other"), "/other")
        self.assertEqual(resolve_path("/base/x", "../y"), "/base/y")

    def test_relative_path(self):
        self.assertEqual(relative_path("/a/b", "/a/c/d"), "../c/d")
        self.assertEqual(relative_path("/a", "/a/b"), "b")
        self.assertEqual(relative_path("/a/b", "/a/b"), ".")

    def test_has_escaping_segments(self):
        self.assertTrue(has_escaping_segments("../x"))
        self.assertTrue(has_escaping_segments("/../x"))
        self.assertTrue(has_escaping_segments(".."))
        self.assertFalse(has_escaping_segments("a/../b"))
        self.assertFalse(has_escaping_segments("..foo/bar"))


class TestValidatePath(unittest.TestCase):
    """Test cases for validate_path."""

    def test_valid_paths(self):
        for path in ["/a/b.txt", "dir/sub dir/file-1_2.csv", "."]:
            result = validate_path(path)
            self.assertTrue(result.is_valid, path)
            self.assertIsNone(result.error)

    def test_invalid_characters(self):
        for path in ["a<b", "a>b", "a:b", 'a"b', "a|b", "a?b", "a*b"]:
            result = validate_path(path)
            self.assertFalse(result.is_valid, path)
            self.assertIn("invalid characters", result.error)

    def test_null_byte(self):
        result = validate_path("a\0b")
        self.assertFalse(result.is_valid)
        self.assertIn("null", result.error)

    def test_reserved_names(self):
        for path in ["CON", "/dir/nul", "com1", "LPT9"]:
            self.assertFalse(validate_path(path).is_valid, path)
        self.assertTrue(validate_path("/dir/console").is_valid)

    def test_non_string(self):
        self.assertFalse(validate_path(123).is_valid)


if __name__ == "__main__":
    unittest.main()
