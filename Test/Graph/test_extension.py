import unittest

from petrikit.exceptions import StructureError
from petrikit.Graph.extension import Extensible, ExtensionProperty


class TestExtensible(unittest.TestCase):
    def setUp(self) -> None:
        self.ext = Extensible()

    def test_put_get_and_has(self):
        self.assertFalse(self.ext.has_extension("k"))
        self.ext.put_extension("k", 42)
        self.assertTrue(self.ext.has_extension("k"))
        self.assertEqual(self.ext.get_extension("k"), 42)

    def test_get_missing_raises(self):
        with self.assertRaises(StructureError):
            self.ext.get_extension("missing")

    def test_put_replaces_value(self):
        self.ext.put_extension("k", 1)
        self.ext.put_extension("k", 2)
        self.assertEqual(self.ext.get_extension("k"), 2)
        self.assertEqual(len(self.ext.get_extensions()), 1)

    def test_remove_is_idempotent(self):
        self.ext.put_extension("k", 1)
        self.ext.remove_extension("k")
        self.ext.remove_extension("k")
        self.assertFalse(self.ext.has_extension("k"))

    def test_property_filters(self):
        self.ext.put_extension("plain", 1)
        self.ext.put_extension("file", 2, ExtensionProperty.WRITE_TO_FILE)
        self.ext.put_extension("cache", 3, ExtensionProperty.NOCOPY)
        self.assertEqual(self.ext.get_write_to_file_extensions(), [("file", 2)])
        self.assertEqual(
            sorted(self.ext.get_copy_extensions()), [("file", 2), ("plain", 1)]
        )
        self.assertEqual(
            self.ext.get_extensions_with_property(ExtensionProperty.NOCOPY),
            [("cache", 3)],
        )

    def test_copy_extensions_skips_nocopy(self):
        self.ext.put_extension("plain", "a")
        self.ext.put_extension("cache", "b", ExtensionProperty.NOCOPY)
        other = Extensible()
        other.copy_extensions(self.ext)
        self.assertEqual(other.get_extension("plain"), "a")
        self.assertFalse(other.has_extension("cache"))


if __name__ == "__main__":
    unittest.main()
