import unittest

from gdindex.controller.query import (
    child_by_name_query,
    children_query,
    escape_query_value,
    format_search_terms,
    search_query,
)


class TestQueryBuilders(unittest.TestCase):
    def test_escape_query_value(self) -> None:
        self.assertEqual(escape_query_value("plain"), "plain")
        self.assertEqual(escape_query_value("it's"), "it\\'s")
        self.assertEqual(escape_query_value("a\\b"), "a\\\\b")
        self.assertEqual(escape_query_value("x\ny\x00z"), "xyz")

    def test_injection_stays_inside_literal(self) -> None:
        q = child_by_name_query("P1", "x' or name != '", folders_only=False)
        self.assertIn("name = 'x\\' or name != \\''", q)
        self.assertIn("mimeType != 'application/vnd.google-apps.shortcut'", q)

    def test_format_search_terms(self) -> None:
        self.assertEqual(format_search_terms(None), [])
        self.assertEqual(format_search_terms("  "), [])
        self.assertEqual(format_search_terms("a'b \"c\" d=e"), ["ab", "c", "de"])
        self.assertEqual(format_search_terms("x!=y"), ["xy"])
        self.assertEqual(format_search_terms("one,two|three(four)"), ["one", "two", "three", "four"])
        self.assertEqual(format_search_terms("全角，区切り"), ["全角", "区切り"])
        self.assertEqual(format_search_terms("path/to\\file:name"), ["pathtofilename"])

    def test_children_and_search_queries(self) -> None:
        self.assertTrue(children_query("P1").startswith("'P1' in parents and trashed = false"))
        q = search_query(["a", "b"])
        self.assertTrue(q.endswith("(name contains 'a' and name contains 'b')"))
        self.assertIn("name != '.password'", q)


if __name__ == "__main__":
    unittest.main()
