import unittest

from note_index.ternary_tree import NIL, TernaryTree


class TestTernaryTreeInsertLookup(unittest.TestCase):
    """Test cases for TernaryTree insert and exact lookup."""

    def setUp(self):
        self.tree = TernaryTree("test")

    def test_insert_then_lookup_contains_id(self):
        """A word looked up after insertion should carry the inserted id."""
        for word in ["milk", "m", "remember", "the", "buy", "eggs", "and"]:
            self.tree.insert(word, "n1")
            node = self.tree.lookup_exact(word)
            self.assertIsNotNone(node)
            self.assertIn("n1", node.ids)

    def test_insert_same_word_merges_ids(self):
        """Re-inserting a word for another id should merge into one node."""
        first = self.tree.insert("milk", "n1")
        second = self.tree.insert("milk", "n2")

        self.assertIs(first, second)
        self.assertEqual(first.ids, {"n1", "n2"})

    def test_insert_is_idempotent_for_same_id(self):
        """Inserting the same word and id twice should not add nodes."""
        self.tree.insert("milk", "n1")
        size = len(self.tree)
        self.tree.insert("milk", "n1")

        self.assertEqual(len(self.tree), size)
        self.assertEqual(self.tree.lookup_exact("milk").ids, {"n1"})

    def test_insert_empty_word_raises(self):
        """Empty words must be rejected."""
        with self.assertRaises(ValueError):
            self.tree.insert("", "n1")

    def test_lookup_missing_word_returns_none(self):
        """A word whose path does not exist should not be found."""
        self.tree.insert("milk", "n1")

        self.assertIsNone(self.tree.lookup_exact("silk"))
        self.assertIsNone(self.tree.lookup_exact("milky"))
        self.assertIsNone(self.tree.lookup_exact(""))

    def test_lookup_internal_node_has_empty_ids(self):
        """A prefix of an indexed word is found but terminates nothing."""
        self.tree.insert("milk", "n1")

        node = self.tree.lookup_exact("mil")
        self.assertIsNotNone(node)
        self.assertEqual(node.ids, set())
        self.assertFalse(node.terminal)

    def test_lookup_on_empty_tree_returns_none(self):
        """Lookups on a fresh tree should find nothing."""
        self.assertIsNone(self.tree.lookup_exact("anything"))
        self.assertEqual(self.tree.enumerate_prefix("a"), [])

    def test_children_are_ordered_by_character(self):
        """Smaller first characters hang off lo, larger off hi."""
        self.tree.insert("m", "n1")
        self.tree.insert("a", "n2")
        self.tree.insert("z", "n3")

        root = self.tree.node(0)
        self.assertEqual(root.key, "m")
        self.assertEqual(self.tree.node(root.lo).key, "a")
        self.assertEqual(self.tree.node(root.hi).key, "z")
        self.assertEqual(root.eq, NIL)

    def test_shared_prefix_reuses_nodes(self):
        """Words sharing a prefix should share its nodes."""
        self.tree.insert("milk", "n1")
        size = len(self.tree)
        self.tree.insert("mild", "n2")

        self.assertEqual(len(self.tree), size + 1)

    def test_long_word_does_not_hit_recursion_limit(self):
        """Very long words should insert and look up without recursion."""
        word = "a" * 5000
        self.tree.insert(word, "n1")

        self.assertEqual(self.tree.lookup_exact(word).ids, {"n1"})


class TestTernaryTreePrefix(unittest.TestCase):
    """Test cases for TernaryTree prefix enumeration."""

    def setUp(self):
        self.tree = TernaryTree("test")
        self.tree.insert("milk", "n1")
        self.tree.insert("milk", "n2")
        self.tree.insert("mild", "n3")
        self.tree.insert("mi", "n4")
        self.tree.insert("moon", "n5")
        self.tree.insert("lime", "n6")

    def _ids(self, nodes):
        ids = set()
        for node in nodes:
            ids.update(node.ids)
        return ids

    def test_prefix_returns_all_completions(self):
        """Every word starting with the prefix should be enumerated."""
        self.assertEqual(self._ids(self.tree.enumerate_prefix("mil")), {"n1", "n2", "n3"})

    def test_prefix_includes_node_terminating_prefix(self):
        """A prefix that is itself a word should be included."""
        self.assertEqual(
            self._ids(self.tree.enumerate_prefix("mi")), {"n1", "n2", "n3", "n4"}
        )

    def test_prefix_excludes_siblings_of_prefix_node(self):
        """lo/hi siblings of the prefix node are different words."""
        ids = self._ids(self.tree.enumerate_prefix("mo"))
        self.assertEqual(ids, {"n5"})

    def test_prefix_results_are_superset_of_exact(self):
        """Prefix enumeration should cover the exact match of the same string."""
        for word in ["milk", "mild", "mi", "moon", "lime"]:
            exact = self.tree.lookup_exact(word).ids
            self.assertTrue(self._ids(self.tree.enumerate_prefix(word)) >= exact)

    def test_missing_prefix_returns_empty(self):
        """An unknown prefix should enumerate nothing."""
        self.assertEqual(self.tree.enumerate_prefix("x"), [])
        self.assertEqual(self.tree.enumerate_prefix("milks"), [])

    def test_empty_prefix_enumerates_whole_tree(self):
        """The empty prefix should cover every indexed word."""
        self.assertEqual(
            self._ids(self.tree.enumerate_prefix("")),
            {"n1", "n2", "n3", "n4", "n5", "n6"},
        )

    def test_prefix_only_returns_terminal_nodes(self):
        """Internal nodes should never be enumerated."""
        for node in self.tree.enumerate_prefix("m"):
            self.assertTrue(node.ids)


class TestTernaryTreeTombstone(unittest.TestCase):
    """Test cases for TernaryTree tombstone removal."""

    def setUp(self):
        self.tree = TernaryTree("test")
        for word in ["remember", "the", "milk"]:
            self.tree.insert(word, "n1")
        for word in ["buy", "eggs", "and", "milk"]:
            self.tree.insert(word, "n2")

    def _snapshot(self):
        return [(n.key, n.lo, n.eq, n.hi, frozenset(n.ids)) for n in self.tree._nodes]

    def test_tombstone_removes_id_everywhere(self):
        """The id should disappear from every node."""
        removed = self.tree.tombstone("n1")

        self.assertEqual(removed, 3)
        self.assertEqual(self.tree.lookup_exact("milk").ids, {"n2"})
        self.assertEqual(self.tree.lookup_exact("remember").ids, set())

    def test_tombstone_keeps_nodes(self):
        """Nodes stay in place after their ids are removed."""
        size = len(self.tree)
        self.tree.tombstone("n1")

        self.assertEqual(len(self.tree), size)
        self.assertIsNotNone(self.tree.lookup_exact("remember"))

    def test_tombstone_twice_equals_once(self):
        """A second sweep for the same id should change nothing."""
        self.tree.tombstone("n1")
        once = self._snapshot()
        removed = self.tree.tombstone("n1")

        self.assertEqual(removed, 0)
        self.assertEqual(self._snapshot(), once)

    def test_tombstone_unknown_id_is_noop(self):
        """Sweeping an id that was never inserted should change nothing."""
        before = self._snapshot()
        self.assertEqual(self.tree.tombstone("n9"), 0)
        self.assertEqual(self._snapshot(), before)

    def test_tombstoned_words_drop_out_of_prefix_results(self):
        """Prefix enumeration should skip nodes left without ids."""
        self.tree.tombstone("n1")

        self.assertEqual(self.tree.enumerate_prefix("rem"), [])

    def test_word_count_tracks_live_words(self):
        """word_count counts only nodes that still terminate a word."""
        self.assertEqual(self.tree.word_count(), 6)
        self.tree.tombstone("n1")
        self.assertEqual(self.tree.word_count(), 4)


if __name__ == "__main__":
    unittest.main()
