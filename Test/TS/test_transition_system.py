import unittest

import networkx as nx

from petrikit.exceptions import (
    NoSuchEdgeError,
    NoSuchNodeError,
    NodeExistsError,
    StructureError,
)
from petrikit.TS.transition_system import TransitionSystem


class TestTransitionSystem(unittest.TestCase):
    def setUp(self) -> None:
        self.ts = TransitionSystem("ts")
        self.s0, self.s1 = self.ts.create_states("s0", "s1")
        self.a = self.ts.create_arc(self.s0, self.s1, "a")

    def test_states(self):
        self.assertEqual(len(self.ts), 2)
        self.assertIn("s0", self.ts)
        self.assertIs(self.ts.get_state("s1"), self.s1)
        with self.assertRaises(NodeExistsError):
            self.ts.create_state("s0")
        with self.assertRaises(NoSuchNodeError):
            self.ts.get_state("s9")

    def test_generated_state_ids_skip_taken(self):
        generated = self.ts.create_states(2)
        self.assertEqual([s.id for s in generated], ["s2", "s3"])

    def test_parallel_arcs_are_kept(self):
        b = self.ts.create_arc("s0", "s1", "a")
        self.ts.create_arc("s0", "s1", "b")
        self.assertIsNot(b, self.a)
        self.assertEqual(len(self.ts.get_arcs("s0", "s1")), 3)
        self.assertEqual(len(self.ts.get_arcs("s0", "s1", "a")), 2)
        self.assertEqual(len(self.s0.postset_edges_by_label("a")), 2)
        self.assertEqual(self.s0.postset_nodes, {self.s1})
        self.assertEqual(self.s1.preset_nodes_by_label("b"), {self.s0})
        self.assertEqual(self.ts.alphabet, {"a", "b"})

    def test_remove_arc(self):
        self.ts.remove_arc(self.a)
        self.assertEqual(self.ts.arcs, [])
        with self.assertRaises(NoSuchEdgeError):
            self.ts.remove_arc(self.a)

    def test_initial_state(self):
        with self.assertRaises(StructureError):
            self.ts.initial_state
        self.ts.initial_state = "s0"
        self.assertIs(self.ts.initial_state, self.s0)
        self.ts.remove_state(self.s0)
        self.assertEqual(self.ts.arcs, [])
        with self.assertRaises(StructureError):
            self.ts.initial_state

    def test_foreign_state_rejected(self):
        other = TransitionSystem("other")
        foreign = other.create_state("s0")
        with self.assertRaises(StructureError):
            self.ts.create_arc(foreign, self.s1, "x")

    def test_to_networkx(self):
        self.ts.create_arc("s0", "s1", "a")
        self.ts.initial_state = self.s0
        G = self.ts.to_networkx()
        self.assertIsInstance(G, nx.MultiDiGraph)
        self.assertTrue(G.nodes["s0"]["initial"])
        self.assertFalse(G.nodes["s1"]["initial"])
        self.assertEqual(G.number_of_edges("s0", "s1"), 2)

    def test_mutations_notify_listeners(self):
        calls = []
        self.ts.add_listener(lambda g: calls.append(g) or True)
        s2 = self.ts.create_state()
        arc = self.ts.create_arc(self.s1, s2, "c")
        self.ts.remove_arc(arc)
        self.ts.remove_state(s2)
        self.ts.initial_state = self.s0
        self.assertEqual(len(calls), 4)


if __name__ == "__main__":
    unittest.main()
