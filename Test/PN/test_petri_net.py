import unittest

import networkx as nx
import numpy as np

from petrikit.exceptions import (
    FlowExistsError,
    IllegalFlowError,
    NoSuchEdgeError,
    NoSuchNodeError,
    NodeExistsError,
    StructureError,
    TransitionFireError,
)
from petrikit.Graph.extension import ExtensionProperty
from petrikit.PN.marking import Marking
from petrikit.PN.petri_net import PetriNet, Place, Transition
from petrikit.PN.token import Token


class TestPetriNetStructure(unittest.TestCase):
    def setUp(self) -> None:
        # p --2--> t --> q
        self.pn = PetriNet("simple")
        self.pn.create_place("p", initial_token=3)
        self.pn.create_place("q")
        self.pn.create_transition("t", label="go")
        self.pn.create_flow("p", "t", 2)
        self.pn.create_flow("t", "q")

    def test_nodes_and_lookup(self):
        self.assertEqual(self.pn.place_ids, ("p", "q"))
        self.assertIsInstance(self.pn.get_node("p"), Place)
        self.assertIsInstance(self.pn.get_node("t"), Transition)
        self.assertEqual(self.pn.get_transition("t").label, "go")
        self.assertIn("t", self.pn)
        self.assertEqual(len(self.pn), 3)
        self.assertEqual([n.id for n in self.pn], ["p", "q", "t"])
        with self.assertRaises(NoSuchNodeError):
            self.pn.get_place("t")
        with self.assertRaises(NoSuchNodeError):
            self.pn.get_node("missing")

    def test_generated_ids(self):
        pn = PetriNet()
        pn.create_place("p0")
        places = pn.create_places(2)
        transitions = pn.create_transitions(2)
        self.assertEqual([p.id for p in places], ["p1", "p2"])
        self.assertEqual([t.id for t in transitions], ["t0", "t1"])
        self.assertEqual(transitions[0].label, "t0")

    def test_duplicates_rejected(self):
        with self.assertRaises(NodeExistsError):
            self.pn.create_place("t")
        with self.assertRaises(FlowExistsError):
            self.pn.create_flow("p", "t")

    def test_illegal_flows(self):
        with self.assertRaises(IllegalFlowError):
            self.pn.create_flow("p", "q")
        self.pn.create_transition("u")
        with self.assertRaises(IllegalFlowError):
            self.pn.create_flow("t", "u")
        with self.assertRaises(ValueError):
            self.pn.create_flow("q", "u", 0)
        with self.assertRaises(NoSuchNodeError):
            self.pn.create_flow("nope", "u")

    def test_preset_and_postset(self):
        t = self.pn.get_transition("t")
        self.assertEqual({n.id for n in t.preset}, {"p"})
        self.assertEqual({n.id for n in t.postset}, {"q"})
        flow = self.pn.get_flow("p", "t")
        self.assertIs(flow.place, self.pn.get_place("p"))
        self.assertIs(flow.transition, t)
        self.assertEqual(flow.weight, 2)

    def test_weight_update_and_removal(self):
        flow = self.pn.get_flow("p", "t")
        flow.weight = 5
        self.assertEqual(self.pn.get_flow("p", "t").weight, 5)
        flow.weight = 0
        with self.assertRaises(NoSuchEdgeError):
            self.pn.get_flow("p", "t")
        with self.assertRaises(NoSuchEdgeError):
            self.pn.remove_flow("p", "t")

    def test_remove_nodes_drops_flows(self):
        self.pn.remove_transition("t")
        self.assertEqual(self.pn.flows, [])
        self.assertEqual(self.pn.get_place("p").postset, set())
        self.pn.remove_node("q")
        self.assertEqual(self.pn.place_ids, ("p",))
        with self.assertRaises(NoSuchNodeError):
            self.pn.remove_place("q")


class TestPetriNetFiring(unittest.TestCase):
    def setUp(self) -> None:
        self.pn = PetriNet("firing")
        self.pn.create_place("p", initial_token=3)
        self.pn.create_place("q")
        self.pn.create_transition("t")
        self.pn.create_flow("p", "t", 2)
        self.pn.create_flow("t", "q")

    def test_fire(self):
        m0 = self.pn.initial_marking
        self.assertTrue(self.pn.is_enabled(m0, "t"))
        m1 = self.pn.fire(m0, "t")
        self.assertEqual(m1, Marking(self.pn, {"p": 1, "q": 1}))
        self.assertFalse(self.pn.get_transition("t").is_fireable(m1))
        self.assertEqual(self.pn.enabled_transitions(m1), [])
        with self.assertRaises(TransitionFireError):
            self.pn.fire(m1, "t")

    def test_fire_sequence(self):
        m0 = Marking(self.pn, {"p": 4})
        m2 = m0.fire_transitions("t", "t")
        self.assertEqual(m2.values(), (Token.ZERO, Token.value_of(2)))

    def test_omega_input_stays_omega(self):
        m = Marking(self.pn, {"p": Token.OMEGA})
        fired = self.pn.fire(m, "t")
        self.assertTrue(fired["p"].is_omega)
        self.assertEqual(fired["q"], Token.value_of(1))

    def test_large_weights_do_not_overflow(self):
        w = 2**30
        pn = PetriNet("big")
        pn.create_place("p")
        pn.create_transition("t")
        pn.create_flow("t", "p", w)
        m = pn.initial_marking
        for _ in range(8):
            m = pn.fire(m, "t")
        self.assertEqual(m["p"].value, 8 * w)

    def test_enabling_after_place_inserted_before_inputs(self):
        pn = PetriNet("shifted")
        pn.create_place("b", initial_token=1)
        pn.create_place("c", initial_token=7)
        m0 = pn.initial_marking
        pn.create_place("a")
        pn.create_transition("t")
        pn.create_flow("b", "t", 5)
        self.assertFalse(pn.is_enabled(m0, "t"))
        self.assertFalse(pn.is_enabled(pn.initial_marking, "t"))

    def test_foreign_marking_rejected(self):
        with self.assertRaises(StructureError):
            self.pn.is_enabled(Marking(PetriNet("other")), "t")

    def test_initial_token_property(self):
        p = self.pn.get_place("q")
        p.initial_token = 7
        self.assertEqual(self.pn.initial_marking["q"], Token.value_of(7))
        self.assertEqual(p.initial_token, 7)


class TestPetriNetViews(unittest.TestCase):
    def setUp(self) -> None:
        self.pn = PetriNet("views")
        self.pn.create_place("a", initial_token=1)
        self.pn.create_place("b")
        self.pn.create_transition("t1")
        self.pn.create_transition("t2", label="back")
        self.pn.create_flow("a", "t1")
        self.pn.create_flow("t1", "b", 2)
        self.pn.create_flow("b", "t2", 2)
        self.pn.create_flow("t2", "a")

    def test_incidence_matrix(self):
        expected = np.array([[-1, 1], [2, -2]])
        np.testing.assert_array_equal(self.pn.incidence_matrix(), expected)

    def test_to_bipartite(self):
        G = self.pn.to_bipartite()
        self.assertIsInstance(G, nx.DiGraph)
        self.assertEqual(G.nodes["a"]["kind"], "place")
        self.assertEqual(G.nodes["a"]["tokens"], "1")
        self.assertEqual(G.nodes["t2"]["bipartite"], 1)
        self.assertEqual(G.nodes["t2"]["label"], "back")
        self.assertEqual(G.edges["t1", "b"]["weight"], 2)

    def test_copy_is_independent(self):
        self.pn.put_extension("note", "keep")
        self.pn.put_extension("cache", object(), ExtensionProperty.NOCOPY)
        cp = self.pn.copy()
        self.assertEqual(cp.place_ids, self.pn.place_ids)
        self.assertEqual(cp.get_transition("t2").label, "back")
        self.assertEqual(cp.get_flow("t1", "b").weight, 2)
        self.assertEqual(cp.initial_marking["a"], Token.value_of(1))
        self.assertIs(cp.initial_marking.net, cp)
        self.assertEqual(cp.get_extension("note"), "keep")
        self.assertFalse(cp.has_extension("cache"))
        cp.create_place("c")
        self.assertFalse(self.pn.contains_place("c"))


if __name__ == "__main__":
    unittest.main()
