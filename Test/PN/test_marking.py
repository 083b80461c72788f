import unittest

from petrikit.exceptions import NoSuchNodeError, StructureError
from petrikit.PN.marking import Marking
from petrikit.PN.petri_net import PetriNet
from petrikit.PN.token import Token


def make_net() -> PetriNet:
    pn = PetriNet("m")
    pn.create_places("a", "b", "c")
    return pn


class TestMarking(unittest.TestCase):
    def setUp(self) -> None:
        self.pn = make_net()

    def test_constructors(self):
        m1 = Marking(self.pn, {"a": 1, "c": 2})
        m2 = Marking.from_counts(self.pn, 1, 0, 2)
        self.assertEqual(m1, m2)
        self.assertEqual(Marking.from_mapping(self.pn, {"c": 2, "a": 1}), m1)
        self.assertEqual(hash(m1), hash(m2))
        self.assertEqual(m1.get_token("b"), Token.ZERO)
        with self.assertRaises(StructureError):
            Marking.from_counts(self.pn, 1, 2)
        with self.assertRaises(NoSuchNodeError):
            Marking(self.pn, {"zzz": 1})

    def test_mutators_return_new_markings(self):
        m = Marking(self.pn)
        m2 = m.set_token_count("a", 4)
        m3 = m2.add_token_count("a", -1)
        self.assertEqual(m.get_token("a"), Token.ZERO)
        self.assertEqual(m2["a"], Token.value_of(4))
        self.assertEqual(m3["a"], Token.value_of(3))
        with self.assertRaises(ValueError):
            m.add_token_count("a", -1)

    def test_place_objects_and_foreign_places(self):
        m = Marking(self.pn, {"a": 2})
        self.assertEqual(m.get_token(self.pn.get_place("a")), Token.value_of(2))
        other = make_net()
        with self.assertRaises(StructureError):
            m.get_token(other.get_place("a"))

    def test_stale_place_raises(self):
        m = Marking(self.pn, {"b": 5})
        self.pn.remove_place("b")
        with self.assertRaises(NoSuchNodeError):
            m.get_token("b")

    def test_new_place_reads_zero(self):
        m = Marking(self.pn, {"a": 1})
        h = hash(m)
        self.pn.create_place("d")
        self.assertEqual(m.get_token("d"), Token.ZERO)
        self.assertEqual(hash(m), h)
        self.assertEqual(len(m), 4)

    def test_place_inserted_before_shifts_indices(self):
        pn = PetriNet("shift")
        pn.create_place("b", initial_token=1)
        pn.create_place("c", initial_token=7)
        m = pn.initial_marking
        pn.create_place("a")
        self.assertEqual(m.get_token("a"), Token.ZERO)
        self.assertEqual(m.get_token("b"), Token.value_of(1))
        self.assertEqual(m["c"], Token.value_of(7))

        fresh = pn.initial_marking
        pn.create_place("aa")
        self.assertEqual(fresh.get_token("b"), Token.value_of(1))
        self.assertEqual(pn.get_place("b").initial_token, Token.value_of(1))

    def test_markings_of_different_nets_differ(self):
        other = make_net()
        self.assertNotEqual(Marking(self.pn), Marking(other))
        with self.assertRaises(StructureError):
            Marking(self.pn).covers(Marking(other))

    def test_covers_is_reflexive_and_antisymmetric(self):
        a = Marking.from_counts(self.pn, 1, Token.OMEGA, 0)
        b = Marking.from_counts(self.pn, 1, 3, 0)
        self.assertTrue(a.covers(a))
        self.assertTrue(a.covers(b))
        self.assertFalse(b.covers(a))
        c = Marking.from_counts(self.pn, 1, Token.OMEGA, 0)
        self.assertTrue(a.covers(c) and c.covers(a))
        self.assertEqual(a, c)

    def test_cover_widens_strict_increases(self):
        a = Marking.from_counts(self.pn, 2, 1, 5)
        b = Marking.from_counts(self.pn, 1, 1, 0)
        c = a.cover(b)
        self.assertTrue(c.covers(a))
        self.assertEqual(c.values(), (Token.OMEGA, Token.value_of(1), Token.OMEGA))
        self.assertTrue(c.has_omega())
        self.assertFalse(a.has_omega())

    def test_cover_incomparable_is_none(self):
        a = Marking.from_counts(self.pn, 2, 0, 0)
        b = Marking.from_counts(self.pn, 0, 1, 0)
        self.assertIsNone(a.cover(b))
        self.assertIsNone(b.cover(a))

    def test_cover_of_equal_marking_is_none(self):
        a = Marking.from_counts(self.pn, 2, 0, 1)
        self.assertIsNone(a.cover(a))
        self.assertIsNone(a.cover(Marking.from_counts(self.pn, 2, 0, 1)))

    def test_cover_ignores_places_already_omega(self):
        a = Marking.from_counts(self.pn, Token.OMEGA, 1, 0)
        b = Marking.from_counts(self.pn, 0, 1, 0)
        self.assertTrue(a.covers(b))
        self.assertIsNone(a.cover(b))
        c = Marking.from_counts(self.pn, Token.OMEGA, 2, 0)
        self.assertEqual(c.cover(b).values(), (Token.OMEGA, Token.OMEGA, Token.ZERO))

    def test_as_dict_and_str(self):
        m = Marking(self.pn, {"a": 1, "b": Token.OMEGA})
        self.assertEqual(
            m.as_dict(), {"a": Token.value_of(1), "b": Token.OMEGA, "c": Token.ZERO}
        )
        self.assertEqual(str(m), "{a:1, b:OMEGA, c:0}")

    def test_copy_to(self):
        m = Marking(self.pn, {"c": 3})
        other = make_net()
        moved = m.copy_to(other)
        self.assertIs(moved.net, other)
        self.assertEqual(moved["c"], Token.value_of(3))
        self.assertIs(m.copy_to(self.pn), m)


if __name__ == "__main__":
    unittest.main()
