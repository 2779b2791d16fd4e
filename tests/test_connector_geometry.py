import unittest

from connector_geometry import ConnectorBuilder, build_connectors
from data_manager import sample_members
from factories import make_member
from layout_engine import build_tree_layout
from models import ConnectorSet, FamilyTreeData, FamilyUnit, LineSegment
from tree_builder import build_family_tree


def tree_for(center_unit, left=None, right=None):
    return FamilyTreeData(
        center_unit=center_unit,
        left_ancestor_couple=left,
        right_ancestor_couple=right,
        layout=build_tree_layout(center_unit, left, right),
    )


class TestSampleConnectors(unittest.TestCase):

    def setUp(self):
        self.connectors = build_connectors(build_family_tree(sample_members()))

    def test_segment_counts(self):
        self.assertEqual(len(self.connectors.spouse_bars), 4)
        self.assertEqual(len(self.connectors.stems), 4)
        self.assertEqual(len(self.connectors.rails), 4)
        self.assertEqual(len(self.connectors.drops), 7)
        self.assertEqual(len(self.connectors.all_segments()), 19)

    def test_focus_couple(self):
        self.assertIn(LineSegment(368, 288, 384, 288), self.connectors.spouse_bars)
        self.assertIn(LineSegment(376, 288, 376, 392), self.connectors.stems)
        self.assertIn(LineSegment(202, 392, 608, 392), self.connectors.rails)
        # Married child: the drop lands on the midpoint of its own spouse bar
        self.assertIn(LineSegment(202, 392, 202, 464), self.connectors.drops)
        self.assertIn(LineSegment(608, 392, 608, 400), self.connectors.drops)

    def test_nested_couple(self):
        self.assertIn(LineSegment(194, 464, 210, 464), self.connectors.spouse_bars)
        self.assertIn(LineSegment(202, 464, 202, 568), self.connectors.stems)
        self.assertIn(LineSegment(202, 568, 202, 568), self.connectors.rails)
        self.assertIn(LineSegment(202, 568, 202, 576), self.connectors.drops)

    def test_ancestor_sides(self):
        self.assertIn(LineSegment(236, 112, 252, 112), self.connectors.spouse_bars)
        self.assertIn(LineSegment(244, 112, 244, 216), self.connectors.stems)
        self.assertIn(LineSegment(244, 216, 318, 216), self.connectors.rails)
        self.assertIn(LineSegment(318, 216, 318, 224), self.connectors.drops)

        self.assertIn(LineSegment(500, 112, 516, 112), self.connectors.spouse_bars)
        self.assertIn(LineSegment(434, 216, 508, 216), self.connectors.rails)


class TestUnitConnectors(unittest.TestCase):

    def test_no_tree_means_no_connectors(self):
        self.assertEqual(build_connectors(None), ConnectorSet())

    def test_single_partner_has_no_spouse_bar(self):
        parent, child = make_member('p'), make_member('c')
        connectors = build_connectors(tree_for(FamilyUnit(partners=(parent,), children=(child,))))

        self.assertEqual(connectors.spouse_bars, ())
        self.assertEqual(connectors.stems, (LineSegment(200, 112, 200, 216),))
        self.assertEqual(connectors.drops, (LineSegment(200, 216, 200, 224),))

    def test_childless_couple_only_gets_spouse_bar(self):
        unit = FamilyUnit(partners=(make_member('a'), make_member('b')))
        connectors = build_connectors(tree_for(unit))

        self.assertEqual(len(connectors.spouse_bars), 1)
        self.assertEqual(connectors.stems, ())
        self.assertEqual(connectors.rails, ())
        self.assertEqual(connectors.drops, ())

    def test_unit_without_frames_is_skipped(self):
        laid_out = FamilyUnit(partners=(make_member('a'),), children=(make_member('c'),))
        stray = FamilyUnit(partners=(make_member('ghost'),), children=(make_member('c'),))
        builder = ConnectorBuilder(build_tree_layout(laid_out))
        builder.add_unit(stray)
        self.assertEqual(builder.result(), ConnectorSet())

    def test_rail_stays_between_rows(self):
        connectors = build_connectors(build_family_tree(sample_members()))
        for stem, rail in zip(connectors.stems, connectors.rails):
            self.assertEqual(stem.y2, rail.y1)
            self.assertGreater(rail.y1, stem.y1)
            self.assertLessEqual(rail.x1, stem.x1)
            self.assertGreaterEqual(rail.x2, stem.x1)


if __name__ == '__main__':
    unittest.main()
