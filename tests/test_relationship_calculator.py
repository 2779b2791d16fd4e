import unittest

from data_manager import sample_members
from factories import make_member
from member_graph import build_member_graph
from relationship_calculator import RelationshipCalculator, relationship_label, siblings_of


class TestDirectRelationships(unittest.TestCase):

    def label(self, target_gender, rel_type, kind=None):
        me = make_member('me', 'male', [('t', rel_type, kind)])
        target = make_member('t', target_gender)
        return relationship_label('me', 't', [me, target])

    def test_self_is_you(self):
        for member in sample_members():
            self.assertEqual(relationship_label(member.id, member.id, sample_members()), 'You')

    def test_self_is_you_even_when_unknown(self):
        self.assertEqual(relationship_label('ghost', 'ghost', []), 'You')

    def test_unknown_ids_fall_back_to_family(self):
        members = sample_members()
        self.assertEqual(relationship_label('ghost', 'eli', members), 'Family')
        self.assertEqual(relationship_label('eli', 'ghost', members), 'Family')

    def test_parent_labels(self):
        self.assertEqual(self.label('male', 'parent'), 'Dad')
        self.assertEqual(self.label('female', 'parent'), 'Mom')
        self.assertEqual(self.label('female', 'parent', 'biological'), 'Mom')
        self.assertEqual(self.label('male', 'parent', 'step'), 'Stepdad')
        self.assertEqual(self.label('female', 'parent', 'step'), 'Stepmom')
        self.assertEqual(self.label('male', 'parent', 'adopted'), 'Adoptive Dad')
        self.assertEqual(self.label('female', 'parent', 'adopted'), 'Adoptive Mom')
        self.assertEqual(self.label('male', 'parent', 'guardian'), 'Guardian')

    def test_child_labels(self):
        self.assertEqual(self.label('male', 'child'), 'Son')
        self.assertEqual(self.label('female', 'child'), 'Daughter')
        self.assertEqual(self.label('male', 'child', 'step'), 'Stepson')
        self.assertEqual(self.label('female', 'child', 'step'), 'Stepdaughter')
        self.assertEqual(self.label('male', 'child', 'adopted'), 'Adopted Son')
        self.assertEqual(self.label('female', 'child', 'adopted'), 'Adopted Daughter')
        self.assertEqual(self.label('female', 'child', 'guardian'), 'Ward')

    def test_spouse_label(self):
        self.assertEqual(self.label('male', 'spouse'), 'Spouse')

    def test_stored_derived_types_are_tolerated(self):
        self.assertEqual(self.label('male', 'sibling'), 'Brother')
        self.assertEqual(self.label('female', 'grandparent'), 'Grandma')
        self.assertEqual(self.label('male', 'grandchild'), 'Grandson')

    def test_unset_gender_uses_female_form(self):
        self.assertEqual(self.label(None, 'parent'), 'Mom')
        self.assertEqual(self.label(None, 'child', 'step'), 'Stepdaughter')

    def test_first_stored_edge_wins(self):
        me = make_member('me', 'male', [('t', 'spouse'), ('t', 'parent')])
        target = make_member('t', 'female')
        self.assertEqual(relationship_label('me', 't', [me, target]), 'Spouse')

    def test_possessive_labels(self):
        me = make_member('me', 'male', [('mom', 'parent', 'biological')])
        mom = make_member('mom', 'female')
        self.assertEqual(relationship_label('me', 'mom', [me, mom], possessive=True), 'Your Mom')
        self.assertEqual(relationship_label('me', 'me', [me, mom], possessive=True), 'You')
        self.assertEqual(relationship_label('mom', 'me', [me, mom], possessive=True), 'Family')


class TestDerivedRelationships(unittest.TestCase):

    def setUp(self):
        self.members = sample_members()

    def test_sibling_from_shared_parents(self):
        self.assertEqual(relationship_label('eli', 'ember', self.members), 'Sister')
        self.assertEqual(relationship_label('ember', 'bennett', self.members), 'Brother')

    def test_half_siblings_get_the_same_label(self):
        me = make_member('me', 'female', [('p1', 'parent'), ('p2', 'parent')])
        half = make_member('half', 'male', [('p1', 'parent'), ('p3', 'parent')])
        self.assertEqual(relationship_label('me', 'half', [me, half]), 'Brother')

    def test_shared_parent_need_not_be_a_known_member(self):
        me = make_member('me', 'female', [('missing', 'parent')])
        sib = make_member('sib', 'female', [('missing', 'parent')])
        self.assertEqual(relationship_label('me', 'sib', [me, sib]), 'Sister')

    def test_in_law_through_sibling(self):
        self.assertEqual(relationship_label('eli', 'preston', self.members), 'Brother-in-law')

    def test_in_law_through_sibling_minimal_graph(self):
        me = make_member('me', 'female', [('p1', 'parent')])
        sibling = make_member('sib', 'male', [('p1', 'parent'), ('spouse', 'spouse')])
        spouse = make_member('spouse', 'male', [('sib', 'spouse')])
        parent = make_member('p1', 'female')
        self.assertEqual(relationship_label('me', 'spouse', [me, sibling, spouse, parent]),
                         'Brother-in-law')

    def test_grandparents(self):
        self.assertEqual(relationship_label('eli', 'peggy', self.members), 'Grandma')
        self.assertEqual(relationship_label('mila', 'timothy', self.members), 'Grandpa')

    def test_grandchildren(self):
        self.assertEqual(relationship_label('shelby', 'mila', self.members), 'Granddaughter')

    def test_parent_in_law(self):
        self.assertEqual(relationship_label('preston', 'shelby', self.members), 'Mother-in-law')
        self.assertEqual(relationship_label('shelby', 'james', self.members), 'Father-in-law')

    def test_unrelated_falls_back_to_family(self):
        self.assertEqual(relationship_label('peggy', 'timothy', self.members), 'Family')
        self.assertEqual(relationship_label('eli', 'mila', self.members), 'Family')

    def test_grandparent_through_unknown_parent_is_ignored(self):
        me = make_member('me', 'male', [('missing', 'parent')])
        gp = make_member('gp', 'male')
        self.assertEqual(relationship_label('me', 'gp', [me, gp]), 'Family')


class TestSiblings(unittest.TestCase):

    def test_returns_members_who_share_a_parent(self):
        me = make_member('me', 'female', [('p1', 'parent')])
        sibling = make_member('sib', 'male', [('p1', 'parent')])
        cousin = make_member('c1', 'male', [('p2', 'parent')])

        siblings = siblings_of('me', [me, sibling, cousin])

        self.assertEqual([s.id for s in siblings], ['sib'])

    def test_no_parents_or_unknown_member(self):
        members = sample_members()
        self.assertEqual(siblings_of('peggy', members), [])
        self.assertEqual(siblings_of('ghost', members), [])

    def test_stored_order(self):
        members = sample_members()
        self.assertEqual([s.id for s in siblings_of('eli', members)], ['ella', 'bennett', 'ember'])

    def test_symmetry(self):
        members = sample_members() + [
            make_member('half', 'male', [('shelby', 'parent'), ('other', 'parent')]),
            make_member('stranger', 'male', [('other', 'parent')]),
        ]
        for a in members:
            for b in siblings_of(a.id, members):
                self.assertIn(a.id, [m.id for m in siblings_of(b.id, members)],
                              f"{b.id} is a sibling of {a.id} but not the other way round")


class TestRelationshipCalculatorCache(unittest.TestCase):

    def test_cache_is_filled_and_cleared(self):
        calc = RelationshipCalculator(build_member_graph(sample_members()))
        self.assertEqual(calc.get_relationship_label('eli', 'peggy'), 'Grandma')
        self.assertIn(('eli', 'peggy', False), calc.relationship_cache)

        calc.clear_cache()
        self.assertEqual(calc.relationship_cache, {})
        self.assertEqual(calc.get_relationship_label('eli', 'peggy', possessive=True), 'Your Grandma')


if __name__ == '__main__':
    unittest.main()
