"""
Relationship calculation engine.
Turns the Member Graph into a human-readable label for one person as seen by another.
Only parent, child and spouse edges are stored; siblings, in-laws and grandparents are derived here.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

import networkx as nx

from member_graph import (build_member_graph, edge_targets, get_edge, get_member,
                          has_edge_of_type, members_in_order)
from models import Gender, Member, RelationshipKind, RelationshipType

logger = logging.getLogger(__name__)

SELF_LABEL = 'You'
FALLBACK_LABEL = 'Family'
POSSESSIVE_PREFIX = 'Your '

# (male form, female form). Unset gender takes the female form.
PARENT_LABELS = {
    None: ('Dad', 'Mom'),
    RelationshipKind.BIOLOGICAL: ('Dad', 'Mom'),
    RelationshipKind.STEP: ('Stepdad', 'Stepmom'),
    RelationshipKind.ADOPTED: ('Adoptive Dad', 'Adoptive Mom'),
    RelationshipKind.GUARDIAN: ('Guardian', 'Guardian'),
}
CHILD_LABELS = {
    None: ('Son', 'Daughter'),
    RelationshipKind.BIOLOGICAL: ('Son', 'Daughter'),
    RelationshipKind.STEP: ('Stepson', 'Stepdaughter'),
    RelationshipKind.ADOPTED: ('Adopted Son', 'Adopted Daughter'),
    RelationshipKind.GUARDIAN: ('Ward', 'Ward'),
}
SIBLING_LABELS = ('Brother', 'Sister')
SIBLING_IN_LAW_LABELS = ('Brother-in-law', 'Sister-in-law')
GRANDPARENT_LABELS = ('Grandpa', 'Grandma')
GRANDCHILD_LABELS = ('Grandson', 'Granddaughter')
PARENT_IN_LAW_LABELS = ('Father-in-law', 'Mother-in-law')
SPOUSE_LABEL = 'Spouse'


def gendered(target: Member, labels: Tuple[str, str]) -> str:
    male, female = labels
    return male if target.gender == Gender.MALE else female


def format_direct_relationship(rel_type: RelationshipType, target: Member,
                               kind: Optional[RelationshipKind] = None) -> str:
    """Label for an edge stored directly from the observer to the target."""
    if rel_type == RelationshipType.PARENT:
        return gendered(target, PARENT_LABELS[kind])
    if rel_type == RelationshipType.CHILD:
        return gendered(target, CHILD_LABELS[kind])
    if rel_type == RelationshipType.SPOUSE:
        return SPOUSE_LABEL
    if rel_type == RelationshipType.SIBLING:
        return gendered(target, SIBLING_LABELS)
    if rel_type == RelationshipType.GRANDPARENT:
        return gendered(target, GRANDPARENT_LABELS)
    if rel_type == RelationshipType.GRANDCHILD:
        return gendered(target, GRANDCHILD_LABELS)
    return FALLBACK_LABEL


class RelationshipCalculator:
    """
    Computes relationship labels over one Member Graph snapshot.
    Build a new calculator when the snapshot changes.
    """

    def __init__(self, graph: nx.MultiDiGraph):
        self.graph = graph
        self.relationship_cache: Dict[Tuple[str, str, bool], str] = {}

    def clear_cache(self):
        self.relationship_cache.clear()

    # ==================== BASIC QUERIES ====================

    def get_parent_ids(self, person_id: str) -> List[str]:
        return edge_targets(self.graph, person_id, RelationshipType.PARENT)

    def get_child_ids(self, person_id: str) -> List[str]:
        return edge_targets(self.graph, person_id, RelationshipType.CHILD)

    def get_spouse_ids(self, person_id: str) -> List[str]:
        return edge_targets(self.graph, person_id, RelationshipType.SPOUSE)

    def get_siblings(self, person_id: str) -> List[Member]:
        """Members sharing at least one parent id with the person, in stored order."""
        if get_member(self.graph, person_id) is None:
            return []
        parent_ids: Set[str] = set(self.get_parent_ids(person_id))
        if not parent_ids:
            return []

        siblings = []
        for member in members_in_order(self.graph):
            if member.id == person_id:
                continue
            if parent_ids.intersection(self.get_parent_ids(member.id)):
                siblings.append(member)
        return siblings

    # ==================== LABELS ====================

    def get_relationship_label(self, observer_id: str, target_id: str,
                               possessive: bool = False) -> str:
        if observer_id == target_id:
            return SELF_LABEL

        cache_key = (observer_id, target_id, possessive)
        if cache_key in self.relationship_cache:
            return self.relationship_cache[cache_key]

        label = self._determine_relationship(observer_id, target_id)
        if possessive and label != FALLBACK_LABEL:
            label = POSSESSIVE_PREFIX + label
        self.relationship_cache[cache_key] = label
        return label

    def _determine_relationship(self, observer_id: str, target_id: str) -> str:
        observer = get_member(self.graph, observer_id)
        target = get_member(self.graph, target_id)
        if observer is None or target is None:
            logger.debug("Label lookup with unknown member: %s -> %s", observer_id, target_id)
            return FALLBACK_LABEL

        direct = get_edge(self.graph, observer_id, target_id)
        if direct is not None:
            return format_direct_relationship(direct.type, target, direct.kind)

        observer_parents = set(self.get_parent_ids(observer_id))
        if observer_parents.intersection(self.get_parent_ids(target_id)):
            return gendered(target, SIBLING_LABELS)

        for sibling in self.get_siblings(observer_id):
            if has_edge_of_type(self.graph, sibling.id, target_id, RelationshipType.SPOUSE):
                return gendered(target, SIBLING_IN_LAW_LABELS)

        for parent_id in self.get_parent_ids(observer_id):
            if get_member(self.graph, parent_id) is None:
                continue
            if has_edge_of_type(self.graph, parent_id, target_id, RelationshipType.PARENT):
                return gendered(target, GRANDPARENT_LABELS)

        for child_id in self.get_child_ids(observer_id):
            if get_member(self.graph, child_id) is None:
                continue
            if has_edge_of_type(self.graph, child_id, target_id, RelationshipType.CHILD):
                return gendered(target, GRANDCHILD_LABELS)

        spouse_ids = self.get_spouse_ids(observer_id)
        if spouse_ids:
            spouse_id = spouse_ids[0]
            if get_member(self.graph, spouse_id) is not None and \
                    has_edge_of_type(self.graph, spouse_id, target_id, RelationshipType.PARENT):
                return gendered(target, PARENT_IN_LAW_LABELS)

        return FALLBACK_LABEL


# ==================== SNAPSHOT ENTRY POINTS ====================

def relationship_label(observer_id: str, target_id: str, members: Sequence[Member],
                       possessive: bool = False) -> str:
    if observer_id == target_id:
        return SELF_LABEL
    calc = RelationshipCalculator(build_member_graph(members))
    return calc.get_relationship_label(observer_id, target_id, possessive=possessive)


def siblings_of(member_id: str, members: Sequence[Member]) -> List[Member]:
    return RelationshipCalculator(build_member_graph(members)).get_siblings(member_id)
