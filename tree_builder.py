"""
Builds the visible family tree around a focus couple.
The focus couple gets one ancestor generation per side and all of its descendants.
"""

import logging
from datetime import date
from typing import Any, Callable, List, Optional, Sequence, Set, Tuple, Union

import networkx as nx

from layout_engine import LayoutEngine
from member_graph import build_member_graph, edge_targets, members_in_order, resolve_spouse, resolved_targets
from models import FamilyTreeData, FamilyUnit, Member, RelationshipType

logger = logging.getLogger(__name__)

FocusKey = Callable[[Member], Any]


def birth_order_key(member: Member) -> Tuple[bool, date]:
    # Undated members go last. sorted() is stable, so they keep their stored order.
    return (member.birth_date is None, member.birth_date or date.min)


class FamilyTreeBuilder:
    def __init__(self, graph: nx.MultiDiGraph):
        self.graph = graph

    # ==================== FOCUS ====================

    def is_focus_candidate(self, member: Member) -> bool:
        return all(
            edge_targets(self.graph, member.id, rel_type)
            for rel_type in (RelationshipType.PARENT, RelationshipType.CHILD, RelationshipType.SPOUSE)
        )

    def select_focus(self, focus_key: Optional[FocusKey] = None) -> Optional[Tuple[Member, Member]]:
        """
        First member with a parent, a child and a spouse, plus that spouse.
        focus_key reorders the candidates (stable sort) before the first one is taken.
        """
        candidates = [m for m in members_in_order(self.graph) if self.is_focus_candidate(m)]
        if not candidates:
            logger.debug("No focus candidate among %d members", self.graph.number_of_nodes())
            return None
        if focus_key is not None:
            candidates = sorted(candidates, key=focus_key)

        focus = candidates[0]
        spouse = resolve_spouse(self.graph, focus.id)
        if spouse is None:
            logger.debug("Focus candidate %s has no resolvable spouse", focus.id)
            return None
        logger.debug("Focus couple: %s + %s", focus.id, spouse.id)
        return focus, spouse

    # ==================== ANCESTORS ====================

    def find_parent_couple(self, member: Member) -> Optional[Tuple[Member, Member]]:
        parents = resolved_targets(self.graph, member.id, RelationshipType.PARENT)
        if len(parents) < 2:
            return None
        return parents[0], parents[1]

    # ==================== UNITS ====================

    def collect_children(self, partners: Sequence[Member]) -> List[Member]:
        seen = set()
        children = []
        for partner in partners:
            for child in resolved_targets(self.graph, partner.id, RelationshipType.CHILD):
                if child.id in seen:
                    continue
                seen.add(child.id)
                children.append(child)
        return sorted(children, key=birth_order_key)

    def build_unit(self, partner_a: Member, partner_b: Optional[Member] = None, depth: int = 0,
                   visited: Optional[Set[str]] = None) -> FamilyUnit:
        """
        Recursively groups the descendants of a couple.
        visited holds every id already placed; a child seen twice is skipped and a child whose
        spouse was already placed stays a leaf, so cyclic data cannot recurse forever.
        """
        partners = (partner_a,) if partner_b is None else (partner_a, partner_b)
        if visited is None:
            visited = set()
        visited.update(p.id for p in partners)

        built: List[Union[FamilyUnit, Member]] = []
        for child in self.collect_children(partners):
            if child.id in visited:
                logger.warning("Skipping %s: already placed in the tree (cyclic or repeated edge)", child.id)
                continue
            visited.add(child.id)

            spouse = resolve_spouse(self.graph, child.id)
            if spouse is not None and spouse.id not in visited:
                built.append(self.build_unit(child, spouse, depth + 1, visited))
            else:
                built.append(child)

        return FamilyUnit(partners=partners, children=tuple(built), depth=depth)

    # ==================== WHOLE TREE ====================

    def build(self, focus_key: Optional[FocusKey] = None,
              layout_engine: Optional[LayoutEngine] = None) -> Optional[FamilyTreeData]:
        couple = self.select_focus(focus_key)
        if couple is None:
            return None
        focus, spouse = couple

        left = self.find_parent_couple(focus)
        right = self.find_parent_couple(spouse)
        if left and right and {m.id for m in left} & {m.id for m in right}:
            logger.warning("Ancestor couples of %s and %s overlap, dropping the right side", focus.id, spouse.id)
            right = None

        visited: Set[str] = set()
        for side in (left, right):
            if side:
                visited.update(m.id for m in side)
        center_depth = 1 if (left or right) else 0
        center_unit = self.build_unit(focus, spouse, center_depth, visited)

        engine = layout_engine or LayoutEngine()
        layout = engine.build_tree_layout(center_unit, left, right)
        logger.debug("Tree layout %sx%s with %d frames", layout.tree_size.width,
                     layout.tree_size.height, len(layout.frames))
        return FamilyTreeData(
            center_unit=center_unit,
            left_ancestor_couple=left,
            right_ancestor_couple=right,
            layout=layout,
        )


def select_focus(members: Sequence[Member], focus_key: Optional[FocusKey] = None) -> Optional[Tuple[Member, Member]]:
    return FamilyTreeBuilder(build_member_graph(members)).select_focus(focus_key)


def build_family_tree(members: Sequence[Member], focus_key: Optional[FocusKey] = None,
                      layout_engine: Optional[LayoutEngine] = None) -> Optional[FamilyTreeData]:
    return FamilyTreeBuilder(build_member_graph(members)).build(focus_key, layout_engine)
