"""
Data manager for the family tree.
Holds the current member snapshot, loads/saves it as JSON, and recomputes the tree,
connectors and relationship labels only when the snapshot content changes.
"""

import json
from typing import Iterable, List, Optional, Sequence

import networkx as nx

from connector_geometry import build_connectors
from layout_engine import LayoutEngine
from member_graph import build_member_graph, edge_targets, get_member, members_in_order, resolve_spouse, resolved_targets
from models import (ConnectorSet, FamilyTreeData, Member, RelationshipType, SnapshotError,
                    member_from_record, member_to_record)
from relationship_calculator import RelationshipCalculator
from tree_builder import FamilyTreeBuilder, FocusKey
from utils.logger_service import LoggerService


_NOT_BUILT = object()


def members_from_records(records: Iterable[dict]) -> List[Member]:
    return [member_from_record(r) for r in records]


class DataManager:
    def __init__(self, members: Sequence[Member] = (), activity_logger: Optional[LoggerService] = None,
                 layout_engine: Optional[LayoutEngine] = None, focus_key: Optional[FocusKey] = None):
        self.logger = activity_logger or LoggerService()
        self.layout_engine = layout_engine or LayoutEngine()
        self.focus_key = focus_key
        self._members: tuple = ()
        self.graph = nx.MultiDiGraph()
        self.relationships = RelationshipCalculator(self.graph)
        self._tree = _NOT_BUILT
        self._connectors: Optional[ConnectorSet] = None
        self.set_members(members)

    @property
    def members(self) -> List[Member]:
        return list(self._members)

    # ==================== SNAPSHOTS ====================

    def set_members(self, members: Sequence[Member]) -> bool:
        """Replaces the snapshot. Returns False (and keeps every cached result) if nothing changed."""
        snapshot = tuple(members)
        if snapshot == self._members:
            self.logger.log("SNAPSHOT_UNCHANGED", f"{len(snapshot)} members")
            return False

        self._members = snapshot
        self.graph = build_member_graph(snapshot)
        self.relationships = RelationshipCalculator(self.graph)
        self._tree = _NOT_BUILT
        self._connectors = None
        self.logger.log("SNAPSHOT_CHANGED", f"{len(snapshot)} members")
        return True

    def load_snapshot(self, path: str) -> bool:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e

        records = data.get('members') if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise SnapshotError(f"Snapshot {path} has no member list")
        self.logger.log("LOAD_SNAPSHOT", f"{path}: {len(records)} records")
        return self.set_members(members_from_records(records))

    def save_snapshot(self, path: str):
        data = {'members': [member_to_record(m) for m in self._members]}
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    # ==================== DERIVED VIEWS ====================

    def build_family_tree(self) -> Optional[FamilyTreeData]:
        if self._tree is _NOT_BUILT:
            builder = FamilyTreeBuilder(self.graph)
            self._tree = builder.build(self.focus_key, self.layout_engine)
            if self._tree is None:
                self.logger.log("BUILD_TREE", "no focus couple")
            else:
                partners = ", ".join(p.id for p in self._tree.center_unit.partners)
                self.logger.log("BUILD_TREE", f"focus {partners}: {len(self._tree.layout.frames)} frames")
        return self._tree

    def connectors(self) -> ConnectorSet:
        if self._connectors is None:
            self._connectors = build_connectors(self.build_family_tree())
        return self._connectors

    def relationship_label(self, observer_id: str, target_id: str, possessive: bool = False) -> str:
        return self.relationships.get_relationship_label(observer_id, target_id, possessive)

    def siblings_of(self, member_id: str) -> List[Member]:
        return self.relationships.get_siblings(member_id)

    # ==================== SELECTORS ====================

    def get_member_by_id(self, member_id: str) -> Optional[Member]:
        return get_member(self.graph, member_id)

    def get_spouse_of(self, member_id: str) -> Optional[Member]:
        if get_member(self.graph, member_id) is None:
            return None
        return resolve_spouse(self.graph, member_id)

    def get_children_of(self, member_id: str) -> List[Member]:
        return resolved_targets(self.graph, member_id, RelationshipType.CHILD)

    def get_parents_of(self, member_id: str) -> List[Member]:
        return resolved_targets(self.graph, member_id, RelationshipType.PARENT)

    def get_members_by_generation(self, generation: int) -> List[Member]:
        result = []
        for member in members_in_order(self.graph):
            has_parents = bool(edge_targets(self.graph, member.id, RelationshipType.PARENT))
            has_children = bool(edge_targets(self.graph, member.id, RelationshipType.CHILD))
            spouse = self.get_spouse_of(member.id)
            spouse_has_children = spouse is not None and \
                bool(edge_targets(self.graph, spouse.id, RelationshipType.CHILD))

            if generation == 0:
                matches = not has_parents
            elif generation == 1:
                matches = has_parents and (has_children or spouse_has_children)
            elif generation == 2:
                matches = has_parents and not has_children and not spouse_has_children
            else:
                matches = False
            if matches:
                result.append(member)
        return result


# ==================== SAMPLE DATA ====================

def _person(member_id, first, last, gender, born, relationships, nickname=None):
    record = {
        'id': member_id,
        'firstName': first,
        'lastName': last,
        'gender': gender,
        'birthDate': born,
        'relationships': [{'memberId': target, 'type': rel} for target, rel in relationships],
        'createdBy': 'eli',
        'createdAt': '2024-01-01T00:00:00',
        'updatedAt': '2024-01-01T00:00:00',
    }
    if nickname:
        record['nickname'] = nickname
    return record


SAMPLE_RECORDS = [
    _person('peggy', 'Peggy', 'Deleenheer', 'female', '1948-05-12',
            [('ron', 'spouse'), ('shelby', 'child')], nickname='Grandma'),
    _person('ron', 'Ron', 'Deleenheer', 'male', '1946-08-23',
            [('peggy', 'spouse'), ('shelby', 'child')], nickname='Grandpa'),
    _person('james', 'James', 'Herman', 'male', '1944-02-19',
            [('linda', 'spouse'), ('timothy', 'child')], nickname='Papa'),
    _person('linda', 'Linda', 'Herman', 'female', '1947-09-30',
            [('james', 'spouse'), ('timothy', 'child')], nickname='Nana'),
    _person('shelby', 'Shelby', 'Herman', 'female', '1972-03-15',
            [('peggy', 'parent'), ('ron', 'parent'), ('timothy', 'spouse'),
             ('ella', 'child'), ('eli', 'child'), ('bennett', 'child'), ('ember', 'child')],
            nickname='Mom'),
    _person('timothy', 'Timothy', 'Herman', 'male', '1970-11-08',
            [('james', 'parent'), ('linda', 'parent'), ('shelby', 'spouse'),
             ('ella', 'child'), ('eli', 'child'), ('bennett', 'child'), ('ember', 'child')],
            nickname='Dad'),
    _person('ella', 'Ella', 'Fu', 'female', '1996-07-22',
            [('shelby', 'parent'), ('timothy', 'parent'), ('preston', 'spouse'), ('mila', 'child')]),
    _person('preston', 'Preston', 'Fu', 'male', '1995-02-14',
            [('ella', 'spouse'), ('mila', 'child')]),
    _person('mila', 'Mila', 'Fu', 'female', '2024-05-18',
            [('ella', 'parent'), ('preston', 'parent')]),
    _person('eli', 'Eli', 'Herman', 'male', '1998-09-03',
            [('shelby', 'parent'), ('timothy', 'parent')]),
    _person('bennett', 'Bennett', 'Herman', 'male', '2001-04-17',
            [('shelby', 'parent'), ('timothy', 'parent')]),
    _person('ember', 'Ember', 'Herman', 'female', '2004-12-25',
            [('shelby', 'parent'), ('timothy', 'parent')]),
]


def sample_members() -> List[Member]:
    """The three-generation Herman family."""
    return members_from_records(SAMPLE_RECORDS)
