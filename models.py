"""
Value types for the family tree engine.
Members, relationship edges, family units and layout geometry. Everything here is immutable.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """A member snapshot record could not be read."""


# ==================== ENUMS ====================

class RelationshipType(str, Enum):
    PARENT = 'parent'
    CHILD = 'child'
    SPOUSE = 'spouse'
    # Derived types. Never stored by the data layer, tolerated if they show up.
    SIBLING = 'sibling'
    GRANDPARENT = 'grandparent'
    GRANDCHILD = 'grandchild'


STORED_TYPES = (RelationshipType.PARENT, RelationshipType.CHILD, RelationshipType.SPOUSE)


class RelationshipKind(str, Enum):
    BIOLOGICAL = 'biological'
    ADOPTED = 'adopted'
    STEP = 'step'
    GUARDIAN = 'guardian'


class Gender(str, Enum):
    MALE = 'male'
    FEMALE = 'female'


class DepthTier(str, Enum):
    A = 'A'
    B = 'B'
    C = 'C'


def depth_tier(depth: int) -> DepthTier:
    if depth <= 0:
        return DepthTier.A
    if depth == 1:
        return DepthTier.B
    return DepthTier.C


# ==================== MEMBERS ====================

@dataclass(frozen=True)
class RelationshipEdge:
    target_id: str
    type: RelationshipType
    kind: Optional[RelationshipKind] = None


@dataclass(frozen=True)
class Member:
    id: str
    first_name: str = ''
    last_name: str = ''
    nickname: Optional[str] = None
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    bio: Optional[str] = None
    relationships: Tuple[RelationshipEdge, ...] = ()
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.nickname or self.first_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ==================== FAMILY UNITS ====================

@dataclass(frozen=True)
class FamilyUnit:
    """A couple (or a single parent) and their children, recursively."""
    partners: Tuple[Member, ...]
    children: Tuple[Union['FamilyUnit', Member], ...] = ()
    depth: int = 0

    def __post_init__(self):
        if len(self.partners) not in (1, 2):
            raise ValueError(f"FamilyUnit needs 1 or 2 partners, got {len(self.partners)}")

    def member_ids(self) -> List[str]:
        """Every member id in this unit and its nested units, depth-first."""
        ids = [p.id for p in self.partners]
        for child in self.children:
            if isinstance(child, FamilyUnit):
                ids.extend(child.member_ids())
            else:
                ids.append(child.id)
        return ids


# ==================== LAYOUT GEOMETRY ====================

@dataclass(frozen=True)
class NodeFrame:
    x: float
    y: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def translated(self, dx: float, dy: float) -> 'NodeFrame':
        return NodeFrame(self.x + dx, self.y + dy, self.width, self.height)


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class UnitLayout:
    width: float
    height: float
    frames: Dict[str, NodeFrame] = field(default_factory=dict)
    variants: Dict[str, DepthTier] = field(default_factory=dict)


@dataclass(frozen=True)
class TreeLayout:
    width: float
    height: float
    frames: Dict[str, NodeFrame] = field(default_factory=dict)
    variants: Dict[str, DepthTier] = field(default_factory=dict)
    tree_size: Size = Size(1, 1)


EMPTY_LAYOUT = TreeLayout(width=1, height=1, tree_size=Size(1, 1))


@dataclass(frozen=True)
class LineSegment:
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class ConnectorSet:
    spouse_bars: Tuple[LineSegment, ...] = ()
    stems: Tuple[LineSegment, ...] = ()
    rails: Tuple[LineSegment, ...] = ()
    drops: Tuple[LineSegment, ...] = ()

    def all_segments(self) -> List[LineSegment]:
        return [*self.spouse_bars, *self.stems, *self.rails, *self.drops]


@dataclass(frozen=True)
class FamilyTreeData:
    center_unit: FamilyUnit
    left_ancestor_couple: Optional[Tuple[Member, Member]]
    right_ancestor_couple: Optional[Tuple[Member, Member]]
    layout: TreeLayout


# ==================== SNAPSHOT RECORDS ====================

def _parse_enum(enum_cls, value, member_id: str):
    if value is None or value == '':
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("Member %s: dropping unknown %s value %r", member_id, enum_cls.__name__, value)
        return None


def _parse_date(value, member_id: str) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning("Member %s: ignoring unparseable date %r", member_id, value)
        return None


def _parse_timestamp(value, member_id: str) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Member %s: ignoring unparseable timestamp %r", member_id, value)
        return None


def member_from_record(record: dict) -> Member:
    """Builds a Member from a JSON-style record with camelCase keys."""
    if not isinstance(record, dict):
        raise SnapshotError(f"Member record must be a mapping, got {type(record).__name__}")
    member_id = record.get('id')
    if not member_id:
        raise SnapshotError("Member record has no id")
    member_id = str(member_id)

    raw_edges = record.get('relationships') or []
    if not isinstance(raw_edges, list):
        raise SnapshotError(f"Member {member_id}: relationships must be a list, got {type(raw_edges).__name__}")

    edges = []
    for raw in raw_edges:
        if not isinstance(raw, dict):
            logger.warning("Member %s: dropping malformed relationship %r", member_id, raw)
            continue
        target = raw.get('memberId') or raw.get('targetMemberId')
        rel_type = _parse_enum(RelationshipType, raw.get('type'), member_id)
        if not target or rel_type is None:
            logger.warning("Member %s: dropping malformed relationship %r", member_id, raw)
            continue
        kind = _parse_enum(RelationshipKind, raw.get('kind'), member_id)
        edges.append(RelationshipEdge(str(target), rel_type, kind))

    return Member(
        id=member_id,
        first_name=record.get('firstName') or '',
        last_name=record.get('lastName') or '',
        nickname=record.get('nickname') or None,
        gender=_parse_enum(Gender, record.get('gender'), member_id),
        birth_date=_parse_date(record.get('birthDate'), member_id),
        death_date=_parse_date(record.get('deathDate'), member_id),
        bio=record.get('bio') or None,
        relationships=tuple(edges),
        created_by=record.get('createdBy'),
        created_at=_parse_timestamp(record.get('createdAt'), member_id),
        updated_at=_parse_timestamp(record.get('updatedAt'), member_id),
    )


def member_to_record(member: Member) -> dict:
    record = {
        'id': member.id,
        'firstName': member.first_name,
        'lastName': member.last_name,
        'relationships': [],
    }
    for edge in member.relationships:
        raw = {'memberId': edge.target_id, 'type': edge.type.value}
        if edge.kind is not None:
            raw['kind'] = edge.kind.value
        record['relationships'].append(raw)

    optional = {
        'nickname': member.nickname,
        'gender': member.gender.value if member.gender else None,
        'birthDate': member.birth_date.isoformat() if member.birth_date else None,
        'deathDate': member.death_date.isoformat() if member.death_date else None,
        'bio': member.bio,
        'createdBy': member.created_by,
        'createdAt': member.created_at.isoformat() if member.created_at else None,
        'updatedAt': member.updated_at.isoformat() if member.updated_at else None,
    }
    record.update({k: v for k, v in optional.items() if v is not None})
    return record
