"""
Connector geometry for a finished tree layout.
Every family unit gets a spouse bar, a stem down from the couple, a rail over the children and one drop per child.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from models import (ConnectorSet, FamilyTreeData, FamilyUnit, LineSegment, Member, NodeFrame,
                    TreeLayout)

logger = logging.getLogger(__name__)

RAIL_MARGIN = 8


@dataclass(frozen=True)
class PartnerLine:
    x1: float
    x2: float
    y: float
    mid_x: float
    top_y: float
    bottom_y: float


@dataclass(frozen=True)
class Anchor:
    x: float
    y: float


class ConnectorBuilder:
    def __init__(self, layout: TreeLayout, rail_margin: float = RAIL_MARGIN):
        self.frames: Dict[str, NodeFrame] = layout.frames
        self.rail_margin = rail_margin
        self.spouse_bars: List[LineSegment] = []
        self.stems: List[LineSegment] = []
        self.rails: List[LineSegment] = []
        self.drops: List[LineSegment] = []

    def partner_line(self, unit: FamilyUnit) -> Optional[PartnerLine]:
        frames = [self.frames.get(p.id) for p in unit.partners]
        if any(f is None for f in frames):
            return None

        if len(frames) == 1:
            frame = frames[0]
            return PartnerLine(frame.center_x, frame.center_x, frame.center_y, frame.center_x,
                               frame.y, frame.bottom)

        left, right = sorted(frames, key=lambda f: f.x)
        x1 = left.x + left.width
        x2 = right.x
        return PartnerLine(
            x1=x1,
            x2=x2,
            y=(left.center_y + right.center_y) / 2,
            mid_x=(x1 + x2) / 2,
            top_y=min(left.y, right.y),
            bottom_y=max(left.bottom, right.bottom),
        )

    def child_anchor(self, child: Union[FamilyUnit, Member]) -> Optional[Anchor]:
        if isinstance(child, FamilyUnit):
            line = self.partner_line(child)
            if line is None:
                return None
            return Anchor(line.mid_x, line.y)
        frame = self.frames.get(child.id)
        if frame is None:
            return None
        return Anchor(frame.center_x, frame.y)

    def add_unit(self, unit: FamilyUnit):
        line = self.partner_line(unit)
        if line is None:
            logger.debug("Unit %s has no frames, skipping connectors", [p.id for p in unit.partners])
            return

        if len(unit.partners) == 2:
            self.spouse_bars.append(LineSegment(line.x1, line.y, line.x2, line.y))

        anchors = [a for a in (self.child_anchor(c) for c in unit.children) if a is not None]
        if not anchors:
            return

        top_y = min(a.y for a in anchors)
        rail_y = min(max(line.bottom_y + self.rail_margin, top_y - self.rail_margin), top_y)
        xs = [line.mid_x] + [a.x for a in anchors]

        self.stems.append(LineSegment(line.mid_x, line.y, line.mid_x, rail_y))
        self.rails.append(LineSegment(min(xs), rail_y, max(xs), rail_y))
        for anchor in anchors:
            self.drops.append(LineSegment(anchor.x, rail_y, anchor.x, anchor.y))

    def traverse(self, unit: FamilyUnit):
        self.add_unit(unit)
        for child in unit.children:
            if isinstance(child, FamilyUnit):
                self.traverse(child)

    def result(self) -> ConnectorSet:
        return ConnectorSet(
            spouse_bars=tuple(self.spouse_bars),
            stems=tuple(self.stems),
            rails=tuple(self.rails),
            drops=tuple(self.drops),
        )


def build_connectors(tree: Optional[FamilyTreeData], rail_margin: float = RAIL_MARGIN) -> ConnectorSet:
    if tree is None:
        return ConnectorSet()

    builder = ConnectorBuilder(tree.layout, rail_margin)
    builder.traverse(tree.center_unit)

    # Each ancestor side is a one-generation unit whose only child is its focus partner.
    sides = (tree.left_ancestor_couple, tree.right_ancestor_couple)
    for ancestors, partner in zip(sides, tree.center_unit.partners):
        if ancestors:
            builder.add_unit(FamilyUnit(partners=tuple(ancestors), children=(partner,), depth=0))
    return builder.result()
