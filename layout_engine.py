"""
Family tree layout engine.
Lays family units out bottom-up (sizes) and top-down (offsets), then centers the result in a square canvas.
Pure: the same units always produce the same frames.
"""

import logging
from typing import Dict, Optional, Sequence

from models import (DepthTier, FamilyUnit, Member, NodeFrame, Size, TreeLayout, UnitLayout,
                    depth_tier)

logger = logging.getLogger(__name__)

# --- SIZE CONSTANTS ---
NODE_WIDTH = 100
NODE_HEIGHT = 128
COUPLE_GAP = 16
BRANCH_GAP = 48
CHILD_GAP = 16
CONNECTOR_GAP = 48
LAYOUT_PADDING = 48


class LayoutEngine:
    def __init__(self, node_width: float = NODE_WIDTH, node_height: float = NODE_HEIGHT,
                 couple_gap: float = COUPLE_GAP, branch_gap: float = BRANCH_GAP,
                 child_gap: float = CHILD_GAP, connector_gap: float = CONNECTOR_GAP,
                 padding: float = LAYOUT_PADDING):
        self.node_width = node_width
        self.node_height = node_height
        self.couple_gap = couple_gap
        self.branch_gap = branch_gap
        self.child_gap = child_gap
        self.connector_gap = connector_gap
        self.padding = padding

        for name in ('node_width', 'node_height', 'couple_gap', 'branch_gap',
                     'child_gap', 'connector_gap', 'padding'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    def row_width(self, count: int) -> float:
        """Width of a row of 0, 1 or 2 partner nodes."""
        if count <= 0:
            return 0
        if count == 1:
            return self.node_width
        return self.node_width * 2 + self.couple_gap

    def _frame(self, x: float, y: float) -> NodeFrame:
        return NodeFrame(x, y, self.node_width, self.node_height)

    def _leaf_layout(self, member: Member, depth: int) -> UnitLayout:
        return UnitLayout(
            width=self.node_width,
            height=self.node_height,
            frames={member.id: self._frame(0, 0)},
            variants={member.id: depth_tier(depth)},
        )

    # ==================== FAMILY UNITS ====================

    def layout_unit(self, unit: FamilyUnit) -> UnitLayout:
        partner_row_width = self.row_width(len(unit.partners))

        child_layouts = []
        for child in unit.children:
            if isinstance(child, FamilyUnit):
                child_layouts.append(self.layout_unit(child))
            else:
                child_layouts.append(self._leaf_layout(child, unit.depth + 1))

        children_row_width = sum(c.width for c in child_layouts) + \
            max(len(child_layouts) - 1, 0) * self.child_gap
        children_row_height = max((c.height for c in child_layouts), default=0)

        unit_width = max(partner_row_width, children_row_width)
        unit_height = self.node_height
        if child_layouts:
            unit_height += self.connector_gap + children_row_height

        frames: Dict[str, NodeFrame] = {}
        variants: Dict[str, DepthTier] = {}

        # Partner row, centered at the top
        cursor_x = (unit_width - partner_row_width) / 2
        for partner in unit.partners:
            frames[partner.id] = self._frame(cursor_x, 0)
            variants[partner.id] = depth_tier(unit.depth)
            cursor_x += self.node_width + self.couple_gap

        # Children row, centered below the connector gap
        if child_layouts:
            cursor_x = (unit_width - children_row_width) / 2
            row_y = self.node_height + self.connector_gap
            for child_layout in child_layouts:
                for member_id, frame in child_layout.frames.items():
                    frames[member_id] = frame.translated(cursor_x, row_y)
                variants.update(child_layout.variants)
                cursor_x += child_layout.width + self.child_gap

        return UnitLayout(width=unit_width, height=unit_height, frames=frames, variants=variants)

    # ==================== WHOLE TREE ====================

    def build_tree_layout(self, center_unit: FamilyUnit,
                          left_ancestors: Optional[Sequence[Member]] = None,
                          right_ancestors: Optional[Sequence[Member]] = None) -> TreeLayout:
        center = self.layout_unit(center_unit)

        left = list(left_ancestors or ())[:2]
        right = list(right_ancestors or ())[:2]
        left_width = self.row_width(len(left))
        right_width = self.row_width(len(right))
        has_ancestors = bool(left or right)

        top_row_width = left_width + right_width
        if left and right:
            top_row_width += self.branch_gap
        top_row_height = self.node_height if has_ancestors else 0
        center_offset_y = top_row_height + self.connector_gap if has_ancestors else 0

        base_width = max(center.width, top_row_width)
        base_height = center_offset_y + center.height
        center_offset_x = (base_width - center.width) / 2

        frames: Dict[str, NodeFrame] = {}
        variants: Dict[str, DepthTier] = dict(center.variants)
        for member_id, frame in center.frames.items():
            frames[member_id] = frame.translated(center_offset_x, center_offset_y)

        if has_ancestors:
            cursor_x = (base_width - top_row_width) / 2
            for side, side_width in ((left, left_width), (right, right_width)):
                if not side:
                    continue
                x = cursor_x
                for member in side:
                    frames[member.id] = self._frame(x, 0)
                    variants[member.id] = DepthTier.A
                    x += self.node_width + self.couple_gap
                cursor_x += side_width + self.branch_gap

        # Center everything in a square canvas
        side = max(base_width, base_height) + self.padding * 2
        offset_x = (side - base_width) / 2
        offset_y = (side - base_height) / 2
        logger.debug("Base %sx%s on a %s canvas", base_width, base_height, side)
        frames = {member_id: frame.translated(offset_x, offset_y) for member_id, frame in frames.items()}

        return TreeLayout(
            width=base_width,
            height=base_height,
            frames=frames,
            variants=variants,
            tree_size=Size(side, side),
        )


def layout_unit(unit: FamilyUnit) -> UnitLayout:
    return LayoutEngine().layout_unit(unit)


def build_tree_layout(center_unit: FamilyUnit,
                      left_ancestors: Optional[Sequence[Member]] = None,
                      right_ancestors: Optional[Sequence[Member]] = None) -> TreeLayout:
    return LayoutEngine().build_tree_layout(center_unit, left_ancestors, right_ancestors)
