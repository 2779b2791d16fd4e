"""
SVG renderer for the family tree.
Draws a finished layout and its connectors into an SVG string; each member is a clickable <a id='...'> group.
"""

from html import escape
from typing import Dict, List, Optional, Tuple

from models import ConnectorSet, DepthTier, FamilyTreeData, FamilyUnit, LineSegment, Member
from relationship_calculator import RelationshipCalculator

STYLE = """
<style>
    .node-rect { cursor: pointer; stroke: #5b4636; stroke-width: 1.5; }
    .tier-A { fill: #d9c3a5; }
    .tier-B { fill: #c8e6c9; }
    .tier-C { fill: #e8f5e9; }
    .node-text { pointer-events: none; font-family: sans-serif; font-size: 12px; }
    .rel-text { font-size: 10px; fill: #666; }
    .connector { stroke: #6d4c41; stroke-width: 2.5; stroke-linecap: round; }
</style>
"""

MAX_LABEL_LENGTH = 14


class SVGRenderer:
    def __init__(self, tree: FamilyTreeData, connectors: ConnectorSet,
                 relationships: Optional[RelationshipCalculator] = None,
                 observer_id: Optional[str] = None):
        self.tree = tree
        self.connectors = connectors
        self.relationships = relationships
        self.observer_id = observer_id
        self.members: Dict[str, Member] = self._collect_members()

    def _collect_members(self) -> Dict[str, Member]:
        members = {}

        def visit(unit):
            for partner in unit.partners:
                members[partner.id] = partner
            for child in unit.children:
                if isinstance(child, FamilyUnit):
                    visit(child)
                else:
                    members[child.id] = child

        visit(self.tree.center_unit)
        for side in (self.tree.left_ancestor_couple, self.tree.right_ancestor_couple):
            for member in side or ():
                members[member.id] = member
        return members

    def generate_svg(self, transform: Tuple[float, float, float] = (1.0, 0.0, 0.0)) -> str:
        scale, translate_x, translate_y = transform
        size = self.tree.layout.tree_size

        elements = []
        elements.extend(self._draw_edges())
        elements.extend(self._draw_nodes())

        return f"""
        <svg viewBox="0 0 {size.width} {size.height}"
             width="{size.width}px"
             height="{size.height}px"
             xmlns="http://www.w3.org/2000/svg">
            {STYLE}
            <g transform="translate({translate_x} {translate_y}) scale({scale})">
            {''.join(elements)}
            </g>
        </svg>
        """

    def _draw_nodes(self) -> List[str]:
        nodes_svg = []
        layout = self.tree.layout

        for member_id, frame in layout.frames.items():
            member = self.members.get(member_id)
            if member is None:
                continue
            tier = layout.variants.get(member_id, DepthTier.B).value

            label = member.display_name
            if len(label) > MAX_LABEL_LENGTH:
                label = label[:MAX_LABEL_LENGTH - 2] + "..."

            rel_svg = ""
            if self.relationships is not None and self.observer_id:
                rel = self.relationships.get_relationship_label(self.observer_id, member_id)
                rel_svg = f"""
                    <text x="{frame.center_x}" y="{frame.center_y + 16}" text-anchor="middle" class="node-text rel-text">
                        {escape(rel)}
                    </text>"""

            nodes_svg.append(f"""
            <a href='#' id='{escape(member_id, quote=True)}'>
                <g>
                    <rect x="{frame.x}" y="{frame.y}" width="{frame.width}" height="{frame.height}"
                          rx="8" ry="8" class="node-rect tier-{tier}" />
                    <text x="{frame.center_x}" y="{frame.center_y}" text-anchor="middle" dominant-baseline="middle" class="node-text">
                        {escape(label)}
                    </text>{rel_svg}
                </g>
            </a>
            """)
        return nodes_svg

    def _draw_edges(self) -> List[str]:
        lines = []
        for group in (self.connectors.spouse_bars, self.connectors.stems,
                      self.connectors.rails, self.connectors.drops):
            lines.extend(self._line(seg) for seg in group)
        return lines

    def _line(self, seg: LineSegment) -> str:
        return f'<line x1="{seg.x1}" y1="{seg.y1}" x2="{seg.x2}" y2="{seg.y2}" class="connector" />'
