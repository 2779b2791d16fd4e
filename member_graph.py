"""
Member Graph: a networkx view over one member snapshot.
Nodes carry the Member under the 'member' key. Every stored edge is kept, with 'type', 'kind' and its
position 'order' in the member's relationship list; the first stored edge to a target is the direct one.
Targets that are not in the snapshot still get a node, but without a member attached.
"""

import logging
from typing import Iterable, List, Optional, Tuple

import networkx as nx

from models import STORED_TYPES, Member, RelationshipEdge, RelationshipType

logger = logging.getLogger(__name__)

MEMBER_KEY = 'member'


def build_member_graph(members: Iterable[Member]) -> nx.MultiDiGraph:
    graph = nx.MultiDiGraph()

    # Nodes first, so node order is the stored member order.
    ordered: List[Member] = []
    for member in members:
        if graph.has_node(member.id):
            logger.warning("Duplicate member id %s in snapshot, keeping the first record", member.id)
            continue
        graph.add_node(member.id, **{MEMBER_KEY: member})
        ordered.append(member)

    for member in ordered:
        for order, edge in enumerate(member.relationships):
            if edge.type not in STORED_TYPES:
                logger.debug("Member %s stores a derived %s edge to %s", member.id, edge.type.value, edge.target_id)
            graph.add_edge(member.id, edge.target_id, type=edge.type, kind=edge.kind, order=order)

    dangling = [n for n, data in graph.nodes(data=True) if MEMBER_KEY not in data]
    if dangling:
        logger.warning("Snapshot references %d unknown member id(s): %s", len(dangling), dangling)
    return graph


def get_member(graph: nx.MultiDiGraph, member_id: Optional[str]) -> Optional[Member]:
    if member_id is None or not graph.has_node(member_id):
        return None
    return graph.nodes[member_id].get(MEMBER_KEY)


def members_in_order(graph: nx.MultiDiGraph) -> List[Member]:
    return [data[MEMBER_KEY] for _, data in graph.nodes(data=True) if MEMBER_KEY in data]


def _stored_edges(graph: nx.MultiDiGraph, member_id: str) -> List[Tuple[str, dict]]:
    # Adjacency groups parallel edges by target, so restore the member's own order.
    if not graph.has_node(member_id):
        return []
    edges = [(v, attrs) for _, v, attrs in graph.edges(member_id, data=True)]
    return sorted(edges, key=lambda e: e[1]['order'])


def edge_targets(graph: nx.MultiDiGraph, member_id: str, rel_type: RelationshipType) -> List[str]:
    """Target ids of one edge type, in stored order, each once. Unknown targets are included."""
    targets = []
    for target_id, attrs in _stored_edges(graph, member_id):
        if attrs['type'] == rel_type and target_id not in targets:
            targets.append(target_id)
    return targets


def resolved_targets(graph: nx.MultiDiGraph, member_id: str, rel_type: RelationshipType) -> List[Member]:
    """Like edge_targets, but only targets present in the snapshot."""
    result = []
    for target_id in edge_targets(graph, member_id, rel_type):
        target = get_member(graph, target_id)
        if target is not None:
            result.append(target)
    return result


def get_edge(graph: nx.MultiDiGraph, source_id: str, target_id: str) -> Optional[RelationshipEdge]:
    """The first stored edge from source to target."""
    parallel = graph.get_edge_data(source_id, target_id)
    if not parallel:
        return None
    attrs = min(parallel.values(), key=lambda a: a['order'])
    return RelationshipEdge(target_id, attrs['type'], attrs.get('kind'))


def has_edge_of_type(graph: nx.MultiDiGraph, source_id: str, target_id: str,
                     rel_type: RelationshipType) -> bool:
    parallel = graph.get_edge_data(source_id, target_id) or {}
    return any(attrs['type'] == rel_type for attrs in parallel.values())


def resolve_spouse(graph: nx.MultiDiGraph, member_id: str) -> Optional[Member]:
    """The first spouse edge whose target is a known member other than the member itself."""
    for spouse_id in edge_targets(graph, member_id, RelationshipType.SPOUSE):
        if spouse_id == member_id:
            continue
        spouse = get_member(graph, spouse_id)
        if spouse is not None:
            return spouse
    return None
