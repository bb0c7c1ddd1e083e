#!/usr/bin/env python3
"""
Graph Builder for Business Relationships
Builds: filtered relationship graph, ego networks, network statistics
Output: {nodes, links} structure for visualization and reports
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Iterable, List, Optional, Sequence

import networkx as nx

from .models import (
    BusinessRecord,
    DEFAULT_NODE_COLOR,
    INDUSTRY_COLORS,
    RELATIONSHIP_COLORS,
    RelationshipEdge,
)


@dataclass
class GraphFilter:
    """Filter criteria for building the relationship graph."""
    min_confidence: int = 50
    selected_types: Sequence[str] = ()
    selected_industries: Sequence[str] = ()


@dataclass
class GraphNode:
    id: str
    name: str
    industry: str
    description: str
    connections: int
    val: int           # node size
    color: str
    business: BusinessRecord


@dataclass
class GraphEdge:
    source: str
    target: str
    type: str
    confidence: int
    value: float       # link thickness
    color: str
    relationship: RelationshipEdge


@dataclass
class GraphData:
    nodes: List[GraphNode] = field(default_factory=list)
    links: List[GraphEdge] = field(default_factory=list)

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def to_dict(self) -> Dict:
        return {
            'nodes': [asdict(n) for n in self.nodes],
            'links': [asdict(l) for l in self.links],
        }


@dataclass
class NetworkStats:
    total_businesses: int
    total_relationships: int
    connected_businesses: int
    avg_connections: float
    avg_confidence: int
    most_connected: List[Dict] = field(default_factory=list)
    type_breakdown: Dict[str, int] = field(default_factory=dict)


def _connection_counts(relationships: Iterable[RelationshipEdge]) -> Dict[str, int]:
    """Degree per business id; each edge counts once for both endpoints."""
    counts: Dict[str, int] = {}
    for rel in relationships:
        counts[rel.from_id] = counts.get(rel.from_id, 0) + 1
        counts[rel.to_id] = counts.get(rel.to_id, 0) + 1
    return counts


def build_graph_data(
    businesses: Sequence[BusinessRecord],
    relationships: Sequence[RelationshipEdge],
    filters: Optional[GraphFilter] = None,
) -> GraphData:
    """
    Build the graph structure from businesses and relationships.

    Every business becomes a node, connected or not, unless the industry filter
    removes it. Edges below the confidence threshold, outside the selected types,
    or touching a removed node are dropped.
    """
    filters = filters or GraphFilter()

    filtered = [r for r in relationships if r.confidence >= filters.min_confidence]
    if filters.selected_types:
        filtered = [r for r in filtered if r.type in filters.selected_types]

    counts = _connection_counts(filtered)

    nodes = []
    for business in businesses:
        degree = counts.get(business.id, 0)
        nodes.append(GraphNode(
            id=business.id,
            name=business.name,
            industry=business.industry,
            description=business.description,
            connections=degree,
            val=max(5, degree * 3),
            color=INDUSTRY_COLORS.get(business.industry, DEFAULT_NODE_COLOR),
            business=business,
        ))

    if filters.selected_industries:
        nodes = [n for n in nodes if n.industry in filters.selected_industries]

    node_ids = {n.id for n in nodes}
    links = [
        GraphEdge(
            source=rel.from_id,
            target=rel.to_id,
            type=rel.type,
            confidence=rel.confidence,
            value=rel.confidence / 20,
            color=RELATIONSHIP_COLORS.get(rel.type, DEFAULT_NODE_COLOR),
            relationship=rel,
        )
        for rel in filtered
        if rel.from_id in node_ids and rel.to_id in node_ids
    ]

    return GraphData(nodes=nodes, links=links)


def filter_graph_by_node(graph: GraphData, node_id: Optional[str]) -> GraphData:
    """Ego network: the node, every link touching it, and the nodes on those links."""
    if not node_id or graph is None:
        return graph

    links = [l for l in graph.links if l.source == node_id or l.target == node_id]

    connected = {node_id}
    for link in links:
        connected.add(link.source)
        connected.add(link.target)

    nodes = [n for n in graph.nodes if n.id in connected]
    return GraphData(nodes=nodes, links=links)


def get_business_relationships(
    business_id: str,
    relationships: Sequence[RelationshipEdge],
    businesses: Sequence[BusinessRecord],
) -> List[Dict]:
    """Relationships touching one business with direction and partner info, highest confidence first."""
    business_map = {b.id: b for b in businesses}

    results = []
    for rel in relationships:
        if rel.from_id != business_id and rel.to_id != business_id:
            continue
        is_outbound = rel.from_id == business_id
        partner = business_map.get(rel.to_id if is_outbound else rel.from_id)
        results.append({
            'relationship': rel,
            'direction': 'outbound' if is_outbound else 'inbound',
            'partner': partner,
            'partner_name': partner.name if partner else 'Unknown Business',
        })

    return sorted(results, key=lambda r: r['relationship'].confidence, reverse=True)


def get_network_stats(
    businesses: Sequence[BusinessRecord],
    relationships: Sequence[RelationshipEdge],
) -> NetworkStats:
    """Aggregate counts, averages, top-5 businesses by degree and type breakdown."""
    counts = _connection_counts(relationships)

    connected = len(counts)
    avg_connections = sum(counts.values()) / connected if connected else 0

    # sorted() is stable, so ties keep input order
    most_connected = sorted(
        (
            {'business': b, 'connections': counts.get(b.id, 0)}
            for b in businesses
            if counts.get(b.id, 0) > 0
        ),
        key=lambda item: item['connections'],
        reverse=True,
    )[:5]

    type_breakdown: Dict[str, int] = {}
    for rel in relationships:
        type_breakdown[rel.type] = type_breakdown.get(rel.type, 0) + 1

    avg_confidence = (
        sum(r.confidence for r in relationships) / len(relationships) if relationships else 0
    )

    return NetworkStats(
        total_businesses=len(businesses),
        total_relationships=len(relationships),
        connected_businesses=connected,
        avg_connections=round(avg_connections, 1),
        avg_confidence=int(round(avg_confidence)),
        most_connected=most_connected,
        type_breakdown=type_breakdown,
    )


def get_unique_industries(businesses: Sequence[BusinessRecord]) -> List[str]:
    return sorted({b.industry for b in businesses})


def search_businesses(businesses: Sequence[BusinessRecord], query: Optional[str]) -> List[BusinessRecord]:
    """Case-insensitive match on name, description or industry."""
    if not query or not query.strip():
        return list(businesses)

    q = query.lower()
    return [
        b for b in businesses
        if q in b.name.lower() or q in b.description.lower() or q in b.industry.lower()
    ]


def to_networkx(graph: GraphData) -> nx.MultiDiGraph:
    """Convert graph data to a networkx multigraph (edges in both directions stay distinct)."""
    g = nx.MultiDiGraph()
    for node in graph.nodes:
        g.add_node(
            node.id,
            name=node.name,
            industry=node.industry,
            connections=node.connections,
            val=node.val,
            color=node.color,
        )
    for link in graph.links:
        g.add_edge(
            link.source,
            link.target,
            type=link.type,
            confidence=link.confidence,
            value=link.value,
            color=link.color,
        )
    return g
