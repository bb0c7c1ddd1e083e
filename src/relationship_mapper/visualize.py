#!/usr/bin/env python3
"""
Static network rendering of the relationship graph
"""

from pathlib import Path
from typing import Optional

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import networkx as nx
from matplotlib.lines import Line2D
from matplotlib.patches import Patch

from .graph_builder import GraphData, to_networkx
from .models import RELATIONSHIP_COLORS, RELATIONSHIP_LABELS
from .text_sanitizer import sanitize_for_pdf


def draw_network(graph: GraphData, ax, title: Optional[str] = "Business Relationship Network"):
    """Draw the graph onto a matplotlib axis: nodes sized by degree, colored by industry."""
    g = nx.DiGraph()
    multi = to_networkx(graph)
    g.add_nodes_from(multi.nodes(data=True))
    # one drawn arrow per direction, the strongest relationship wins
    for u, v, data in multi.edges(data=True):
        if not g.has_edge(u, v) or data['confidence'] > g[u][v]['confidence']:
            g.add_edge(u, v, **data)

    if g.number_of_nodes() == 0:
        ax.text(0.5, 0.5, "No businesses to display", ha='center', va='center', fontsize=14)
        ax.axis('off')
        return

    pos = nx.spring_layout(g, k=1.5, iterations=100, seed=42)

    nx.draw_networkx_nodes(
        g, pos,
        ax=ax,
        node_color=[g.nodes[n]['color'] for n in g.nodes()],
        node_size=[g.nodes[n]['val'] * 60 for n in g.nodes()],
        alpha=0.9,
        linewidths=1.5,
        edgecolors='#1f2937'
    )

    edges = list(g.edges(data=True))
    if edges:
        nx.draw_networkx_edges(
            g, pos,
            ax=ax,
            edgelist=[(u, v) for u, v, _ in edges],
            edge_color=[d['color'] for _, _, d in edges],
            width=[d['value'] for _, _, d in edges],
            arrows=True,
            arrowsize=14,
            alpha=0.6,
            arrowstyle='->',
            connectionstyle='arc3,rad=0.1'
        )

    nx.draw_networkx_labels(
        g, pos,
        labels={n: sanitize_for_pdf(g.nodes[n]['name']) for n in g.nodes()},
        ax=ax,
        font_size=7,
        font_weight='bold',
        bbox=dict(boxstyle='round,pad=0.2', facecolor='white', alpha=0.7, edgecolor='none')
    )

    used_types = sorted({link.type for link in graph.links})
    used_industries = sorted({(node.industry, node.color) for node in graph.nodes})
    legend_elements = [
        Line2D([0], [0], color=RELATIONSHIP_COLORS.get(t, '#64748B'), lw=2, label=RELATIONSHIP_LABELS.get(t, t))
        for t in used_types
    ] + [
        Patch(facecolor=color, edgecolor='#1f2937', label=industry)
        for industry, color in used_industries
    ]
    if legend_elements:
        ax.legend(handles=legend_elements, loc='upper right', fontsize=8, framealpha=0.9)

    if title:
        ax.set_title(title, fontsize=16, fontweight='bold', pad=16)
    ax.axis('off')


def render_network(graph: GraphData, output_file: str = 'output/network.png', title: Optional[str] = None) -> Path:
    """Render the graph to a PNG file and return its path."""
    fig, ax = plt.subplots(figsize=(16, 12))
    try:
        draw_network(graph, ax, title or "Business Relationship Network")
        fig.tight_layout()

        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=150, bbox_inches='tight', facecolor='white')
    finally:
        plt.close(fig)
    return path
