#!/usr/bin/env python3
"""
PDF relationship report
Summary page, network figure, and one section per business with its relationships
"""

import textwrap
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages

from .formatters import (
    format_confidence,
    format_contact,
    format_type_label,
    get_confidence_level,
    truncate_text,
)
from .graph_builder import (
    GraphFilter,
    build_graph_data,
    get_business_relationships,
    get_network_stats,
)
from .models import BusinessRecord, RelationshipEdge, is_bidirectional
from .text_sanitizer import sanitize_for_pdf
from .visualize import draw_network

PAGE_SIZE = (8.5, 11)
LINES_PER_PAGE = 52
WRAP_WIDTH = 95
DESCRIPTION_LENGTH = 300

# (text, style) where style is 'title', 'heading' or 'body'
Line = Tuple[str, str]


def _wrap(text: str, indent: str = '') -> List[Line]:
    wrapped = textwrap.wrap(sanitize_for_pdf(text), width=WRAP_WIDTH - len(indent)) or ['']
    return [(indent + part, 'body') for part in wrapped]


def summary_lines(businesses: Sequence[BusinessRecord], relationships: Sequence[RelationshipEdge]) -> List[Line]:
    stats = get_network_stats(businesses, relationships)

    lines: List[Line] = [
        ("Business Relationship Report", 'title'),
        ('', 'body'),
        ("Network Summary", 'heading'),
        (f"Businesses: {stats.total_businesses}", 'body'),
        (f"Relationships: {stats.total_relationships}", 'body'),
        (f"Connected businesses: {stats.connected_businesses}", 'body'),
        (f"Average connections: {stats.avg_connections}", 'body'),
        (f"Average confidence: {format_confidence(stats.avg_confidence)}", 'body'),
        ('', 'body'),
        ("Relationship Types", 'heading'),
    ]
    for rel_type, count in sorted(stats.type_breakdown.items()):
        lines.append((f"{format_type_label(rel_type)}: {count}", 'body'))

    lines += [('', 'body'), ("Most Connected", 'heading')]
    for i, item in enumerate(stats.most_connected, 1):
        lines.append((f"{i}. {sanitize_for_pdf(item['business'].name)} ({item['connections']} connections)", 'body'))
    return lines


def business_lines(
    business: BusinessRecord,
    relationships: Sequence[RelationshipEdge],
    businesses: Sequence[BusinessRecord],
) -> List[Line]:
    lines: List[Line] = [
        (sanitize_for_pdf(business.name), 'title'),
        (f"{business.industry}  |  {sanitize_for_pdf(format_contact(business))}", 'body'),
    ]
    lines += _wrap(truncate_text(business.description, DESCRIPTION_LENGTH))
    if business.website:
        lines.append((f"Website: {sanitize_for_pdf(business.website)}", 'body'))
    lines.append(('', 'body'))

    related = get_business_relationships(business.id, relationships, businesses)
    if not related:
        lines.append(("No relationships found at this confidence level.", 'body'))
        return lines

    lines.append((f"Relationships ({len(related)})", 'heading'))
    for item in related:
        rel = item['relationship']
        if is_bidirectional(relationships, rel.from_id, rel.to_id):
            arrow, direction = '<->', 'Bidirectional'
        else:
            arrow = '->' if item['direction'] == 'outbound' else '<-'
            direction = 'One-way'
        lines.append((
            f"{format_type_label(rel.type)} {arrow} {sanitize_for_pdf(item['partner_name'])}  "
            f"{format_confidence(rel.confidence)} ({get_confidence_level(rel.confidence)})",
            'heading',
        ))
        badges = f"  {direction}  |  Value: {rel.estimated_value.upper()}"
        if rel.mutual_benefit:
            badges += "  |  MUTUAL BENEFIT"
        lines.append((badges, 'body'))
        lines += _wrap(rel.reasoning, '  ')
        if rel.value_prop:
            lines += _wrap(f"Value proposition: {rel.value_prop}", '  ')
        lines += _wrap(f"Synergy: {rel.synergy_potential}", '  ')
        lines += _wrap(f"Example: {rel.collaboration_example}", '  ')
        for action in rel.action_items:
            lines += _wrap(f"* {action}", '    ')
        lines.append(('', 'body'))
    return lines


def _write_text_pages(pdf: PdfPages, lines: List[Line]):
    for start in range(0, max(len(lines), 1), LINES_PER_PAGE):
        fig = plt.figure(figsize=PAGE_SIZE)
        y = 0.95
        for text, style in lines[start:start + LINES_PER_PAGE]:
            if style == 'title':
                fig.text(0.07, y, text, fontsize=15, fontweight='bold', va='top')
            elif style == 'heading':
                fig.text(0.07, y, text, fontsize=10, fontweight='bold', va='top')
            else:
                fig.text(0.07, y, text, fontsize=9, va='top', family='monospace')
            y -= 0.0170
        pdf.savefig(fig)
        plt.close(fig)


def generate_report(
    businesses: Sequence[BusinessRecord],
    relationships: Sequence[RelationshipEdge],
    output_file: str = 'output/relationship_report.pdf',
    filters: Optional[GraphFilter] = None,
) -> Path:
    """Write the PDF report for the relationships that pass `filters`."""
    graph = build_graph_data(businesses, relationships, filters)
    visible = [link.relationship for link in graph.links]
    visible_businesses = [node.business for node in graph.nodes]

    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    with PdfPages(path) as pdf:
        _write_text_pages(pdf, summary_lines(visible_businesses, visible))

        fig, ax = plt.subplots(figsize=(11, 8.5))
        draw_network(graph, ax)
        pdf.savefig(fig)
        plt.close(fig)

        for business in visible_businesses:
            _write_text_pages(pdf, business_lines(business, visible, visible_businesses))

        info = pdf.infodict()
        info['Title'] = 'Business Relationship Report'

    return path
