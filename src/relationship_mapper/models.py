#!/usr/bin/env python3
"""
Data model for business relationship mapping.
Business records parsed from CSV and the relationship edges inferred between them.
"""

import hashlib
from dataclasses import dataclass, asdict, field, fields
from typing import Dict, List


RELATIONSHIP_TYPES = ('vendor', 'partner', 'referral', 'collaboration', 'supply_chain')

ESTIMATED_VALUES = ('high', 'medium', 'low')

DEFAULT_INDUSTRY = 'Professional Services'

INDUSTRIES = (
    'Technology',
    'Marketing & Design',
    'Health & Wellness',
    'Coaching & Consulting',
    'Real Estate',
    'Events & Gifts',
    'Food & Beverage',
    'Logistics',
    'Facilities Services',
    'Arts & Creative',
    DEFAULT_INDUSTRY,
)

NOT_SPECIFIED = 'Not specified'
NO_EXAMPLE = 'No specific example provided'
DEFAULT_SYNERGY = 'Complementary business synergy'

RELATIONSHIP_COLORS = {
    'vendor': '#00D9FF',
    'partner': '#8B5CF6',
    'referral': '#10B981',
    'collaboration': '#F59E0B',
    'supply_chain': '#EC4899',
}

RELATIONSHIP_LABELS = {
    'vendor': 'Vendor',
    'partner': 'Partner',
    'referral': 'Referral',
    'collaboration': 'Collaboration',
    'supply_chain': 'Supply Chain',
}

INDUSTRY_COLORS = {
    'Technology': '#00D9FF',
    'Marketing & Design': '#8B5CF6',
    'Health & Wellness': '#10B981',
    'Coaching & Consulting': '#F59E0B',
    'Real Estate': '#EC4899',
    'Events & Gifts': '#F472B6',
    'Food & Beverage': '#FBBF24',
    'Logistics': '#6366F1',
    'Facilities Services': '#14B8A6',
    'Arts & Creative': '#A78BFA',
    'Professional Services': '#64748B',
}

DEFAULT_NODE_COLOR = '#64748B'

CONFIDENCE_LEVELS = {
    'high': 80,
    'medium': 60,
    'low': 50,
}


def business_id(name: str, contact_email: str) -> str:
    """Stable id for a business: the same name and email always hash to the same id."""
    key = f"{(name or '').strip().lower()}|{(contact_email or '').strip().lower()}"
    return hashlib.sha256(key.encode('utf-8')).hexdigest()[:16]


def _known_fields(cls, data: Dict) -> Dict:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class BusinessRecord:
    """A business profile parsed from one CSV row."""
    id: str
    name: str
    contact_name: str = ''
    contact_email: str = ''
    contact_phone: str = ''
    website: str = ''
    linkedin: str = ''
    fun_fact: str = ''
    description: str = NOT_SPECIFIED
    target_market: str = NOT_SPECIFIED
    current_needs: str = NOT_SPECIFIED
    services: str = NOT_SPECIFIED
    industry: str = DEFAULT_INDUSTRY

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'BusinessRecord':
        return cls(**_known_fields(cls, data))


@dataclass
class RelationshipEdge:
    """A directed, typed, confidence-scored relationship between two businesses."""
    from_id: str
    to_id: str
    type: str
    confidence: int
    from_name: str = ''
    to_name: str = ''
    reasoning: str = ''
    value_prop: str = ''
    collaboration_example: str = NO_EXAMPLE
    synergy_potential: str = DEFAULT_SYNERGY
    action_items: List[str] = field(default_factory=list)
    estimated_value: str = 'medium'
    mutual_benefit: bool = False

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'RelationshipEdge':
        return cls(**_known_fields(cls, data))


def is_bidirectional(edges: List[RelationshipEdge], a_id: str, b_id: str) -> bool:
    """True when edges exist in both directions between a and b."""
    forward = any(e.from_id == a_id and e.to_id == b_id for e in edges)
    backward = any(e.from_id == b_id and e.to_id == a_id for e in edges)
    return forward and backward
