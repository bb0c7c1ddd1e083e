#!/usr/bin/env python3
"""
Relationship Analyzer
Runs pairwise LLM analysis over business records and collects relationship edges
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from rich.console import Console

from .llm_client import LLMClient
from .models import (
    BusinessRecord,
    DEFAULT_SYNERGY,
    ESTIMATED_VALUES,
    NO_EXAMPLE,
    RelationshipEdge,
)
from .prompts import BUSINESS_A, SYSTEM_PROMPT, build_analysis_prompt, parse_ai_response

logger = logging.getLogger(__name__)

Pair = Tuple[BusinessRecord, BusinessRecord]


@dataclass
class AnalysisResult:
    """Outcome of one analysis run."""
    relationships: List[RelationshipEdge] = field(default_factory=list)
    new_businesses: List[BusinessRecord] = field(default_factory=list)
    pairs_total: int = 0
    pairs_succeeded: int = 0
    pairs_failed: int = 0
    self_edges_dropped: int = 0
    duration: float = 0.0

    @property
    def avg_confidence(self) -> float:
        if not self.relationships:
            return 0.0
        return sum(r.confidence for r in self.relationships) / len(self.relationships)

    @property
    def type_breakdown(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for rel in self.relationships:
            counts[rel.type] = counts.get(rel.type, 0) + 1
        return counts


def sample_businesses(businesses: List[BusinessRecord], sample_size: Optional[int]) -> List[BusinessRecord]:
    """Keep the first `sample_size` businesses (all of them when sample_size is None)."""
    if not sample_size:
        return list(businesses)
    return list(businesses[:sample_size])


def new_businesses_since(
    businesses: Sequence[BusinessRecord], existing: Sequence[BusinessRecord]
) -> List[BusinessRecord]:
    """Businesses whose id is not among the existing ones, in input order."""
    existing_ids = {b.id for b in existing}
    return [b for b in businesses if b.id not in existing_ids]


def pairs_for(
    businesses: Sequence[BusinessRecord],
    existing: Optional[Sequence[BusinessRecord]] = None,
) -> Iterator[Pair]:
    """
    Yield the pairs to analyze, in a deterministic order.

    Without `existing`, every unordered pair (i, j) with i < j.
    With `existing`, each new business against every existing business only.
    """
    if existing is None:
        for i in range(len(businesses)):
            for j in range(i + 1, len(businesses)):
                yield businesses[i], businesses[j]
        return

    for new_biz in new_businesses_since(businesses, existing):
        for existing_biz in existing:
            yield new_biz, existing_biz


class RelationshipAnalyzer:
    """Analyze business pairs with an LLM and turn the replies into relationship edges."""

    def __init__(
        self,
        client: LLMClient,
        rate_limit_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
        console: Optional[Console] = None,
    ):
        self.client = client
        self.rate_limit_delay = rate_limit_delay
        self.sleep = sleep
        self.console = console or Console()
        self._self_edges_dropped = 0

    def _to_edge(self, rel: Dict, pair: Pair, mutual_benefit: bool) -> RelationshipEdge:
        biz_a, biz_b = pair
        source = biz_a if rel['from'] == BUSINESS_A else biz_b
        target = biz_a if rel['to'] == BUSINESS_A else biz_b

        action_items = rel.get('action_items') or []
        if not isinstance(action_items, list):
            action_items = [action_items]

        estimated_value = str(rel.get('estimated_value') or '').lower()
        if estimated_value not in ESTIMATED_VALUES:
            estimated_value = 'medium'

        return RelationshipEdge(
            from_id=source.id,
            to_id=target.id,
            from_name=source.name,
            to_name=target.name,
            type=rel['type'],
            confidence=int(round(rel['confidence'])),
            reasoning=rel.get('reasoning') or '',
            value_prop=rel.get('value_prop') or '',
            collaboration_example=rel.get('collaboration_example') or NO_EXAMPLE,
            synergy_potential=rel.get('synergy_potential') or DEFAULT_SYNERGY,
            action_items=[str(item) for item in action_items],
            estimated_value=estimated_value,
            mutual_benefit=mutual_benefit is True,
        )

    def analyze_pair(self, biz_a: BusinessRecord, biz_b: BusinessRecord) -> List[RelationshipEdge]:
        """Analyze one pair. Request errors propagate to the caller."""
        prompt = build_analysis_prompt(biz_a, biz_b)
        response_text = self.client.complete_json(SYSTEM_PROMPT, prompt)
        result = parse_ai_response(response_text)

        mutual_benefit = result.get('mutual_benefit', False)
        edges = []
        for rel in result['relationships']:
            edge = self._to_edge(rel, (biz_a, biz_b), mutual_benefit)
            if edge.from_id == edge.to_id:
                logger.warning("Filtered out invalid self-relationship for %s", edge.from_name)
                self._self_edges_dropped += 1
                continue
            edges.append(edge)
        return edges

    def analyze_all(
        self,
        businesses: Sequence[BusinessRecord],
        existing: Optional[Sequence[BusinessRecord]] = None,
    ) -> AnalysisResult:
        """
        Analyze every pair for this run and collect the resulting edges.

        Full mode when `existing` is None; otherwise incremental mode, which only
        pairs businesses not yet in `existing` with the existing ones. A failing
        pair is logged and skipped, it never aborts the batch.
        """
        result = AnalysisResult()
        if existing is not None:
            result.new_businesses = new_businesses_since(businesses, existing)
            total = len(result.new_businesses) * len(existing)
        else:
            total = len(businesses) * (len(businesses) - 1) // 2

        self._self_edges_dropped = 0
        start = time.monotonic()

        for index, (biz_a, biz_b) in enumerate(pairs_for(businesses, existing), 1):
            result.pairs_total += 1
            self.console.print(f"\n[{index}/{total}] Analyzing:", markup=False)
            self.console.print(f"  📍 {biz_a.name} <-> {biz_b.name}", markup=False)

            try:
                edges = self.analyze_pair(biz_a, biz_b)
            except Exception as e:
                result.pairs_failed += 1
                logger.error("Error analyzing %s <-> %s: %s", biz_a.name, biz_b.name, e)
                self.console.print(f"  ❌ Error analyzing {biz_a.name} <-> {biz_b.name}: {e}", markup=False)
            else:
                result.pairs_succeeded += 1
                result.relationships.extend(edges)
                if edges:
                    self.console.print(f"  ✅ Found {len(edges)} relationship(s)")
                    for edge in edges:
                        self.console.print(
                            f"     {edge.type.upper()}: {edge.from_name} → {edge.to_name} ({edge.confidence}%)",
                            markup=False,
                        )
                else:
                    self.console.print("  ⚪ No strong relationships found")
            finally:
                self.sleep(self.rate_limit_delay)

        result.self_edges_dropped = self._self_edges_dropped
        result.duration = time.monotonic() - start
        return result
