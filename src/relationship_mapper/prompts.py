#!/usr/bin/env python3
"""
Prompt construction and response validation for pairwise relationship analysis
"""

import json
import logging
import re
from typing import Dict

from .exceptions import ResponseFormatError
from .models import BusinessRecord, RELATIONSHIP_TYPES

logger = logging.getLogger(__name__)

BUSINESS_A = 'Business A'
BUSINESS_B = 'Business B'

SYSTEM_PROMPT = (
    "You are an expert business consultant specializing in identifying strategic "
    "partnership opportunities. Analyze business profiles and return structured JSON "
    "data about potential relationships."
)

_CODE_FENCE = re.compile(r'```(?:json)?\s*\n?', re.I)


def _business_block(label: str, business: BusinessRecord) -> str:
    return f"""{label.upper()}:
Name: {business.name}
Contact: {business.contact_name or 'Not specified'}
Industry: {business.industry}
Description: {business.description}
Services: {business.services}
Target Market: {business.target_market}
Current Needs: {business.current_needs}"""


def build_analysis_prompt(business_a: BusinessRecord, business_b: BusinessRecord) -> str:
    """Create the user prompt asking the model to evaluate one pair of businesses."""
    prompt = f"""Analyze potential business relationships between these two businesses:

{_business_block(BUSINESS_A, business_a)}

{_business_block(BUSINESS_B, business_b)}

Evaluate ALL possible relationship types:
1. VENDOR: Could A provide services to B, or B to A? (directional)
2. PARTNER: Could they collaborate on joint offerings? (mutual)
3. REFERRAL: Do they serve similar customers without competing? (mutual)
4. COLLABORATION: Could they work together on projects/events? (mutual)
5. SUPPLY_CHAIN: Are their services sequential in a customer journey? (directional)
"""

    prompt += """
Return ONLY valid JSON with this exact structure:
{
  "relationships": [
    {
      "from": "Business A" or "Business B",
      "to": "Business A" or "Business B",
      "type": "vendor" | "partner" | "referral" | "collaboration" | "supply_chain",
      "confidence": 0-100 (integer),
      "reasoning": "2-3 sentences explaining why this relationship makes business sense",
      "value_prop": "Specific benefit (revenue potential, cost savings, market access)",
      "collaboration_example": "A concrete scenario of how this partnership would work in practice",
      "synergy_potential": "What makes this pairing special compared to a generic partnership",
      "action_items": ["Specific step 1", "Specific step 2", "Specific step 3"],
      "estimated_value": "high" | "medium" | "low"
    }
  ],
  "mutual_benefit": true or false
}

IMPORTANT:
- Only include relationships with confidence >= 50
- "from" and "to" must be different businesses
- Action items should be concrete, not generic advice
- If NO meaningful relationship exists, return an empty relationships array
"""
    return prompt


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence wrappers around a JSON document."""
    return _CODE_FENCE.sub('', text or '').replace('```', '').strip()


def validate_response(parsed) -> Dict:
    """Check the parsed document against the relationship schema. Raises ResponseFormatError."""
    if not isinstance(parsed, dict):
        raise ResponseFormatError("Invalid response structure: expected a JSON object")

    relationships = parsed.get('relationships')
    if not isinstance(relationships, list):
        raise ResponseFormatError("Invalid response structure: missing relationships array")

    for idx, rel in enumerate(relationships):
        if not isinstance(rel, dict):
            raise ResponseFormatError(f"Invalid relationship at index {idx}: not an object")

        confidence = rel.get('confidence')
        if not rel.get('from') or not rel.get('to') or not rel.get('type') \
                or isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise ResponseFormatError(f"Invalid relationship at index {idx}: missing required fields")

        if confidence < 0 or confidence > 100:
            raise ResponseFormatError(f"Invalid confidence score at index {idx}: {confidence}")

        if rel['type'] not in RELATIONSHIP_TYPES:
            raise ResponseFormatError(f"Invalid relationship type at index {idx}: {rel['type']!r}")

        if rel['from'] not in (BUSINESS_A, BUSINESS_B) or rel['to'] not in (BUSINESS_A, BUSINESS_B):
            raise ResponseFormatError(f"Invalid endpoints at index {idx}: {rel['from']!r} -> {rel['to']!r}")

    return parsed


def parse_ai_response(response_text: str) -> Dict:
    """
    Parse and validate the model's JSON reply.

    Any schema violation discards the whole reply: the result is an empty
    relationship list, never a partially accepted one.
    """
    try:
        parsed = json.loads(strip_code_fences(response_text))
        return validate_response(parsed)
    except (json.JSONDecodeError, ResponseFormatError) as e:
        logger.error("Failed to parse AI response: %s", e)
        logger.error("Raw response: %s...", (response_text or '')[:200])
        return {"relationships": [], "mutual_benefit": False}
