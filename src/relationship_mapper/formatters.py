"""Display formatting helpers shared by the CLI and the PDF report."""

from .models import BusinessRecord, CONFIDENCE_LEVELS, NOT_SPECIFIED, RELATIONSHIP_LABELS


def format_confidence(score: float) -> str:
    return f"{round(score)}%"


def get_confidence_level(score: float) -> str:
    if score >= CONFIDENCE_LEVELS['high']:
        return 'High'
    if score >= CONFIDENCE_LEVELS['medium']:
        return 'Medium'
    return 'Low'


def truncate_text(text: str, max_length: int = 100) -> str:
    if not text or len(text) <= max_length:
        return text
    return text[:max_length].strip() + '...'


def format_contact(business: BusinessRecord) -> str:
    """Join the available contact details, or say none are available."""
    parts = []
    if business.contact_name and business.contact_name != NOT_SPECIFIED:
        parts.append(business.contact_name)
    if business.contact_email:
        parts.append(business.contact_email)
    if business.contact_phone:
        parts.append(business.contact_phone)
    return ' • '.join(parts) if parts else 'Contact not available'


def capitalize_words(text: str) -> str:
    if not text:
        return ''
    return ' '.join(word[:1].upper() + word[1:].lower() for word in text.split(' '))


def format_type_label(relationship_type: str) -> str:
    return RELATIONSHIP_LABELS.get(relationship_type, capitalize_words(relationship_type.replace('_', ' ')))
